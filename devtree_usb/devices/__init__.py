"""
Device discovery and identity derivation.
"""

# Import classes for direct use
from devtree_usb.devices.DeviceIdentity import DeviceIdentity, DiscoveredDevices, UsbSpeed
from devtree_usb.devices.NamespaceWalker import NamespaceWalker, BoundedPath
from devtree_usb.devices.IdentityResolver import IdentityResolver
from devtree_usb.devices.UsbDeviceFactory import UsbDeviceFactory
