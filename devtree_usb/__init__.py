"""
devtree-usb

Discovery of USB devices through the Solaris/illumos device tree: walks the
/dev/usb ugen namespace and derives a session identity for every device.
"""

__version__ = "0.1.0"

# Import main classes for easier access
from devtree_usb.devices.DeviceIdentity import DeviceIdentity, UsbSpeed
from devtree_usb.devices.NamespaceWalker import NamespaceWalker
from devtree_usb.devices.IdentityResolver import IdentityResolver
from devtree_usb.devices.UsbDeviceFactory import UsbDeviceFactory
from devtree_usb.backend import get_backend
from devtree_usb.config import DiscoveryConfig
from devtree_usb.errors import ErrorCode, UsbError, DiscoveryError
