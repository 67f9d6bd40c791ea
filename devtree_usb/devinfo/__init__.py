"""
Device-tree property sources.
"""

from devtree_usb.devinfo.PropertySource import PropertySource, DeviceNode, PropertyLookup, PropertyStatus
from devtree_usb.devinfo.SnapshotSource import SnapshotSource
from devtree_usb.devinfo.LibDevinfo import LibDevinfoSource
