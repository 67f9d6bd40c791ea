#!/usr/bin/env python3
"""
Device-tree property snapshot

Reads node properties from a directory tree laid out like the device tree:
``<root>/pci@0,0/pci106b,3f@6/device@2/assigned-address`` holds the value(s)
of the ``assigned-address`` property of node ``/pci@0,0/pci106b,3f@6/device@2``.
Values are whitespace-separated integers, decimal or ``0x`` hex. An empty
file is a property without a value.
"""

import logging
import os

from devtree_usb.devinfo.PropertySource import DeviceNode, PropertyLookup, PropertySource
from devtree_usb.errors import DevinfoError

logger = logging.getLogger(__name__)


class SnapshotNode(DeviceNode):
    """Node backed by a snapshot directory"""

    def __init__(self, node_path: str, node_dir: str):
        super().__init__(node_path)
        self.node_dir = node_dir

    def lookup_ints(self, name: str) -> PropertyLookup:
        prop_file = os.path.join(self.node_dir, name)
        try:
            with open(prop_file, 'rb') as f:
                data = f.read()
        except FileNotFoundError:
            return PropertyLookup(name, -1, error="no such property")
        except OSError as e:
            return PropertyLookup(name, -1, error=e.strerror or str(e))

        try:
            values = tuple(int(token, 0) for token in data.decode('ascii').split())
        except ValueError:  # includes UnicodeDecodeError
            logger.warning("property \"%s\" of %s is not an integer array", name, self.node_path)
            return PropertyLookup(name, -1, error="not an integer property")
        return PropertyLookup(name, len(values), values)


class SnapshotSource(PropertySource):
    """
    Property source reading a snapshot directory.

    Args:
        root: Directory standing in for the device-tree root
    """

    def __init__(self, root: str):
        self.root = root

    def open(self, node_path: str) -> SnapshotNode:
        node_dir = os.path.join(self.root, node_path.lstrip("/"))
        if not os.path.isdir(node_dir):
            raise DevinfoError(f"no node {node_path} under {self.root}")
        return SnapshotNode(node_path, node_dir)
