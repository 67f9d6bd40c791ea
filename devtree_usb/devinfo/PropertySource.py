#!/usr/bin/env python3
"""
Device-tree property access

Common interface for reading typed integer properties from device-tree
nodes. Concrete sources live in LibDevinfo (live system) and SnapshotSource
(directory snapshot).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class PropertyStatus(Enum):
    """Outcome of an integer property lookup"""
    FOUND = "found"          # exactly one value
    EMPTY = "empty"          # property exists without a value
    MULTIPLE = "multiple"    # more than one value
    ABSENT = "absent"        # missing, or the lookup failed


@dataclass(frozen=True)
class PropertyLookup:
    """Raw result of di_prop_lookup_ints(): a value count and the values"""
    name: str
    count: int
    values: Tuple[int, ...] = ()
    error: Optional[str] = None

    @property
    def status(self) -> PropertyStatus:
        if self.count == 1:
            return PropertyStatus.FOUND
        if self.count == 0:
            return PropertyStatus.EMPTY
        if self.count > 1:
            return PropertyStatus.MULTIPLE
        return PropertyStatus.ABSENT

    @property
    def is_present(self) -> bool:
        return self.count >= 0

    @property
    def value(self) -> Optional[int]:
        return self.values[0] if self.count == 1 else None


class DeviceNode(ABC):
    """
    Open handle on the properties of one device-tree node.

    Use as a context manager; the handle is released on exit.
    """

    def __init__(self, node_path: str):
        self.node_path = node_path
        self.closed = False

    @abstractmethod
    def lookup_ints(self, name: str) -> PropertyLookup:
        """
        Look up an integer-array property.

        Args:
            name: Property name, e.g. "assigned-address"

        Returns:
            PropertyLookup: Count and values; a negative count means absent
        """

    def _release(self) -> None:
        pass

    def close(self) -> None:
        if not self.closed:
            self._release()
            self.closed = True

    def __enter__(self) -> "DeviceNode":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class PropertySource(ABC):
    """Factory of DeviceNode handles"""

    @abstractmethod
    def open(self, node_path: str) -> DeviceNode:
        """
        Open a device-tree node.

        Args:
            node_path: Node path relative to the device-tree root

        Returns:
            DeviceNode: An open node handle

        Raises:
            DevinfoError: If the node is missing or unreadable
        """
