#!/usr/bin/env python3
"""
ugen namespace walker

This module walks the two-level ``/dev/usb/<vid>.<pid>/<instance>`` namespace
and resolves every instance to the device-tree node it links into, e.g.
``/dev/usb/a12.1/0/devstat -> /devices/pci@0,0/pci106b,3f@6/device@2:a12.1.devstat``
yields ``/pci@0,0/pci106b,3f@6/device@2``.
"""

import logging
import os
import re
from typing import Iterator, List, Optional

from devtree_usb.config import DiscoveryConfig
from devtree_usb.errors import DiscoveryError, ErrorCode, PathOverflowError

logger = logging.getLogger(__name__)

# Longest names the namespace is expected to hold; 9999 instances per group.
GROUP_NAME_TEMPLATE = "vvvv.pppp"
INSTANCE_NAME_TEMPLATE = "iiii"


class BoundedPath:
    """
    Path composer with a fixed capacity.

    Composition fails with PathOverflowError rather than truncating.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity

    def compose(self, *parts: str) -> str:
        """
        Join path parts with '/'.

        Args:
            parts: Path components, the first one may be absolute

        Returns:
            str: The composed path

        Raises:
            PathOverflowError: If the result is longer than the capacity
        """
        path = "/".join(parts)
        if len(path) > self.capacity:
            raise PathOverflowError(path, self.capacity)
        return path


class NamespaceWalker:
    """
    Walker producing canonical device-tree paths for every ugen instance.

    Only two conditions abort a walk: an unreadable root directory and an
    invalid group pattern. Everything else skips the offending entry.
    """

    def __init__(self, config: Optional[DiscoveryConfig] = None):
        """
        Initialize the walker.

        Args:
            config: Discovery settings. If None, the live system defaults are used.
        """
        self.config = config or DiscoveryConfig()
        self.dev_usb_root = self.config.dev_usb_root.rstrip("/") or "/"
        self.devices_root = self.config.devices_root.rstrip("/")
        self.witness_name = self.config.witness_name

        self._group_path = BoundedPath(
            len(self.dev_usb_root) + 1 + len(GROUP_NAME_TEMPLATE))
        self._witness_path = BoundedPath(
            self._group_path.capacity + 1 + len(INSTANCE_NAME_TEMPLATE)
            + 1 + len(self.witness_name))

    def _compile_pattern(self) -> "re.Pattern":
        try:
            return re.compile(self.config.group_pattern)
        except re.error as e:
            logger.error("failed to compile group pattern %r: %s",
                         self.config.group_pattern, e)
            raise DiscoveryError(ErrorCode.NO_MEM,
                                 f"invalid group pattern: {e}") from e

    def _list_root(self) -> List[str]:
        try:
            with os.scandir(self.dev_usb_root) as it:
                return sorted(entry.name for entry in it)
        except OSError as e:
            logger.error("opendir(\"%s\") failed: %s", self.dev_usb_root, e.strerror or e)
            raise DiscoveryError(ErrorCode.ACCESS,
                                 f"cannot open {self.dev_usb_root}: {e.strerror or e}") from e

    def discover(self) -> Iterator[str]:
        """
        Walk the namespace and yield canonical device-tree node paths.

        Returns:
            Iterator[str]: Node paths relative to the device-tree root,
            e.g. ``/pci@0,0/pci106b,3f@6/device@2``

        Raises:
            DiscoveryError: If the pattern is invalid or the root cannot be opened
        """
        pattern = self._compile_pattern()
        names = self._list_root()

        logger.debug("start browsing %s", self.dev_usb_root)
        for name in names:
            if not pattern.fullmatch(name):
                if not name.startswith("."):
                    logger.debug("skipping %s", name)
                continue

            logger.debug("found %s", name)
            yield from self._walk_group(name)
        logger.debug("stop browsing %s", self.dev_usb_root)

    def _walk_group(self, group_name: str) -> Iterator[str]:
        try:
            group_path = self._group_path.compose(self.dev_usb_root, group_name)
        except PathOverflowError as e:
            logger.error("group path: %s, skipping", e.message)
            return

        try:
            with os.scandir(group_path) as it:
                instances = sorted(entry.name for entry in it if not entry.name.startswith("."))
        except OSError as e:
            logger.error("opendir(\"%s\") failed: %s, skipping", group_path, e.strerror or e)
            return

        logger.debug("start browsing %s", group_path)
        for instance in instances:
            logger.debug("found instance %s", instance)
            logger.info("found ugen device %s/%s", group_path, instance)

            node_path = self.resolve_instance(group_path, instance)
            if node_path is not None:
                yield node_path
        logger.debug("stop browsing %s", group_path)

    def resolve_instance(self, group_path: str, instance: str) -> Optional[str]:
        """
        Resolve one instance directory to its device-tree node path.

        Args:
            group_path: Path of the vendor.product group directory
            instance: Name of the instance entry inside the group

        Returns:
            Optional[str]: The node path, or None if the instance was skipped
        """
        try:
            witness_path = self._witness_path.compose(group_path, instance, self.witness_name)
        except PathOverflowError as e:
            logger.error("witness path: %s, skipping", e.message)
            return None

        try:
            device_path = os.path.realpath(witness_path, strict=True)
        except OSError as e:
            logger.error("realpath() for \"%s\" failed: %s", witness_path, e.strerror or e)
            return None

        logger.debug("device path \"%s\"", device_path)
        return self.to_node_path(device_path)

    def to_node_path(self, device_path: str) -> Optional[str]:
        """
        Turn a resolved witness path into a device-tree node path.

        Strips the device-tree root prefix and the ``:minor`` suffix.

        Args:
            device_path: Canonical path of the witness file

        Returns:
            Optional[str]: The node path, or None if the path is not under
            the device-tree root
        """
        if not device_path.startswith(self.devices_root + "/"):
            logger.warning("\"%s\" is not under %s, skipping", device_path, self.devices_root)
            return None

        node_path = device_path[len(self.devices_root):]
        node_path, colon, _minor = node_path.partition(":")
        if not colon:
            logger.warning("no colon in device node path \"%s\"", node_path)
        return node_path
