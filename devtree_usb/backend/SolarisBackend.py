#!/usr/bin/env python3
"""
Synchronous Solaris backend

Discovers ugen devices through the /dev/usb namespace and libdevinfo.
Opening devices and transfers are not available; those operations report
that no device is present.
"""

import logging
import time
from typing import Optional

from devtree_usb.backend.UsbBackend import ClockId, UsbBackend
from devtree_usb.config import DiscoveryConfig
from devtree_usb.devices.DeviceIdentity import DiscoveredDevices
from devtree_usb.devices.IdentityResolver import IdentityResolver
from devtree_usb.devices.NamespaceWalker import NamespaceWalker
from devtree_usb.devinfo.PropertySource import PropertySource
from devtree_usb.errors import DevinfoError, DiscoveryError, ErrorCode, UsbError

logger = logging.getLogger(__name__)

_CLOCKS = {
    ClockId.REALTIME: time.CLOCK_REALTIME,
    ClockId.MONOTONIC: time.CLOCK_MONOTONIC,
}


def _no_device(operation: str):
    raise UsbError(ErrorCode.NO_DEVICE, f"{operation}: no device")


class SolarisBackend(UsbBackend):
    """Backend for Solaris/illumos ugen devices"""

    name = "Synchronous Solaris backend"

    def __init__(self, config: Optional[DiscoveryConfig] = None,
                 source: Optional[PropertySource] = None):
        """
        Initialize the backend.

        Args:
            config: Discovery settings. If None, the live system defaults are used.
            source: Property source for device nodes. If None, one is created from
                the config on first discovery (snapshot if configured, else libdevinfo).
        """
        self.config = config or DiscoveryConfig()
        self._source = source

    @property
    def source(self) -> PropertySource:
        if self._source is None:
            if self.config.snapshot_root:
                from devtree_usb.devinfo.SnapshotSource import SnapshotSource
                self._source = SnapshotSource(self.config.snapshot_root)
            else:
                from devtree_usb.devinfo.LibDevinfo import LibDevinfoSource
                self._source = LibDevinfoSource()
        return self._source

    def get_device_list(self, discovered: DiscoveredDevices) -> ErrorCode:
        try:
            source = self.source
        except DevinfoError as e:
            logger.error("no device-tree property source: %s", e.message)
            raise DiscoveryError(ErrorCode.NOT_SUPPORTED, e.message) from e

        walker = NamespaceWalker(self.config)
        resolver = IdentityResolver(source, strict_num_configs=self.config.strict_num_configs)

        for node_path in walker.discover():
            identity = resolver.resolve(node_path)
            if identity is not None:
                discovered.append(identity)

        logger.debug("discovery pass found %d devices", len(discovered))
        return ErrorCode.NO_DEVICE

    def open(self, handle) -> None:
        _no_device("open")

    def get_device_descriptor(self, device) -> bytes:
        _no_device("get_device_descriptor")

    def get_active_config_descriptor(self, device, length: int) -> bytes:
        _no_device("get_active_config_descriptor")

    def get_config_descriptor(self, device, config_index: int, length: int) -> bytes:
        _no_device("get_config_descriptor")

    def get_configuration(self, handle) -> int:
        _no_device("get_configuration")

    def set_configuration(self, handle, config: int) -> None:
        _no_device("set_configuration")

    def claim_interface(self, handle, interface: int) -> None:
        _no_device("claim_interface")

    def release_interface(self, handle, interface: int) -> None:
        _no_device("release_interface")

    def set_interface_altsetting(self, handle, interface: int, altsetting: int) -> None:
        _no_device("set_interface_altsetting")

    def clear_halt(self, handle, endpoint: int) -> None:
        _no_device("clear_halt")

    def reset_device(self, handle) -> None:
        _no_device("reset_device")

    def submit_transfer(self, transfer) -> None:
        _no_device("submit_transfer")

    def cancel_transfer(self, transfer) -> None:
        logger.debug("cancel_transfer")
        raise UsbError(ErrorCode.NOT_SUPPORTED, "cancel_transfer is not supported")

    def handle_events(self, fds, num_ready: int) -> None:
        _no_device("handle_events")

    def clock_gettime(self, clock_id: int) -> float:
        """
        Read a clock.

        Args:
            clock_id: ClockId.REALTIME or ClockId.MONOTONIC

        Returns:
            float: Clock value in seconds

        Raises:
            UsbError: INVALID_PARAM for any other clock
        """
        logger.debug("clock %d", clock_id)
        try:
            clock = _CLOCKS[ClockId(clock_id)]
        except ValueError:
            raise UsbError(ErrorCode.INVALID_PARAM, f"unknown clock {clock_id}") from None
        return time.clock_gettime(clock)
