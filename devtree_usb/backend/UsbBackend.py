#!/usr/bin/env python3
"""
USB backend interface

Every platform variant implements the same set of operations. Discovery is
the only one the Solaris variant actually performs; device handles,
descriptors, configuration and transfers report that no device is present.
"""

from abc import ABC, abstractmethod
from enum import IntEnum

from devtree_usb.devices.DeviceIdentity import DiscoveredDevices
from devtree_usb.errors import ErrorCode, UsbError


class ClockId(IntEnum):
    """Clocks available through clock_gettime()"""
    MONOTONIC = 0
    REALTIME = 1


class UsbBackend(ABC):
    """
    Base class for platform backends.

    Unimplemented device operations raise UsbError with
    ErrorCode.NOT_SUPPORTED; subclasses override what their platform offers.
    """

    name = "abstract backend"

    @abstractmethod
    def get_device_list(self, discovered: DiscoveredDevices) -> ErrorCode:
        """
        Run one discovery pass.

        Args:
            discovered: Collection receiving every identity found in the pass

        Returns:
            ErrorCode: Terminal status of the pass

        Raises:
            DiscoveryError: If the pass cannot run at all
        """

    def _unsupported(self, operation: str):
        raise UsbError(ErrorCode.NOT_SUPPORTED, f"{operation} is not supported by the {self.name}")

    def open(self, handle) -> None:
        self._unsupported("open")

    def close(self, handle) -> None:
        pass

    def get_device_descriptor(self, device) -> bytes:
        self._unsupported("get_device_descriptor")

    def get_active_config_descriptor(self, device, length: int) -> bytes:
        self._unsupported("get_active_config_descriptor")

    def get_config_descriptor(self, device, config_index: int, length: int) -> bytes:
        self._unsupported("get_config_descriptor")

    def get_configuration(self, handle) -> int:
        self._unsupported("get_configuration")

    def set_configuration(self, handle, config: int) -> None:
        self._unsupported("set_configuration")

    def claim_interface(self, handle, interface: int) -> None:
        self._unsupported("claim_interface")

    def release_interface(self, handle, interface: int) -> None:
        self._unsupported("release_interface")

    def set_interface_altsetting(self, handle, interface: int, altsetting: int) -> None:
        self._unsupported("set_interface_altsetting")

    def clear_halt(self, handle, endpoint: int) -> None:
        self._unsupported("clear_halt")

    def reset_device(self, handle) -> None:
        self._unsupported("reset_device")

    def kernel_driver_active(self, handle, interface: int) -> bool:
        self._unsupported("kernel_driver_active")

    def detach_kernel_driver(self, handle, interface: int) -> None:
        self._unsupported("detach_kernel_driver")

    def attach_kernel_driver(self, handle, interface: int) -> None:
        self._unsupported("attach_kernel_driver")

    def destroy_device(self, device) -> None:
        pass

    def submit_transfer(self, transfer) -> None:
        self._unsupported("submit_transfer")

    def cancel_transfer(self, transfer) -> None:
        self._unsupported("cancel_transfer")

    def clear_transfer_priv(self, transfer) -> None:
        pass

    def handle_events(self, fds, num_ready: int) -> None:
        self._unsupported("handle_events")

    def clock_gettime(self, clock_id: int) -> float:
        self._unsupported("clock_gettime")
