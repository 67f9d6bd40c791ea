#!/usr/bin/env python3
"""
Null backend for platforms without USB support.
"""

from devtree_usb.backend.UsbBackend import UsbBackend
from devtree_usb.devices.DeviceIdentity import DiscoveredDevices
from devtree_usb.errors import ErrorCode


class NullBackend(UsbBackend):
    """Backend that never finds a device"""

    name = "null backend"

    def get_device_list(self, discovered: DiscoveredDevices) -> ErrorCode:
        return ErrorCode.NO_DEVICE
