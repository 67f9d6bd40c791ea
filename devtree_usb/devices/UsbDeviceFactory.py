#!/usr/bin/env python3
"""
USB Device Factory

This module provides a factory class that runs discovery passes through the
platform backend and keeps the resulting DeviceIdentity records indexed by
session id, bus and speed.
"""

import logging
from typing import Dict, List, Optional

import pandas as pd

from devtree_usb.backend import get_backend
from devtree_usb.backend.UsbBackend import UsbBackend
from devtree_usb.config import DiscoveryConfig
from devtree_usb.devices.DeviceIdentity import DeviceIdentity, DiscoveredDevices, UsbSpeed, make_session_id
from devtree_usb.errors import DiscoveryError

logger = logging.getLogger(__name__)

DATAFRAME_COLUMNS = ['session_id', 'bus_number', 'device_address', 'num_configs', 'speed', 'node_path']


class UsbDeviceFactory:
    """
    Factory class for discovering and looking up USB devices.

    A fatal discovery error leaves the factory with no devices and the
    error in last_error; it is never raised to the caller.
    """

    def __init__(self, config: Optional[DiscoveryConfig] = None, backend: Optional[UsbBackend] = None):
        """
        Initialize the UsbDeviceFactory.

        Args:
            config: Discovery settings. If None, the live system defaults are used.
            backend: Backend to discover with. If None, one is selected for the platform.
        """
        self.config = config or DiscoveryConfig()
        self.backend = backend or get_backend(config=self.config)
        self.last_error: Optional[DiscoveryError] = None

        # Caches for device objects
        self._devices_by_session_id = None
        self._devices_by_bus = None

    def clear_cache(self):
        """
        Clear all device caches.
        Call this method when you want to ensure fresh device data.
        """
        self._devices_by_session_id = None
        self._devices_by_bus = None

    def discover(self) -> List[DeviceIdentity]:
        """
        Run one discovery pass through the backend.

        Returns:
            List[DeviceIdentity]: Devices found in this pass, empty on a fatal error
        """
        discovered = DiscoveredDevices()
        self.last_error = None
        try:
            status = self.backend.get_device_list(discovered)
        except DiscoveryError as e:
            logger.error("device discovery failed: %s", e)
            self.last_error = e
            return []

        logger.info("%s: %d devices found, pass ended with %s",
                    self.backend.name, len(discovered), status.name)
        return list(discovered)

    def get_all_devices(self, refresh: bool = False) -> Dict[int, DeviceIdentity]:
        """
        Get all devices indexed by session id.

        Args:
            refresh: Whether to refresh the device cache

        Returns:
            Dict[int, DeviceIdentity]: Devices keyed by session id
        """
        if refresh:
            self.clear_cache()

        if self._devices_by_session_id is not None:
            return self._devices_by_session_id

        result = {}
        for device in self.discover():
            if device.session_id in result:
                logger.warning("session id %#06x seen twice (%s, %s), keeping the first",
                               device.session_id, result[device.session_id].node_path, device.node_path)
                continue
            result[device.session_id] = device

        self._devices_by_session_id = result
        return result

    def get_devices_by_bus(self, refresh: bool = False) -> Dict[int, List[DeviceIdentity]]:
        """
        Get all devices grouped by bus number.

        Args:
            refresh: Whether to refresh the device cache

        Returns:
            Dict[int, List[DeviceIdentity]]: Devices per bus, ordered by address
        """
        if refresh:
            self.clear_cache()

        if self._devices_by_bus is not None:
            return self._devices_by_bus

        result = {}
        for session_id, device in sorted(self.get_all_devices().items()):
            result.setdefault(device.bus_number, []).append(device)

        self._devices_by_bus = result
        return result

    def get_device_by_session_id(self, session_id: int) -> Optional[DeviceIdentity]:
        """
        Get a specific device by its session id.

        Args:
            session_id: The packed (bus << 8) | address identifier

        Returns:
            Optional[DeviceIdentity]: The device if found, None otherwise
        """
        return self.get_all_devices().get(session_id)

    def get_device(self, bus_number: int, device_address: int) -> Optional[DeviceIdentity]:
        """
        Get a specific device by bus number and device address.

        Args:
            bus_number: USB bus number
            device_address: Device address on the bus

        Returns:
            Optional[DeviceIdentity]: The device if found, None otherwise
        """
        try:
            session_id = make_session_id(bus_number, device_address)
        except ValueError:
            return None
        return self.get_device_by_session_id(session_id)

    def get_devices_by_speed(self, speed: UsbSpeed) -> List[DeviceIdentity]:
        """
        Get all devices of one speed class.

        Args:
            speed: The speed to filter on

        Returns:
            List[DeviceIdentity]: Matching devices ordered by session id
        """
        devices = self.get_all_devices()
        return [devices[sid] for sid in sorted(devices) if devices[sid].speed == speed]

    def to_dataframe(self) -> pd.DataFrame:
        """
        Tabulate the discovered devices.

        Returns:
            pd.DataFrame: One row per device, sorted by session id
        """
        devices = self.get_all_devices()
        rows = [devices[sid].to_dict() for sid in sorted(devices)]
        return pd.DataFrame(rows, columns=DATAFRAME_COLUMNS)

    def print_device_summary(self):
        """Print a summary of all discovered USB devices."""
        devices = self.get_all_devices()

        if not devices:
            if self.last_error is not None:
                print(f"Device discovery failed: {self.last_error}")
            else:
                print("No USB devices found.")
            return

        print(f"Found {len(devices)} USB devices:")
        print("==================================")

        for bus_number, bus_devices in self.get_devices_by_bus().items():
            print(f"Bus {bus_number:03d}:")
            for device in bus_devices:
                print(f"  Device {device.device_address:03d}: "
                      f"session {device.session_id:#06x}, {device.speed.name.lower()} speed, "
                      f"{device.num_configs} config(s)")
                print(f"    Node: {device.node_path}")
            print()
