#!/usr/bin/env python3
"""
USB device identity records

This module provides the immutable identity record produced for every
resolved device-tree node, the speed classification and the per-pass
collection handed to a backend.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Any, Iterator, List

# Largest value that fits a byte of the packed session id
MAX_BUS_NUMBER = 0xff
MAX_DEVICE_ADDRESS = 0xff


class UsbSpeed(IntEnum):
    """Device speed classes, numbered as in libusb."""
    UNKNOWN = 0
    LOW = 1
    FULL = 2
    HIGH = 3
    SUPER = 4


def make_session_id(bus_number: int, device_address: int) -> int:
    """
    Pack a bus number and device address into a session identifier.

    Args:
        bus_number: USB bus number (0-255)
        device_address: Device address on the bus (0-255)

    Returns:
        int: ``(bus_number << 8) | device_address``

    Raises:
        ValueError: If either value does not fit in 8 bits
    """
    if not 0 <= bus_number <= MAX_BUS_NUMBER:
        raise ValueError(f"bus number {bus_number} out of range 0-{MAX_BUS_NUMBER}")
    if not 0 <= device_address <= MAX_DEVICE_ADDRESS:
        raise ValueError(f"device address {device_address} out of range 0-{MAX_DEVICE_ADDRESS}")
    return bus_number << 8 | device_address


@dataclass(frozen=True)
class DeviceIdentity:
    """Identity of one USB device derived from its device-tree node"""
    session_id: int
    bus_number: int
    device_address: int
    num_configs: int = 1
    speed: UsbSpeed = UsbSpeed.FULL
    node_path: str = ""

    def __post_init__(self):
        expected = make_session_id(self.bus_number, self.device_address)
        if self.session_id != expected:
            raise ValueError(f"session id {self.session_id:#x} does not match "
                             f"bus {self.bus_number} address {self.device_address}")
        if self.num_configs < 1:
            raise ValueError(f"num_configs must be at least 1, got {self.num_configs}")

    @classmethod
    def create(cls, bus_number: int, device_address: int, num_configs: int = 1,
               speed: UsbSpeed = UsbSpeed.FULL, node_path: str = "") -> "DeviceIdentity":
        """
        Build an identity, computing the session id from bus and address.

        Args:
            bus_number: USB bus number
            device_address: Device address on the bus
            num_configs: Number of configurations
            speed: Speed classification
            node_path: Device-tree node the identity was derived from

        Returns:
            DeviceIdentity: The new record
        """
        return cls(session_id=make_session_id(bus_number, device_address),
                   bus_number=bus_number,
                   device_address=device_address,
                   num_configs=num_configs,
                   speed=speed,
                   node_path=node_path)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the identity to a dictionary.

        Returns:
            Dict[str, Any]: JSON-serialisable representation of the device
        """
        return {
            'session_id': self.session_id,
            'bus_number': self.bus_number,
            'device_address': self.device_address,
            'num_configs': self.num_configs,
            'speed': self.speed.name.lower(),
            'node_path': self.node_path,
        }

    def __str__(self) -> str:
        return (f"USB device {self.bus_number:03d}:{self.device_address:03d} "
                f"(session {self.session_id:#06x})\n"
                f"  Node:     {self.node_path}\n"
                f"  Speed:    {self.speed.name.lower()}\n"
                f"  Configs:  {self.num_configs}")


@dataclass
class DiscoveredDevices:
    """Devices collected by a backend during one discovery pass"""
    devices: List[DeviceIdentity] = field(default_factory=list)

    def append(self, identity: DeviceIdentity) -> None:
        self.devices.append(identity)

    def __len__(self) -> int:
        return len(self.devices)

    def __iter__(self) -> Iterator[DeviceIdentity]:
        return iter(self.devices)
