#!/usr/bin/env python3
"""
Identity resolver

Turns a device-tree node path into a DeviceIdentity by reading the node's
``assigned-address``, ``usb-num-configs`` and ``*-speed`` properties and the
device address encoded after the last ``@`` of the path.
"""

import logging
import re
from typing import List, Optional, Tuple

from devtree_usb.devices.DeviceIdentity import (
    DeviceIdentity, UsbSpeed, MAX_BUS_NUMBER, MAX_DEVICE_ADDRESS,
)
from devtree_usb.devinfo.PropertySource import DeviceNode, PropertyLookup, PropertySource, PropertyStatus
from devtree_usb.errors import DevinfoError

logger = logging.getLogger(__name__)

BUS_NUMBER_PROPERTY = "assigned-address"
NUM_CONFIGS_PROPERTY = "usb-num-configs"

# First present property wins; no property at all means full speed.
SPEED_PROPERTIES: List[Tuple[str, UsbSpeed]] = [
    ("low-speed", UsbSpeed.LOW),
    ("full-speed", UsbSpeed.FULL),
    ("high-speed", UsbSpeed.HIGH),
    ("super-speed", UsbSpeed.SUPER),  # classification only
]
DEFAULT_SPEED = UsbSpeed.FULL

_LEADING_INT = re.compile(r"[ \t\n\r\f\v]*([+-]?[0-9]+)")


def parse_leading_int(text: str) -> int:
    """
    Parse the integer prefix of a string the way atoi() does.

    Args:
        text: Text starting with an optional sign and digits

    Returns:
        int: The parsed prefix, or 0 if there is none
    """
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_device_address(node_path: str) -> Optional[int]:
    """
    Extract the device address, the number after the last '@' of a node path.

    In "/pci@0,0/pci106b,3f@6/device@2" the device address is 2.

    Args:
        node_path: Device-tree node path

    Returns:
        Optional[int]: The address, or None if the path has no '@'
    """
    at = node_path.rfind("@")
    if at < 0:
        return None
    return parse_leading_int(node_path[at + 1:])


def prop_get_int(node: DeviceNode, name: str) -> PropertyLookup:
    """Look up an integer property, tracing the outcome"""
    logger.debug("looking for \"%s\" property", name)

    lookup = node.lookup_ints(name)
    status = lookup.status
    if status is PropertyStatus.FOUND:
        logger.debug("found %s = %d", name, lookup.value)
    elif status is PropertyStatus.EMPTY:
        logger.debug("property \"%s\" is empty", name)
    elif status is PropertyStatus.ABSENT:
        logger.debug("failed to get property \"%s\": %s", name, lookup.error or "not found")
    else:
        logger.debug("got %d values of \"%s\"", lookup.count, name)
    return lookup


def classify_speed(node: DeviceNode) -> UsbSpeed:
    """
    Classify device speed from the node's speed properties.

    Args:
        node: Open device node

    Returns:
        UsbSpeed: Speed of the first present property, FULL if none is present
    """
    for name, speed in SPEED_PROPERTIES:
        if prop_get_int(node, name).is_present:
            return speed
    return DEFAULT_SPEED


class IdentityResolver:
    """
    Resolver deriving device identities from device-tree nodes.

    Every failure discards the candidate with a logged diagnostic; resolve()
    never raises for a bad node.
    """

    def __init__(self, source: PropertySource, strict_num_configs: bool = False):
        """
        Initialize the resolver.

        Args:
            source: Property source used to open nodes
            strict_num_configs: If True, a node without a usable config count is
                discarded instead of defaulting to one configuration
        """
        self.source = source
        self.strict_num_configs = strict_num_configs

    def resolve(self, node_path: str) -> Optional[DeviceIdentity]:
        """
        Derive the identity of the device at a node path.

        Args:
            node_path: Node path relative to the device-tree root

        Returns:
            Optional[DeviceIdentity]: The identity, or None if the node was discarded
        """
        logger.info("device node \"%s\"", node_path)

        try:
            node = self.source.open(node_path)
        except (DevinfoError, OSError) as e:
            logger.error("opening device node failed: %s, skipping", e)
            return None

        with node:
            return self._resolve_node(node, node_path)

    def _resolve_node(self, node: DeviceNode, node_path: str) -> Optional[DeviceIdentity]:
        bus = prop_get_int(node, BUS_NUMBER_PROPERTY)
        if bus.status is not PropertyStatus.FOUND:
            logger.warning("no usable \"%s\" on %s, skipping", BUS_NUMBER_PROPERTY, node_path)
            return None
        bus_number = bus.value

        num_configs = self._num_configs(node, node_path)
        if num_configs is None:
            return None

        speed = classify_speed(node)

        device_address = parse_device_address(node_path)
        if device_address is None:
            logger.error("failed to parse device node %s to device address, skipping", node_path)
            return None

        if not 0 <= bus_number <= MAX_BUS_NUMBER or not 0 <= device_address <= MAX_DEVICE_ADDRESS:
            logger.error("busnum %d devaddr %d do not fit a session id, skipping",
                         bus_number, device_address)
            return None

        identity = DeviceIdentity.create(bus_number, device_address, num_configs, speed, node_path)
        logger.debug("busnum %d devaddr %d session_id %u", bus_number, device_address,
                     identity.session_id)
        return identity

    def _num_configs(self, node: DeviceNode, node_path: str) -> Optional[int]:
        lookup = prop_get_int(node, NUM_CONFIGS_PROPERTY)
        if lookup.status is PropertyStatus.FOUND:
            if lookup.value < 1:
                logger.warning("%s reports %d configurations, assuming 1", node_path, lookup.value)
                return 1
            return lookup.value

        if self.strict_num_configs:
            logger.warning("no usable \"%s\" on %s, skipping", NUM_CONFIGS_PROPERTY, node_path)
            return None
        logger.warning("no usable \"%s\" on %s, assuming 1", NUM_CONFIGS_PROPERTY, node_path)
        return 1
