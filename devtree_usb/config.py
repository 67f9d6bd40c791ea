"""
Discovery configuration.

All settings have defaults matching the Solaris/illumos ugen layout, so
``DiscoveryConfig()`` describes a live system. Tests and offline tools
override the roots to point at a synthetic tree or a property snapshot.
"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_DEV_USB_ROOT = "/dev/usb"
DEFAULT_DEVICES_ROOT = "/devices"
DEFAULT_WITNESS_NAME = "devstat"
DEFAULT_GROUP_PATTERN = r"[0-9a-f]+\.[0-9a-f]+"


@dataclass
class DiscoveryConfig:
    """Settings for one discovery pass"""
    dev_usb_root: str = DEFAULT_DEV_USB_ROOT
    devices_root: str = DEFAULT_DEVICES_ROOT
    witness_name: str = DEFAULT_WITNESS_NAME
    group_pattern: str = DEFAULT_GROUP_PATTERN
    snapshot_root: Optional[str] = None  # property snapshot instead of libdevinfo
    strict_num_configs: bool = False
    backend: Optional[str] = None  # None selects by platform
