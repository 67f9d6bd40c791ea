"""
Platform backends and runtime backend selection.
"""

import sys
from typing import Dict, Optional, Type

from devtree_usb.backend.UsbBackend import UsbBackend, ClockId
from devtree_usb.backend.SolarisBackend import SolarisBackend
from devtree_usb.backend.NullBackend import NullBackend
from devtree_usb.config import DiscoveryConfig

BACKENDS: Dict[str, Type[UsbBackend]] = {
    "solaris": SolarisBackend,
    "null": NullBackend,
}


def backend_name_for_platform(platform: str) -> str:
    """Name of the backend serving a sys.platform value"""
    if platform.startswith("sunos"):
        return "solaris"
    return "null"


def get_backend(platform: Optional[str] = None, config: Optional[DiscoveryConfig] = None) -> UsbBackend:
    """
    Create the backend for a platform.

    Args:
        platform: Platform name as in sys.platform. If None, the running platform is used.
        config: Discovery settings; config.backend overrides the platform choice,
            and a configured snapshot_root selects the Solaris backend

    Returns:
        UsbBackend: The selected backend

    Raises:
        ValueError: If config.backend names an unknown backend
    """
    config = config or DiscoveryConfig()
    if config.backend:
        name = config.backend
    elif config.snapshot_root:
        # a property snapshot can only be read by the Solaris walker
        name = "solaris"
    else:
        name = backend_name_for_platform(platform or sys.platform)
    if name not in BACKENDS:
        raise ValueError(f"unknown backend '{name}', expected one of {', '.join(sorted(BACKENDS))}")

    backend_cls = BACKENDS[name]
    if backend_cls is SolarisBackend:
        return SolarisBackend(config)
    return backend_cls()
