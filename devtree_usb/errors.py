"""
Error codes and exceptions shared by the discovery pipeline and the backends.

The numeric codes follow libusb so callers familiar with it can map them
directly.
"""

from enum import IntEnum
from typing import Optional


class ErrorCode(IntEnum):
    """libusb-compatible status codes."""
    SUCCESS = 0
    IO = -1
    INVALID_PARAM = -2
    ACCESS = -3
    NO_DEVICE = -4
    NOT_FOUND = -5
    BUSY = -6
    TIMEOUT = -7
    OVERFLOW = -8
    PIPE = -9
    INTERRUPTED = -10
    NO_MEM = -11
    NOT_SUPPORTED = -12
    OTHER = -99


class UsbError(RuntimeError):
    """
    Base error carrying an ErrorCode.

    Args:
        code: The status code describing the failure
        message: Optional human-readable detail
    """

    def __init__(self, code: ErrorCode, message: Optional[str] = None):
        self.code = ErrorCode(code)
        self.message = message or self.code.name
        super().__init__(f"{self.message} ({self.code.name})")


class DiscoveryError(UsbError):
    """Fatal discovery failure; no devices can be reported for the pass."""


class PathOverflowError(UsbError):
    """A composed path does not fit its declared capacity."""

    def __init__(self, path: str, capacity: int):
        self.path = path
        self.capacity = capacity
        super().__init__(ErrorCode.OVERFLOW,
                         f"path '{path}' exceeds {capacity} characters")


class DevinfoError(UsbError):
    """Failure of the device-tree property source."""

    def __init__(self, message: str, errno: Optional[int] = None):
        self.errno = errno
        super().__init__(ErrorCode.IO, message)
