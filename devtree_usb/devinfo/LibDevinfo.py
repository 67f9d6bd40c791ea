#!/usr/bin/env python3
"""
libdevinfo binding

ctypes wrapper around the Solaris/illumos libdevinfo(3LIB) calls needed to
read node properties: di_init(), di_prop_lookup_ints() and di_fini().
"""

import ctypes
import ctypes.util
import logging
import os
from typing import Optional

from devtree_usb.devinfo.PropertySource import DeviceNode, PropertyLookup, PropertySource
from devtree_usb.errors import DevinfoError

logger = logging.getLogger(__name__)

# <sys/devinfo_impl.h>
DIIOC = 0xdf << 8
DINFOPROP = DIIOC | 0x04

# <sys/sunddi.h>: DDI_DEV_T_ANY is (dev_t)-2
DDI_DEV_T_ANY = ctypes.c_ulong(-2).value

di_node_t = ctypes.c_void_p


def load_libdevinfo(name: Optional[str] = None) -> ctypes.CDLL:
    """
    Load libdevinfo and declare the prototypes used here.

    Args:
        name: Library name or path. If None, it is located with find_library.

    Returns:
        ctypes.CDLL: The loaded library

    Raises:
        DevinfoError: If the library cannot be found or loaded
    """
    name = name or ctypes.util.find_library("devinfo")
    if name is None:
        raise DevinfoError("libdevinfo not found")
    try:
        lib = ctypes.CDLL(name, use_errno=True)
    except OSError as e:
        raise DevinfoError(f"cannot load {name}: {e}") from e

    lib.di_init.restype = di_node_t
    lib.di_init.argtypes = [ctypes.c_char_p, ctypes.c_uint]
    lib.di_fini.restype = None
    lib.di_fini.argtypes = [di_node_t]
    lib.di_prop_lookup_ints.restype = ctypes.c_int
    lib.di_prop_lookup_ints.argtypes = [ctypes.c_ulong, di_node_t, ctypes.c_char_p,
                                        ctypes.POINTER(ctypes.POINTER(ctypes.c_int))]
    return lib


class LibDevinfoNode(DeviceNode):
    """Node snapshot taken with di_init(DINFOPROP)"""

    def __init__(self, lib: ctypes.CDLL, node_path: str, handle: int):
        super().__init__(node_path)
        self._lib = lib
        self._handle = handle

    def lookup_ints(self, name: str) -> PropertyLookup:
        intp = ctypes.POINTER(ctypes.c_int)()
        ctypes.set_errno(0)
        count = self._lib.di_prop_lookup_ints(DDI_DEV_T_ANY, self._handle,
                                              name.encode(), ctypes.byref(intp))
        if count < 0:
            err = ctypes.get_errno()
            return PropertyLookup(name, count, error=os.strerror(err) if err else None)
        return PropertyLookup(name, count, tuple(intp[i] for i in range(count)))

    def _release(self) -> None:
        self._lib.di_fini(self._handle)
        self._handle = None


class LibDevinfoSource(PropertySource):
    """Live device tree read through libdevinfo"""

    def __init__(self, library: Optional[str] = None):
        self._lib = load_libdevinfo(library)

    def open(self, node_path: str) -> LibDevinfoNode:
        handle = self._lib.di_init(node_path.encode(), DINFOPROP)
        if not handle:
            err = ctypes.get_errno()
            raise DevinfoError(f"di_init(\"{node_path}\") failed: {os.strerror(err)}", errno=err)
        return LibDevinfoNode(self._lib, node_path, handle)
