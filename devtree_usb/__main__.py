#!/usr/bin/env python3
"""
Command-line front-end: run a discovery pass and print what was found.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from devtree_usb.backend import BACKENDS
from devtree_usb.config import DiscoveryConfig, DEFAULT_DEV_USB_ROOT, DEFAULT_DEVICES_ROOT
from devtree_usb.devices.UsbDeviceFactory import UsbDeviceFactory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="devtree-usb",
                                     description="USB device discovery through the device tree")
    parser.add_argument("-d", "--dev-usb-root", default=DEFAULT_DEV_USB_ROOT,
                        help=f"ugen namespace to walk (default: {DEFAULT_DEV_USB_ROOT})")
    parser.add_argument("--devices-root", default=DEFAULT_DEVICES_ROOT,
                        help=f"device-tree root prefix (default: {DEFAULT_DEVICES_ROOT})")
    parser.add_argument("--snapshot", metavar="PATH",
                        help="read node properties from a snapshot directory instead of libdevinfo")
    parser.add_argument("--backend", choices=sorted(BACKENDS),
                        help="backend to use (default: solaris with --snapshot, else chosen from the platform)")
    parser.add_argument("--strict-num-configs", action="store_true",
                        help="skip devices without a usb-num-configs value")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("-j", "--json", action="store_true", help="Output in JSON format")
    output.add_argument("-t", "--table", action="store_true", help="Output as a table")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    config = DiscoveryConfig(dev_usb_root=args.dev_usb_root,
                             devices_root=args.devices_root,
                             snapshot_root=args.snapshot,
                             strict_num_configs=args.strict_num_configs,
                             backend=args.backend)
    factory = UsbDeviceFactory(config)

    if args.json:
        devices = factory.get_all_devices()
        print(json.dumps([devices[sid].to_dict() for sid in sorted(devices)], indent=2))
    elif args.table:
        table = factory.to_dataframe()
        print(table.to_string(index=False) if not table.empty else "No USB devices found.")
    else:
        factory.print_device_summary()

    return 1 if factory.last_error is not None else 0


if __name__ == "__main__":
    sys.exit(main())
