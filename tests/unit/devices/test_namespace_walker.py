import logging
import os
import pytest
from unittest.mock import patch

from devtree_usb.config import DiscoveryConfig
from devtree_usb.devices.NamespaceWalker import BoundedPath, NamespaceWalker
from devtree_usb.errors import DiscoveryError, ErrorCode, PathOverflowError


class TestBoundedPath:
    def test_compose_within_capacity(self):
        path = BoundedPath(18).compose("/dev/usb", "a12.1")
        assert path == "/dev/usb/a12.1"

    def test_compose_at_capacity(self):
        assert BoundedPath(18).compose("/dev/usb", "abcd.1234") == "/dev/usb/abcd.1234"

    def test_compose_overflow_raises(self):
        with pytest.raises(PathOverflowError) as excinfo:
            BoundedPath(18).compose("/dev/usb", "abcde.1234")
        assert excinfo.value.code == ErrorCode.OVERFLOW
        assert excinfo.value.capacity == 18


class TestNamespaceWalker:
    def test_discover_yields_node_paths(self, device_tree):
        device_tree.add_device("a12.1", "0", "/pci@0,0/pci106b,3f@6/device@2")
        device_tree.add_device("a12.1", "1", "/pci@0,0/pci106b,3f@6/device@3")
        device_tree.add_device("46d.c52b", "0", "/pci@0,0/pci106b,3f@4/hub@1/device@5")

        walker = NamespaceWalker(device_tree.config())
        paths = list(walker.discover())

        assert paths == [
            "/pci@0,0/pci106b,3f@4/hub@1/device@5",
            "/pci@0,0/pci106b,3f@6/device@2",
            "/pci@0,0/pci106b,3f@6/device@3",
        ]

    def test_non_matching_groups_are_skipped(self, device_tree, caplog):
        device_tree.add_device("a12.1", "0", "/pci@0,0/device@2")
        device_tree.add_device("usbprn0", "0", "/pci@0,0/device@3")
        device_tree.add_device("A12.1", "0", "/pci@0,0/device@4")
        device_tree.add_device("a12.1.2", "0", "/pci@0,0/device@5")
        (device_tree.dev_usb / "hub1").mkdir()

        caplog.set_level(logging.DEBUG, logger="devtree_usb")
        paths = list(NamespaceWalker(device_tree.config()).discover())

        assert paths == ["/pci@0,0/device@2"]
        assert "skipping usbprn0" in caplog.text
        assert "skipping hub1" in caplog.text

    def test_hidden_entries_are_skipped_silently(self, device_tree, caplog):
        device_tree.add_device("a12.1", "0", "/pci@0,0/device@2")
        device_tree.add_device("a12.1", ".1", "/pci@0,0/device@3")
        (device_tree.dev_usb / ".hidden").mkdir()

        caplog.set_level(logging.DEBUG, logger="devtree_usb")
        paths = list(NamespaceWalker(device_tree.config()).discover())

        assert paths == ["/pci@0,0/device@2"]
        assert ".hidden" not in caplog.text

    def test_path_outside_devices_root_is_skipped(self, device_tree, caplog):
        outside = device_tree.root / "elsewhere" / "device@2:a12.1.devstat"
        outside.parent.mkdir()
        outside.touch()
        device_tree.add_witness("a12.1", "0", outside)
        device_tree.add_device("a12.1", "1", "/pci@0,0/device@3")

        paths = list(NamespaceWalker(device_tree.config()).discover())

        assert paths == ["/pci@0,0/device@3"]
        assert "is not under" in caplog.text

    def test_prefix_must_end_at_path_component(self, device_tree):
        walker = NamespaceWalker(device_tree.config(devices_root="/devices"))
        assert walker.to_node_path("/devicesfoo/pci@0,0/device@2:a") is None
        assert walker.to_node_path("/devices/pci@0,0/device@2:a") == "/pci@0,0/device@2"

    def test_suffix_is_cut_at_colon(self):
        walker = NamespaceWalker()
        node = walker.to_node_path("/devices/pci@0,0/pci106b,3f@6/device@2:a12.1.devstat")
        assert node == "/pci@0,0/pci106b,3f@6/device@2"

    def test_missing_colon_is_tolerated(self, device_tree, caplog):
        device_tree.add_device("a12.1", "0", "/pci@0,0/device@2", minor="")

        paths = list(NamespaceWalker(device_tree.config()).discover())

        assert paths == ["/pci@0,0/device@2"]
        assert "no colon in device node path" in caplog.text

    def test_missing_witness_skips_instance_only(self, device_tree, caplog):
        (device_tree.dev_usb / "a12.1" / "0").mkdir(parents=True)
        device_tree.add_device("a12.1", "1", "/pci@0,0/device@3")

        paths = list(NamespaceWalker(device_tree.config()).discover())

        assert paths == ["/pci@0,0/device@3"]
        assert "realpath()" in caplog.text

    def test_dangling_witness_is_skipped(self, device_tree):
        device_tree.add_witness("a12.1", "0", device_tree.devices / "gone:a12.1.devstat")
        assert list(NamespaceWalker(device_tree.config()).discover()) == []

    def test_overlong_group_name_is_skipped(self, device_tree, caplog):
        device_tree.add_device("abcde.12345", "0", "/pci@0,0/device@2")
        device_tree.add_device("abcd.1234", "0", "/pci@0,0/device@3")

        paths = list(NamespaceWalker(device_tree.config()).discover())

        assert paths == ["/pci@0,0/device@3"]
        assert "group path" in caplog.text

    def test_overlong_instance_name_is_skipped(self, device_tree, caplog):
        device_tree.add_device("abcd.1234", "12345", "/pci@0,0/device@2")
        device_tree.add_device("abcd.1234", "1234", "/pci@0,0/device@3")

        paths = list(NamespaceWalker(device_tree.config()).discover())

        assert paths == ["/pci@0,0/device@3"]
        assert "witness path" in caplog.text

    def test_unreadable_group_is_skipped(self, device_tree, caplog):
        device_tree.add_device("a12.1", "0", "/pci@0,0/device@2")
        (device_tree.dev_usb / "b34.2").write_text("not a directory")

        paths = list(NamespaceWalker(device_tree.config()).discover())

        assert paths == ["/pci@0,0/device@2"]
        assert "opendir" in caplog.text

    def test_missing_root_is_fatal(self, tmp_path):
        walker = NamespaceWalker(DiscoveryConfig(dev_usb_root=str(tmp_path / "missing")))
        with pytest.raises(DiscoveryError) as excinfo:
            list(walker.discover())
        assert excinfo.value.code == ErrorCode.ACCESS

    def test_root_permission_error_is_fatal(self, device_tree):
        walker = NamespaceWalker(device_tree.config())
        with patch("os.scandir", side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(DiscoveryError) as excinfo:
                list(walker.discover())
        assert excinfo.value.code == ErrorCode.ACCESS

    def test_invalid_pattern_is_fatal(self, device_tree):
        walker = NamespaceWalker(device_tree.config(group_pattern="[0-9a-f+"))
        with pytest.raises(DiscoveryError) as excinfo:
            list(walker.discover())
        assert excinfo.value.code == ErrorCode.NO_MEM

    def test_walk_continues_after_bad_instance(self, device_tree):
        device_tree.add_device("a12.1", "0", "/pci@0,0/device@2")
        (device_tree.dev_usb / "a12.1" / "1").mkdir()
        device_tree.add_device("a12.1", "2", "/pci@0,0/device@4")
        device_tree.add_device("b34.2", "0", "/pci@0,0/device@5")

        paths = list(NamespaceWalker(device_tree.config()).discover())

        assert len(paths) == 3
        assert os.path.basename(paths[-1]) == "device@5"
