import pytest
from typing import Dict, Optional, Tuple

from devtree_usb.config import DiscoveryConfig
from devtree_usb.devinfo.PropertySource import DeviceNode, PropertyLookup, PropertySource
from devtree_usb.errors import DevinfoError


class DeviceTreeBuilder:
    """Builds a synthetic /dev/usb namespace linking into a /devices tree."""

    def __init__(self, root):
        self.root = root
        self.dev_usb = root / "dev" / "usb"
        self.devices = root / "devices"
        self.dev_usb.mkdir(parents=True)
        self.devices.mkdir(parents=True)

    def add_node(self, node: str, properties: Optional[Dict] = None):
        """Create a node directory holding one file per property; None writes an empty property."""
        node_dir = self.devices / node.lstrip("/")
        node_dir.mkdir(parents=True, exist_ok=True)
        for name, value in (properties or {}).items():
            if value is None:
                text = ""
            elif isinstance(value, (list, tuple)):
                text = " ".join(str(v) for v in value)
            else:
                text = str(value)
            (node_dir / name).write_text(text)
        return node_dir

    def add_device(self, group: str, instance: str, node: str,
                   properties: Optional[Dict] = None, minor: Optional[str] = None):
        """Add an instance whose devstat links to <devices><node><minor>."""
        self.add_node(node, properties)
        if minor is None:
            minor = f":{group}.devstat"
        target = self.devices / (node.lstrip("/") + minor)
        if minor:
            target.touch()
        self.add_witness(group, instance, target)
        return node

    def add_witness(self, group: str, instance: str, target):
        inst_dir = self.dev_usb / group / instance
        inst_dir.mkdir(parents=True, exist_ok=True)
        (inst_dir / "devstat").symlink_to(target)
        return inst_dir

    def config(self, **kwargs) -> DiscoveryConfig:
        settings = {
            'dev_usb_root': str(self.dev_usb),
            'devices_root': str(self.devices),
            'snapshot_root': str(self.devices),
        }
        settings.update(kwargs)
        return DiscoveryConfig(**settings)


class FakeNode(DeviceNode):
    def __init__(self, node_path: str, properties: Dict[str, Optional[Tuple[int, ...]]]):
        super().__init__(node_path)
        self.properties = properties

    def lookup_ints(self, name: str) -> PropertyLookup:
        if name not in self.properties:
            return PropertyLookup(name, -1, error="not found")
        values = self.properties[name] or ()
        return PropertyLookup(name, len(values), tuple(values))


class FakeSource(PropertySource):
    """In-memory property source recording every node it hands out."""

    def __init__(self, nodes: Dict[str, Dict[str, Optional[Tuple[int, ...]]]]):
        self.nodes = nodes
        self.opened = []

    def open(self, node_path: str) -> FakeNode:
        if node_path not in self.nodes:
            raise DevinfoError(f"no node {node_path}")
        node = FakeNode(node_path, self.nodes[node_path])
        self.opened.append(node)
        return node


@pytest.fixture
def device_tree(tmp_path):
    """Synthetic device tree rooted in a resolved temporary directory."""
    return DeviceTreeBuilder(tmp_path.resolve())


@pytest.fixture
def fake_source():
    """Property source with a few typical nodes."""
    return FakeSource({
        "/pci@0,0/pci106b,3f@6/device@2": {
            "assigned-address": (1,),
            "usb-num-configs": (1,),
            "high-speed": None,
        },
        "/pci@0,0/pci106b,3f@6/device@52": {
            "assigned-address": (0x12,),
            "usb-num-configs": (2,),
        },
        "/pci@0,0/pci106b,3f@6/hub@1/device@7": {
            "assigned-address": (3,),
        },
        "/pci@0,0/pci106b,3f@6/device@3": {
            "usb-num-configs": (1,),
        },
        "/pci@0,0/pci106b,3f@6/device": {
            "assigned-address": (1,),
            "usb-num-configs": (1,),
        },
    })
