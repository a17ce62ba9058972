"""Resource lifecycle handlers, one per resource type."""
from .base import ResourceHandler
from .cm import DeviceGroupHandler, DeviceHandler
from .datagroup import DatagroupHandler
from .irule import IRuleHandler
from .monitor import MonitorHandler
from .node import NodeHandler
from .policy import PolicyHandler
from .pool import PoolHandler
from .profiles import (
    FastHttpProfileHandler,
    FastL4ProfileHandler,
    HttpCompressProfileHandler,
    OneConnectProfileHandler,
    TcpProfileHandler,
)
from .state import ResourceDiff, ResourceState, diff_attributes
from .virtual_address import VirtualAddressHandler
from .virtual_server import VirtualServerHandler
from ..exceptions import UnknownResourceType

__all__ = [
    "ResourceHandler",
    "ResourceState",
    "ResourceDiff",
    "diff_attributes",
    "RESOURCE_TYPES",
    "get_handler",
]

# Resource type registry
RESOURCE_TYPES = {
    handler.type_name: handler
    for handler in (
        IRuleHandler,
        NodeHandler,
        PoolHandler,
        MonitorHandler,
        VirtualServerHandler,
        VirtualAddressHandler,
        PolicyHandler,
        TcpProfileHandler,
        FastHttpProfileHandler,
        FastL4ProfileHandler,
        HttpCompressProfileHandler,
        OneConnectProfileHandler,
        DatagroupHandler,
        DeviceHandler,
        DeviceGroupHandler,
    )
}


def get_handler(type_name: str) -> ResourceHandler:
    """Factory function to create handler instances."""
    if type_name not in RESOURCE_TYPES:
        raise UnknownResourceType(f"Unknown resource type: {type_name}")
    return RESOURCE_TYPES[type_name]()
