"""LTM nodes (backend hosts referenced by pool members)."""
from dataclasses import dataclass

from ..adapter import WireSchema, number, text
from .base import ResourceHandler


@dataclass
class Node:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    description: str = ""
    address: str = ""
    connection_limit: int = 0
    dynamic_ratio: int = 0
    logging: str = ""
    monitor: str = ""
    rate_limit: str = ""
    ratio: int = 0
    session: str = ""
    state: str = ""


NODE_SCHEMA = WireSchema(Node, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("description", "description"),
    text("address", "address", description="IP address or FQDN of the host"),
    number("connection_limit", "connectionLimit"),
    number("dynamic_ratio", "dynamicRatio"),
    text("logging", "logging"),
    text("monitor", "monitor"),
    text("rate_limit", "rateLimit"),
    number("ratio", "ratio"),
    text("session", "session", description="user-enabled or user-disabled"),
    text("state", "state", description="user-up or user-down"),
])


class NodeHandler(ResourceHandler):
    type_name = "bigip_ltm_node"
    description = "LTM node"
    schema = NODE_SCHEMA
    path = ("ltm", "node")
