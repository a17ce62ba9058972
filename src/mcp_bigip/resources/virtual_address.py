"""Virtual addresses (the listener IPs behind virtual servers)."""
from dataclasses import dataclass

from ..adapter import ENABLED_EMPTY, TRUE_FALSE, YES_NO, WireSchema, flag, number, text
from .base import ResourceHandler


@dataclass
class VirtualAddress:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    description: str = ""
    address: str = ""
    arp: bool = False
    auto_delete: bool = False
    connection_limit: int = 0
    enabled: bool = False
    floating: bool = False
    icmp_echo: bool = False
    inherited_traffic_group: bool = False
    mask: str = ""
    route_advertisement: bool = False
    server_scope: str = ""
    traffic_group: str = ""
    unit: int = 0


VIRTUAL_ADDRESS_SCHEMA = WireSchema(VirtualAddress, [
    text("name", "name", omit_empty=False),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("description", "description"),
    text("address", "address"),
    flag("arp", "arp", tokens=ENABLED_EMPTY),
    flag("auto_delete", "autoDelete", tokens=TRUE_FALSE),
    number("connection_limit", "connectionLimit"),
    flag("enabled", "enabled", tokens=YES_NO),
    flag("floating", "floating", tokens=ENABLED_EMPTY),
    flag("icmp_echo", "icmpEcho", tokens=ENABLED_EMPTY),
    flag("inherited_traffic_group", "inheritedTrafficGroup", tokens=YES_NO),
    text("mask", "mask"),
    flag("route_advertisement", "routeAdvertisement", tokens=ENABLED_EMPTY),
    text("server_scope", "serverScope"),
    text("traffic_group", "trafficGroup"),
    number("unit", "unit"),
])


class VirtualAddressHandler(ResourceHandler):
    type_name = "bigip_ltm_virtual_address"
    description = "Virtual address"
    schema = VIRTUAL_ADDRESS_SCHEMA
    path = ("ltm", "virtual-address")
