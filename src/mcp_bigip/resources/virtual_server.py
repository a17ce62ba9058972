"""Virtual servers.

Profiles and policies are separate sub-collections on the appliance
(``ltm/virtual/<name>/profiles`` and ``.../policies``); they are fetched and
folded into the record on read. Source address translation is a nested
object on the wire and two flat attributes here.
"""
from dataclasses import dataclass, field, replace

from ..adapter import ENABLED_DISABLED, WireSchema, flag, number, records, strings, text
from ..client import BigIPClient
from ..validators import cidr_to_netmask
from .base import ResourceHandler


@dataclass
class VirtualServerProfile:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    context: str = ""  # all, clientside, serverside


PROFILE_SCHEMA = WireSchema(VirtualServerProfile, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("context", "context"),
])


@dataclass
class VirtualServer:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    description: str = ""
    destination: str = ""
    mask: str = ""
    source: str = ""
    source_port: str = ""
    ip_protocol: str = ""
    pool: str = ""
    connection_limit: int = 0
    rate_limit: str = ""
    auto_last_hop: str = ""
    cmp_enabled: str = ""
    enabled: bool = False
    vlans_disabled: bool = False
    mirror: bool = False
    translate_address: bool = False
    translate_port: bool = False
    syn_cookie_status: str = ""
    source_address_translation_type: str = ""
    source_address_translation_pool: str = ""
    rules: list[str] = field(default_factory=list)
    profiles: list[VirtualServerProfile] = field(default_factory=list)
    policies: list[str] = field(default_factory=list)


VIRTUAL_SERVER_SCHEMA = WireSchema(VirtualServer, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("description", "description"),
    text("destination", "destination", description="/Partition/address:port"),
    text("mask", "mask", description="Dotted netmask; a prefix length is expanded"),
    text("source", "source"),
    text("source_port", "sourcePort"),
    text("ip_protocol", "ipProtocol"),
    text("pool", "pool"),
    number("connection_limit", "connectionLimit"),
    text("rate_limit", "rateLimit"),
    text("auto_last_hop", "autoLastHop"),
    text("cmp_enabled", "cmpEnabled"),
    flag("enabled", "enabled"),
    flag("vlans_disabled", "vlansDisabled"),
    flag("mirror", "mirror", tokens=ENABLED_DISABLED),
    flag("translate_address", "translateAddress", tokens=ENABLED_DISABLED),
    flag("translate_port", "translatePort", tokens=ENABLED_DISABLED),
    text("syn_cookie_status", "synCookieStatus"),
    text("source_address_translation_type", "sourceAddressTranslation.type",
         description="none, automap or snat"),
    text("source_address_translation_pool", "sourceAddressTranslation.pool"),
    strings("rules", "rules", description="iRules in evaluation order"),
    records("profiles", "profiles", PROFILE_SCHEMA),
    strings("policies", "policies"),
])


class VirtualServerHandler(ResourceHandler):
    type_name = "bigip_ltm_virtual_server"
    description = "Virtual server with profiles, policies and SNAT"
    schema = VIRTUAL_SERVER_SCHEMA
    path = ("ltm", "virtual")

    def prepare(self, record: VirtualServer) -> VirtualServer:
        return replace(record, mask=cidr_to_netmask(record.mask))

    async def expand(self, client: BigIPClient, identity: str, dto: dict) -> dict:
        dto["profiles"] = await client.list_collection(*self.path, identity, "profiles")
        policies = await client.list_collection(*self.path, identity, "policies")
        dto["policies"] = [p.get("fullPath") or p.get("name", "") for p in policies]
        return dto
