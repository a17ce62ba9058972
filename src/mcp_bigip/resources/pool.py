"""LTM pools and their members."""
from dataclasses import dataclass, field, replace

from ..adapter import YES_NO, ENABLED_EMPTY, WireSchema, flag, number, records, text
from ..client import BigIPClient
from .base import ResourceHandler


@dataclass
class PoolMember:
    name: str = ""  # "<node>:<port>"
    partition: str = ""
    full_path: str = ""
    address: str = ""
    connection_limit: int = 0
    dynamic_ratio: int = 0
    priority_group: int = 0
    ratio: int = 0
    monitor: str = ""
    session: str = ""
    state: str = ""
    description: str = ""


POOL_MEMBER_SCHEMA = WireSchema(PoolMember, [
    text("name", "name", omit_empty=False),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("address", "address"),
    number("connection_limit", "connectionLimit"),
    number("dynamic_ratio", "dynamicRatio"),
    number("priority_group", "priorityGroup"),
    number("ratio", "ratio"),
    text("monitor", "monitor"),
    text("session", "session"),
    text("state", "state"),
    text("description", "description"),
])


@dataclass
class Pool:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    description: str = ""
    allow_nat: bool = False
    allow_snat: bool = False
    ignore_persisted_weight: bool = False
    ip_tos_to_client: str = ""
    ip_tos_to_server: str = ""
    link_qos_to_client: str = ""
    link_qos_to_server: str = ""
    load_balancing_mode: str = ""
    min_active_members: int = 0
    min_up_members: int = 0
    min_up_members_action: str = ""
    min_up_members_checking: str = ""
    monitor: str = ""
    queue_depth_limit: int = 0
    queue_on_connection_limit: str = ""
    queue_time_limit: int = 0
    reselect_tries: int = 0
    slow_ramp_time: int = 0
    members: list[PoolMember] = field(default_factory=list)


POOL_SCHEMA = WireSchema(Pool, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("description", "description"),
    flag("allow_nat", "allowNat", tokens=YES_NO),
    flag("allow_snat", "allowSnat", tokens=YES_NO),
    flag("ignore_persisted_weight", "ignorePersistedWeight", tokens=ENABLED_EMPTY),
    text("ip_tos_to_client", "ipTosToClient"),
    text("ip_tos_to_server", "ipTosToServer"),
    text("link_qos_to_client", "linkQosToClient"),
    text("link_qos_to_server", "linkQosToServer"),
    text("load_balancing_mode", "loadBalancingMode"),
    number("min_active_members", "minActiveMembers"),
    number("min_up_members", "minUpMembers"),
    text("min_up_members_action", "minUpMembersAction"),
    text("min_up_members_checking", "minUpMembersChecking"),
    # always sent so that clearing the monitor removes it on the appliance
    text("monitor", "monitor", omit_empty=False),
    number("queue_depth_limit", "queueDepthLimit"),
    text("queue_on_connection_limit", "queueOnConnectionLimit"),
    number("queue_time_limit", "queueTimeLimit"),
    number("reselect_tries", "reselectTries"),
    number("slow_ramp_time", "slowRampTime"),
    records("members", "membersReference", POOL_MEMBER_SCHEMA, envelope=True),
])


class PoolHandler(ResourceHandler):
    type_name = "bigip_ltm_pool"
    description = "LTM pool with members"
    schema = POOL_SCHEMA
    path = ("ltm", "pool")

    async def expand(self, client: BigIPClient, identity: str, dto: dict) -> dict:
        members = await client.list_collection(*self.path, identity, "members")
        dto["membersReference"] = {"items": members}
        return dto

    def observe(self, record: Pool) -> Pool:
        # monitor rules come back with a trailing space ("/Common/http ")
        return replace(record, monitor=record.monitor.strip())
