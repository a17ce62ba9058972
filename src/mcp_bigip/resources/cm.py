"""Cluster management: devices and device groups."""
from dataclasses import dataclass, field

from ..adapter import WireSchema, flag, number, records, text
from ..client import BigIPClient
from .base import ResourceHandler


@dataclass
class Device:
    name: str = ""
    description: str = ""
    configsync_ip: str = ""
    mirror_ip: str = ""
    mirror_secondary_ip: str = ""


DEVICE_SCHEMA = WireSchema(Device, [
    text("name", "name"),
    text("description", "description"),
    text("configsync_ip", "configsyncIp"),
    text("mirror_ip", "mirrorIp"),
    text("mirror_secondary_ip", "mirrorSecondaryIp"),
])


@dataclass
class DeviceGroupMember:
    name: str = ""
    set_sync_leader: bool = False


DEVICE_GROUP_MEMBER_SCHEMA = WireSchema(DeviceGroupMember, [
    text("name", "name", omit_empty=False),
    flag("set_sync_leader", "setSyncLeader", omit_empty=False),
])


@dataclass
class DeviceGroup:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    description: str = ""
    type: str = ""
    auto_sync: str = ""
    full_load_on_sync: str = ""
    save_on_auto_sync: str = ""
    network_failover: str = ""
    incremental_config_sync_size_max: int = 0
    devices: list[DeviceGroupMember] = field(default_factory=list)


DEVICE_GROUP_SCHEMA = WireSchema(DeviceGroup, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("description", "description"),
    text("type", "type", description="sync-only or sync-failover"),
    text("auto_sync", "autoSync", description="enabled or disabled"),
    text("full_load_on_sync", "fullLoadOnSync", description="true or false"),
    text("save_on_auto_sync", "saveOnAutoSync", description="true or false"),
    text("network_failover", "networkFailover", description="enabled or disabled"),
    number("incremental_config_sync_size_max", "incrementalConfigSyncSizeMax"),
    records("devices", "deviceReference", DEVICE_GROUP_MEMBER_SCHEMA, envelope=True),
])


class DeviceHandler(ResourceHandler):
    type_name = "bigip_cm_device"
    description = "Trust domain device"
    schema = DEVICE_SCHEMA
    path = ("cm", "device")


class DeviceGroupHandler(ResourceHandler):
    type_name = "bigip_cm_devicegroup"
    description = "Device group with member devices"
    schema = DEVICE_GROUP_SCHEMA
    path = ("cm", "device-group")

    async def expand(self, client: BigIPClient, identity: str, dto: dict) -> dict:
        members = await client.list_collection(*self.path, identity, "devices")
        dto["deviceReference"] = {"items": members}
        return dto
