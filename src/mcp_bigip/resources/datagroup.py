"""Internal data groups (key/value lists used from iRules and policies)."""
from dataclasses import dataclass, field

from ..adapter import WireSchema, records, text
from .base import ResourceHandler


@dataclass
class DatagroupRecord:
    name: str = ""
    data: str = ""


DATAGROUP_RECORD_SCHEMA = WireSchema(DatagroupRecord, [
    text("name", "name"),
    text("data", "data"),
])


@dataclass
class Datagroup:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    description: str = ""
    type: str = ""  # string, ip, integer
    records: list[DatagroupRecord] = field(default_factory=list)


DATAGROUP_SCHEMA = WireSchema(Datagroup, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("description", "description"),
    text("type", "type", description="string, ip or integer"),
    records("records", "records", DATAGROUP_RECORD_SCHEMA),
])


class DatagroupHandler(ResourceHandler):
    type_name = "bigip_ltm_datagroup"
    description = "Internal data group"
    schema = DATAGROUP_SCHEMA
    path = ("ltm", "data-group", "internal")
