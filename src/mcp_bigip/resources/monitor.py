"""Health monitors.

Monitors live in one collection per monitor type, ``ltm/monitor/<kind>``.
The kind is taken from the parent monitor (``defaultsFrom``), so a monitor
derived from ``/Common/http`` is created under ``ltm/monitor/http``.
"""
import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

from ..adapter import ENABLED_EMPTY, WireSchema, flag, number, text
from ..client import BigIPClient
from ..validators import split_full_path
from .base import ResourceHandler

logger = logging.getLogger(__name__)

# Collections searched when the parent of a monitor is not known
MONITOR_KINDS = ("http", "https", "icmp", "gateway-icmp", "tcp", "tcp-half-open", "udp")


def monitor_kind(parent: str) -> str:
    """Collection name for a parent monitor, e.g. ``/Common/tcp_half_open`` -> ``tcp-half-open``."""
    _, base = split_full_path(parent)
    if not base:
        raise ValueError("Monitor parent is required to determine its type")
    if base.startswith("gateway"):
        base = "gateway_icmp"
    return base.replace("_", "-")


@dataclass
class Monitor:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    parent: str = ""
    description: str = ""
    destination: str = ""
    interval: int = 0
    ip_dscp: int = 0
    manual_resume: bool = False
    password: str = ""
    receive: str = ""
    receive_disable: str = ""
    reverse: bool = False
    send: str = ""
    time_until_up: int = 0
    timeout: int = 0
    transparent: bool = False
    up_interval: int = 0
    username: str = ""


MONITOR_SCHEMA = WireSchema(Monitor, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("parent", "defaultsFrom", description="Parent monitor, e.g. /Common/http"),
    text("description", "description"),
    text("destination", "destination"),
    number("interval", "interval"),
    number("ip_dscp", "ipDscp"),
    flag("manual_resume", "manualResume", tokens=ENABLED_EMPTY),
    text("password", "password", description="Write-only; never returned by the appliance"),
    text("receive", "recv"),
    text("receive_disable", "recvDisable"),
    flag("reverse", "reverse", tokens=ENABLED_EMPTY),
    text("send", "send"),
    number("time_until_up", "timeUntilUp"),
    number("timeout", "timeout"),
    flag("transparent", "transparent", tokens=ENABLED_EMPTY),
    number("up_interval", "upInterval"),
    text("username", "username"),
])


class MonitorHandler(ResourceHandler):
    type_name = "bigip_ltm_monitor"
    description = "Health monitor (http, https, icmp, gateway-icmp, tcp, tcp-half-open, udp)"
    schema = MONITOR_SCHEMA
    path = ("ltm", "monitor")
    sticky_attributes = ("name", "partition", "password")

    def collection(self, attributes: dict) -> tuple[str, ...]:
        return (*self.path, monitor_kind(attributes.get("parent", "")))

    def prepare(self, record: Monitor) -> Monitor:
        return replace(record, send=record.send.replace("\r\n", "\\r\\n"))

    def observe(self, record: Monitor) -> Monitor:
        return replace(record, send=record.send.replace("\\r\\n", "\r\n"))

    async def fetch(self, client: BigIPClient, identity: str, attributes: dict) -> Optional[Any]:
        if attributes.get("parent"):
            return await super().fetch(client, identity, attributes)

        # Imported monitors arrive without a parent; search every kind
        for kind in MONITOR_KINDS:
            found = await super().fetch(client, identity, {"parent": kind})
            if found is not None:
                logger.debug(f"Found monitor {identity} under ltm/monitor/{kind}")
                return found
        return None

    async def remove(self, client: BigIPClient, identity: str, attributes: dict) -> None:
        if not attributes.get("parent"):
            found = await self.fetch(client, identity, attributes)
            if found is None:
                return
            attributes = {"parent": found.parent}
        await super().remove(client, identity, attributes)

    def import_attributes(self, import_id: str) -> dict:
        # "<kind>:<name>" narrows the search to one collection
        kind, sep, name = import_id.partition(":")
        if sep and kind in MONITOR_KINDS:
            return {"name": name, "parent": kind}
        return {"name": import_id}
