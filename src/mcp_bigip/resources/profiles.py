"""LTM profiles: tcp, fasthttp, fastl4, http-compression, one-connect.

Updates replace the whole profile, so any timer left unset in the
declaration falls back to the value inherited from ``defaults_from``.
"""
from dataclasses import dataclass, field

from ..adapter import WireSchema, number, strings, text
from .base import ResourceHandler


@dataclass
class TcpProfile:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    defaults_from: str = ""
    idle_timeout: int = 0
    close_wait_timeout: int = 0
    finwait_2_timeout: int = 0
    finwait_timeout: int = 0
    keepalive_interval: int = 0
    deferred_accept: str = ""
    fast_open: str = ""


TCP_PROFILE_SCHEMA = WireSchema(TcpProfile, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("defaults_from", "defaultsFrom"),
    number("idle_timeout", "idleTimeout"),
    number("close_wait_timeout", "closeWaitTimeout"),
    number("finwait_2_timeout", "finWait_2Timeout"),
    number("finwait_timeout", "finWaitTimeout"),
    number("keepalive_interval", "keepAliveInterval"),
    text("deferred_accept", "deferredAccept", description="enabled or disabled"),
    text("fast_open", "fastOpen", description="enabled or disabled"),
])


@dataclass
class FastHttpProfile:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    defaults_from: str = ""
    idle_timeout: int = 0
    connpool_idle_timeout_override: int = 0
    connpool_max_reuse: int = 0
    connpool_max_size: int = 0
    connpool_min_size: int = 0
    connpool_replenish: str = ""
    connpool_step: int = 0
    force_http_10_response: str = ""
    max_header_size: int = 0


FASTHTTP_PROFILE_SCHEMA = WireSchema(FastHttpProfile, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("defaults_from", "defaultsFrom"),
    number("idle_timeout", "idleTimeout"),
    number("connpool_idle_timeout_override", "connpoolIdleTimeoutOverride"),
    number("connpool_max_reuse", "connpoolMaxReuse"),
    number("connpool_max_size", "connpoolMaxSize"),
    number("connpool_min_size", "connpoolMinSize"),
    text("connpool_replenish", "connpoolReplenish"),
    number("connpool_step", "connpoolStep"),
    text("force_http_10_response", "forceHttp_10Response"),
    number("max_header_size", "maxHeaderSize"),
])


@dataclass
class FastL4Profile:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    defaults_from: str = ""
    client_timeout: int = 0
    explicit_flow_migration: str = ""
    hardware_syn_cookie: str = ""
    idle_timeout: int = 0
    ip_tos_to_client: str = ""
    ip_tos_to_server: str = ""
    keepalive_interval: str = ""


FASTL4_PROFILE_SCHEMA = WireSchema(FastL4Profile, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("defaults_from", "defaultsFrom"),
    number("client_timeout", "clientTimeout"),
    text("explicit_flow_migration", "explicitFlowMigration"),
    text("hardware_syn_cookie", "hardwareSynCookie"),
    number("idle_timeout", "idleTimeout"),
    text("ip_tos_to_client", "ipTosToClient"),
    text("ip_tos_to_server", "ipTosToServer"),
    text("keepalive_interval", "keepAliveInterval"),
])


@dataclass
class HttpCompressProfile:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    defaults_from: str = ""
    uri_exclude: list[str] = field(default_factory=list)
    uri_include: list[str] = field(default_factory=list)
    content_type_include: list[str] = field(default_factory=list)
    content_type_exclude: list[str] = field(default_factory=list)


HTTP_COMPRESS_PROFILE_SCHEMA = WireSchema(HttpCompressProfile, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("defaults_from", "defaultsFrom"),
    strings("uri_exclude", "uriExclude"),
    strings("uri_include", "uriInclude"),
    strings("content_type_include", "contentTypeInclude"),
    strings("content_type_exclude", "contentTypeExclude"),
])


@dataclass
class OneConnectProfile:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    defaults_from: str = ""
    idle_timeout_override: str = ""
    max_age: int = 0
    max_reuse: int = 0
    max_size: int = 0
    source_mask: str = ""
    share_pools: str = ""


ONECONNECT_PROFILE_SCHEMA = WireSchema(OneConnectProfile, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("defaults_from", "defaultsFrom"),
    text("idle_timeout_override", "idleTimeoutOverride"),
    number("max_age", "maxAge"),
    number("max_reuse", "maxReuse"),
    number("max_size", "maxSize"),
    text("source_mask", "sourceMask"),
    text("share_pools", "sharePools"),
])


class TcpProfileHandler(ResourceHandler):
    type_name = "bigip_ltm_profile_tcp"
    description = "TCP profile"
    schema = TCP_PROFILE_SCHEMA
    path = ("ltm", "profile", "tcp")


class FastHttpProfileHandler(ResourceHandler):
    type_name = "bigip_ltm_profile_fasthttp"
    description = "FastHTTP profile"
    schema = FASTHTTP_PROFILE_SCHEMA
    path = ("ltm", "profile", "fasthttp")


class FastL4ProfileHandler(ResourceHandler):
    type_name = "bigip_ltm_profile_fastl4"
    description = "FastL4 profile"
    schema = FASTL4_PROFILE_SCHEMA
    path = ("ltm", "profile", "fastl4")


class HttpCompressProfileHandler(ResourceHandler):
    type_name = "bigip_ltm_profile_httpcompress"
    description = "HTTP compression profile"
    schema = HTTP_COMPRESS_PROFILE_SCHEMA
    path = ("ltm", "profile", "http-compression")


class OneConnectProfileHandler(ResourceHandler):
    type_name = "bigip_ltm_profile_oneconnect"
    description = "OneConnect profile"
    schema = ONECONNECT_PROFILE_SCHEMA
    path = ("ltm", "profile", "one-connect")
