"""Local traffic policies.

A policy owns an ordered list of rules; each rule owns ordered actions and
conditions. On the wire all three levels are ``xReference`` envelopes, and
the appliance only returns them through separate sub-collection GETs:

    ltm/policy/<policy>/rules
    ltm/policy/<policy>/rules/<rule>/actions
    ltm/policy/<policy>/rules/<rule>/conditions

Rules are renumbered (see ``adapter.ordinals``) before every write.
"""
import logging
from dataclasses import dataclass, field, replace

from ..adapter import WireSchema, flag, normalize_policy, number, records, strings, text
from ..client import BigIPClient
from .base import ResourceHandler

logger = logging.getLogger(__name__)


@dataclass
class PolicyRuleAction:
    name: str = ""
    # what to act on
    http: bool = False
    http_uri: bool = False
    http_host: bool = False
    http_header: bool = False
    http_cookie: bool = False
    http_reply: bool = False
    http_referer: bool = False
    http_set_cookie: bool = False
    tcp_nagle: bool = False
    server_ssl: bool = False
    cache: bool = False
    compress: bool = False
    decompress: bool = False
    persist: bool = False
    log: bool = False
    tcl: bool = False
    asm: bool = False
    l7dos: bool = False
    # what to do
    forward: bool = False
    redirect: bool = False
    replace: bool = False
    insert: bool = False
    remove: bool = False
    reset: bool = False
    select: bool = False
    enable: bool = False
    disable: bool = False
    set_variable: bool = False
    request: bool = False
    response: bool = False
    # arguments
    pool: str = ""
    node: str = ""
    virtual: str = ""
    location: str = ""
    host: str = ""
    path: str = ""
    query_string: str = ""
    tm_name: str = ""
    value: str = ""
    expression: str = ""
    message: str = ""
    snat: str = ""
    snatpool: str = ""
    vlan: str = ""
    code: int = 0
    port: int = 0
    status: int = 0
    timeout: int = 0


POLICY_RULE_ACTION_SCHEMA = WireSchema(PolicyRuleAction, [
    text("name", "name"),
    flag("http", "http"),
    flag("http_uri", "httpUri"),
    flag("http_host", "httpHost"),
    flag("http_header", "httpHeader"),
    flag("http_cookie", "httpCookie"),
    flag("http_reply", "httpReply"),
    flag("http_referer", "httpReferer"),
    flag("http_set_cookie", "httpSetCookie"),
    flag("tcp_nagle", "tcpNagle"),
    flag("server_ssl", "serverSsl"),
    flag("cache", "cache"),
    flag("compress", "compress"),
    flag("decompress", "decompress"),
    flag("persist", "persist"),
    flag("log", "log"),
    flag("tcl", "tcl"),
    flag("asm", "asm"),
    flag("l7dos", "l7dos"),
    flag("forward", "forward"),
    flag("redirect", "redirect"),
    flag("replace", "replace"),
    flag("insert", "insert"),
    flag("remove", "remove"),
    flag("reset", "reset"),
    flag("select", "select"),
    flag("enable", "enable"),
    flag("disable", "disable"),
    flag("set_variable", "setVariable"),
    flag("request", "request"),
    flag("response", "response"),
    text("pool", "pool"),
    text("node", "node"),
    text("virtual", "virtual"),
    text("location", "location"),
    text("host", "host"),
    text("path", "path"),
    text("query_string", "queryString"),
    text("tm_name", "tmName"),
    text("value", "value"),
    text("expression", "expression"),
    text("message", "message"),
    text("snat", "snat"),
    text("snatpool", "snatpool"),
    text("vlan", "vlan"),
    number("code", "code"),
    number("port", "port"),
    number("status", "status"),
    number("timeout", "timeout"),
])


@dataclass
class PolicyRuleCondition:
    name: str = ""
    # what to match on
    http_uri: bool = False
    http_host: bool = False
    http_header: bool = False
    http_method: bool = False
    http_cookie: bool = False
    http_referer: bool = False
    http_user_agent: bool = False
    http_version: bool = False
    http_status: bool = False
    tcp: bool = False
    client_ssl: bool = False
    ssl_extension: bool = False
    geoip: bool = False
    address: bool = False
    port: bool = False
    host: bool = False
    path: bool = False
    path_segment: bool = False
    extension: bool = False
    query_string: bool = False
    query_parameter: bool = False
    scheme: bool = False
    server_name: bool = False
    vlan: bool = False
    # how to match
    equals: bool = False
    starts_with: bool = False
    ends_with: bool = False
    contains: bool = False
    matches: bool = False
    greater: bool = False
    less: bool = False
    present: bool = False
    missing: bool = False
    not_: bool = False
    case_insensitive: bool = False
    case_sensitive: bool = False
    # where
    request: bool = False
    response: bool = False
    local: bool = False
    remote: bool = False
    external: bool = False
    internal: bool = False
    # arguments
    tm_name: str = ""
    index: int = 0
    values: list[str] = field(default_factory=list)


POLICY_RULE_CONDITION_SCHEMA = WireSchema(PolicyRuleCondition, [
    text("name", "name"),
    flag("http_uri", "httpUri"),
    flag("http_host", "httpHost"),
    flag("http_header", "httpHeader"),
    flag("http_method", "httpMethod"),
    flag("http_cookie", "httpCookie"),
    flag("http_referer", "httpReferer"),
    flag("http_user_agent", "httpUserAgent"),
    flag("http_version", "httpVersion"),
    flag("http_status", "httpStatus"),
    flag("tcp", "tcp"),
    flag("client_ssl", "clientSsl"),
    flag("ssl_extension", "sslExtension"),
    flag("geoip", "geoip"),
    flag("address", "address"),
    flag("port", "port"),
    flag("host", "host"),
    flag("path", "path"),
    flag("path_segment", "pathSegment"),
    flag("extension", "extension"),
    flag("query_string", "queryString"),
    flag("query_parameter", "queryParameter"),
    flag("scheme", "scheme"),
    flag("server_name", "serverName"),
    flag("vlan", "vlan"),
    flag("equals", "equals"),
    flag("starts_with", "startsWith"),
    flag("ends_with", "endsWith"),
    flag("contains", "contains"),
    flag("matches", "matches"),
    flag("greater", "greater"),
    flag("less", "less"),
    flag("present", "present"),
    flag("missing", "missing"),
    flag("not_", "not"),
    flag("case_insensitive", "caseInsensitive"),
    flag("case_sensitive", "caseSensitive"),
    flag("request", "request"),
    flag("response", "response"),
    flag("local", "local"),
    flag("remote", "remote"),
    flag("external", "external"),
    flag("internal", "internal"),
    text("tm_name", "tmName"),
    number("index", "index"),
    strings("values", "values"),
])


@dataclass
class PolicyRule:
    name: str = ""
    full_path: str = ""
    description: str = ""
    ordinal: int = 0
    conditions: list[PolicyRuleCondition] = field(default_factory=list)
    actions: list[PolicyRuleAction] = field(default_factory=list)


POLICY_RULE_SCHEMA = WireSchema(PolicyRule, [
    text("name", "name", omit_empty=False),
    text("full_path", "fullPath"),
    text("description", "description"),
    number("ordinal", "ordinal", omit_empty=False),
    records("conditions", "conditionsReference", POLICY_RULE_CONDITION_SCHEMA, envelope=True),
    records("actions", "actionsReference", POLICY_RULE_ACTION_SCHEMA, envelope=True),
])


@dataclass
class Policy:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    description: str = ""
    controls: list[str] = field(default_factory=list)
    requires: list[str] = field(default_factory=list)
    strategy: str = ""
    rules: list[PolicyRule] = field(default_factory=list)


POLICY_SCHEMA = WireSchema(Policy, [
    text("name", "name", omit_empty=False),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("description", "description"),
    strings("controls", "controls", description="e.g. forwarding, caching"),
    strings("requires", "requires", description="e.g. http, tcp"),
    text("strategy", "strategy", description="e.g. /Common/first-match"),
    records("rules", "rulesReference", POLICY_RULE_SCHEMA, envelope=True),
])


class PolicyHandler(ResourceHandler):
    type_name = "bigip_ltm_policy"
    description = "Local traffic policy with ordered rules"
    schema = POLICY_SCHEMA
    path = ("ltm", "policy")

    def prepare(self, record: Policy) -> Policy:
        return normalize_policy(record)

    async def expand(self, client: BigIPClient, identity: str, dto: dict) -> dict:
        rules = await client.list_collection(*self.path, identity, "rules")
        for rule in rules:
            rule_path = (*self.path, identity, "rules", rule.get("name", ""))
            actions = await client.list_collection(*rule_path, "actions")
            conditions = await client.list_collection(*rule_path, "conditions")
            rule["actionsReference"] = {"items": actions}
            rule["conditionsReference"] = {"items": conditions}
        logger.debug(f"Fetched {len(rules)} rules for policy {identity}")
        dto["rulesReference"] = {"items": rules}
        return dto

    def observe(self, record: Policy) -> Policy:
        # the rules collection is listed by name, not by evaluation order
        return replace(record, rules=sorted(record.rules, key=lambda r: r.ordinal))
