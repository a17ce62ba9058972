"""iRules: TCL event scripts attached to virtual servers."""
from dataclasses import dataclass, replace

from ..adapter import WireSchema, text
from .base import ResourceHandler


@dataclass
class IRule:
    name: str = ""
    partition: str = ""
    full_path: str = ""
    irule: str = ""


IRULE_SCHEMA = WireSchema(IRule, [
    text("name", "name"),
    text("partition", "partition"),
    text("full_path", "fullPath"),
    text("irule", "apiAnonymous", description="iRule body (TCL)"),
])


class IRuleHandler(ResourceHandler):
    type_name = "bigip_ltm_irule"
    description = "iRule"
    schema = IRULE_SCHEMA
    path = ("ltm", "rule")

    # The appliance pads the body with whitespace; compare trimmed text only
    def prepare(self, record: IRule) -> IRule:
        return replace(record, irule=record.irule.strip())

    def observe(self, record: IRule) -> IRule:
        return replace(record, irule=record.irule.strip())
