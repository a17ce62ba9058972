"""Declarative field tables for domain records.

Every resource record is a plain dataclass. Its wire shape is described once,
as a ``WireSchema`` of ``FieldSpec`` rows, and the generic codec in
``adapter.codec`` reads that table in both directions::

    POOL_SCHEMA = WireSchema(Pool, [
        text("name", "name"),
        flag("allow_nat", "allowNat", tokens=YES_NO),
        records("members", "membersReference", POOL_MEMBER_SCHEMA, envelope=True),
    ])
"""
import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional


class Kind(str, Enum):
    """Shape of a single field."""
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    LIST = "list"          # ordered list of scalars
    RECORDS = "records"    # ordered list of sub-records


@dataclass(frozen=True)
class BoolTokens:
    """The pair of strings the appliance uses for a boolean field."""
    on: str
    off: str


YES_NO = BoolTokens("yes", "no")
ENABLED_EMPTY = BoolTokens("enabled", "")
TRUE_FALSE = BoolTokens("true", "false")
ENABLED_DISABLED = BoolTokens("enabled", "disabled")


@dataclass(frozen=True)
class FieldSpec:
    """One row of a field table."""
    name: str
    wire_key: str  # dotted keys address nested wire objects
    kind: Kind = Kind.STRING
    tokens: Optional[BoolTokens] = None
    omit_empty: bool = True
    item_schema: Optional["WireSchema"] = None
    envelope: bool = False  # wrap sub-records in {"items": [...]}
    description: str = ""

    @property
    def wire_path(self) -> tuple[str, ...]:
        return tuple(self.wire_key.split("."))

    def describe(self) -> dict:
        info: dict[str, Any] = {
            "name": self.name,
            "wire_key": self.wire_key,
            "kind": self.kind.value,
        }
        if self.tokens is not None:
            info["tokens"] = [self.tokens.on, self.tokens.off]
        if not self.omit_empty:
            info["always_sent"] = True
        if self.item_schema is not None:
            info["envelope"] = self.envelope
            info["items"] = self.item_schema.describe()
        if self.description:
            info["description"] = self.description
        return info


_SCHEMAS: dict[type, "WireSchema"] = {}


class WireSchema:
    """Field table bound to a record dataclass."""

    def __init__(self, record_type: type, fields: list[FieldSpec]):
        if not dataclasses.is_dataclass(record_type):
            raise TypeError(f"{record_type.__name__} is not a dataclass")

        attrs = {f.name for f in dataclasses.fields(record_type)}
        for spec in fields:
            if spec.name not in attrs:
                raise ValueError(
                    f"{record_type.__name__} has no attribute '{spec.name}'"
                )
            if spec.kind == Kind.RECORDS and spec.item_schema is None:
                raise ValueError(f"Field '{spec.name}' needs an item schema")
            if spec.tokens is not None and spec.kind != Kind.BOOLEAN:
                raise ValueError(f"Field '{spec.name}' has tokens but is not boolean")

        self.record_type = record_type
        self.fields = tuple(fields)
        self._by_name = {spec.name: spec for spec in self.fields}
        _SCHEMAS[record_type] = self

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> FieldSpec:
        return self._by_name[name]

    @property
    def names(self) -> list[str]:
        return [spec.name for spec in self.fields]

    def describe(self) -> list[dict]:
        return [spec.describe() for spec in self.fields]

    def __repr__(self) -> str:
        return f"WireSchema({self.record_type.__name__}, {len(self.fields)} fields)"


def schema_for(record_type: type) -> WireSchema:
    """Look up the field table registered for a record type."""
    try:
        return _SCHEMAS[record_type]
    except KeyError:
        raise TypeError(f"No wire schema registered for {record_type.__name__}") from None


# --- Row constructors ---

def text(name: str, wire_key: str, *, omit_empty: bool = True, description: str = "") -> FieldSpec:
    return FieldSpec(name, wire_key, Kind.STRING, omit_empty=omit_empty, description=description)


def number(name: str, wire_key: str, *, omit_empty: bool = True, description: str = "") -> FieldSpec:
    return FieldSpec(name, wire_key, Kind.INTEGER, omit_empty=omit_empty, description=description)


def flag(
    name: str,
    wire_key: str,
    *,
    tokens: Optional[BoolTokens] = None,
    omit_empty: bool = True,
    description: str = "",
) -> FieldSpec:
    """Boolean field; without tokens it travels as a native JSON boolean."""
    return FieldSpec(
        name, wire_key, Kind.BOOLEAN, tokens=tokens,
        omit_empty=omit_empty, description=description,
    )


def strings(name: str, wire_key: str, *, omit_empty: bool = True, description: str = "") -> FieldSpec:
    return FieldSpec(name, wire_key, Kind.LIST, omit_empty=omit_empty, description=description)


def records(
    name: str,
    wire_key: str,
    item_schema: WireSchema,
    *,
    envelope: bool = False,
    omit_empty: bool = True,
    description: str = "",
) -> FieldSpec:
    return FieldSpec(
        name, wire_key, Kind.RECORDS, item_schema=item_schema,
        envelope=envelope, omit_empty=omit_empty, description=description,
    )
