"""Domain/wire adapter: field tables, generic codec and policy ordinals."""
from .codec import (
    decode,
    decode_json,
    encode,
    record_from_attributes,
    record_to_attributes,
)
from .fields import (
    ENABLED_DISABLED,
    ENABLED_EMPTY,
    TRUE_FALSE,
    YES_NO,
    BoolTokens,
    FieldSpec,
    Kind,
    WireSchema,
    flag,
    number,
    records,
    schema_for,
    strings,
    text,
)
from .ordinals import is_normalized, normalize_policy, normalize_rules

__all__ = [
    "encode",
    "decode",
    "decode_json",
    "record_to_attributes",
    "record_from_attributes",
    "BoolTokens",
    "YES_NO",
    "ENABLED_EMPTY",
    "TRUE_FALSE",
    "ENABLED_DISABLED",
    "FieldSpec",
    "Kind",
    "WireSchema",
    "schema_for",
    "text",
    "number",
    "flag",
    "strings",
    "records",
    "normalize_policy",
    "normalize_rules",
    "is_normalized",
]
