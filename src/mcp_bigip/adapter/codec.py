"""Generic encode/decode between domain records and iControl REST payloads.

Rules applied to every field table:
- booleans with a token pair encode to ``on``/``off``; on decode only the
  ``on`` token is true, anything else (missing, unknown) is false
- sub-collections with ``envelope=True`` travel as ``{"<key>": {"items": [...]}}``
  and decode to ``[]`` when the envelope or its items are absent
- empty values are left out of the payload unless the field says otherwise
- structural mismatches raise ``DecodeError``; token mismatches never do
"""
import json
import logging
from typing import Any, Union

from ..exceptions import DecodeError
from .fields import FieldSpec, Kind, WireSchema, schema_for

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    if isinstance(value, (list, tuple, dict)):
        return not value
    return value is None or value == "" or value == 0


# === Encode ===

def encode(record: Any) -> dict:
    """Render a domain record as a wire payload."""
    schema = schema_for(type(record))
    dto: dict = {}

    for spec in schema:
        value = _encode_value(spec, getattr(record, spec.name))
        if spec.omit_empty and _is_empty(value):
            continue
        if spec.kind == Kind.RECORDS and spec.envelope:
            value = {"items": value}
        _set_path(dto, spec.wire_path, value)

    return dto


def _encode_value(spec: FieldSpec, value: Any) -> Any:
    if spec.kind == Kind.BOOLEAN:
        if spec.tokens is None:
            return bool(value)
        return spec.tokens.on if value else spec.tokens.off

    if spec.kind == Kind.INTEGER:
        return int(value) if value is not None else 0

    if spec.kind == Kind.LIST:
        return list(value or [])

    if spec.kind == Kind.RECORDS:
        items = []
        for item in value or []:
            if isinstance(item, dict):
                item = record_from_attributes(spec.item_schema, item)
            items.append(encode(item))
        return items

    return "" if value is None else value


def _set_path(dto: dict, path: tuple[str, ...], value: Any) -> None:
    target = dto
    for key in path[:-1]:
        target = target.setdefault(key, {})
    target[path[-1]] = value


# === Decode ===

def decode(schema: WireSchema, dto: Any) -> Any:
    """Build a domain record from a wire payload."""
    if not isinstance(dto, dict):
        raise DecodeError(
            f"{schema.record_type.__name__}: expected an object, got {type(dto).__name__}"
        )

    kwargs: dict[str, Any] = {}
    for spec in schema:
        found, raw = _get_path(dto, spec.wire_path)
        if not found:
            if spec.kind == Kind.BOOLEAN:
                kwargs[spec.name] = False
            continue
        kwargs[spec.name] = _decode_value(schema, spec, raw)

    return schema.record_type(**kwargs)


def decode_json(schema: WireSchema, payload: Union[str, bytes]) -> Any:
    """Parse a raw JSON body and decode it."""
    try:
        dto = json.loads(payload)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"{schema.record_type.__name__}: malformed JSON: {e}") from e
    return decode(schema, dto)


def _get_path(dto: dict, path: tuple[str, ...]) -> tuple[bool, Any]:
    current: Any = dto
    for key in path:
        if current is None:
            return False, None
        if not isinstance(current, dict):
            raise DecodeError(f"Expected an object at '{key}', got {type(current).__name__}")
        if key not in current:
            return False, None
        current = current[key]
    return True, current


def _decode_value(schema: WireSchema, spec: FieldSpec, raw: Any) -> Any:
    where = f"{schema.record_type.__name__}.{spec.name}"

    if spec.kind == Kind.BOOLEAN:
        return _decode_bool(where, spec, raw)

    if spec.kind == Kind.INTEGER:
        if raw is None:
            return 0
        if isinstance(raw, bool):
            raise DecodeError(f"{where}: expected an integer, got a boolean")
        if isinstance(raw, float) and not raw.is_integer():
            raise DecodeError(f"{where}: expected an integer, got {raw!r}")
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise DecodeError(f"{where}: expected an integer, got {raw!r}") from None

    if spec.kind == Kind.LIST:
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise DecodeError(f"{where}: expected a list, got {type(raw).__name__}")
        return [item if isinstance(item, str) else str(item) for item in raw]

    if spec.kind == Kind.RECORDS:
        return [decode(spec.item_schema, item) for item in _unwrap(where, spec, raw)]

    if raw is None:
        return ""
    if isinstance(raw, (dict, list)):
        raise DecodeError(f"{where}: expected a string, got {type(raw).__name__}")
    return raw if isinstance(raw, str) else str(raw)


def _decode_bool(where: str, spec: FieldSpec, raw: Any) -> bool:
    if spec.tokens is None:
        if isinstance(raw, bool):
            return raw
        logger.debug(f"{where}: non-boolean value {raw!r} read as false")
        return False

    if raw == spec.tokens.on:
        return True
    if raw != spec.tokens.off:
        # Possible API drift: the appliance sent a token we do not know.
        logger.debug(
            f"{where}: unrecognized token {raw!r} "
            f"(expected {spec.tokens.on!r}/{spec.tokens.off!r}), read as false"
        )
    return False


def _unwrap(where: str, spec: FieldSpec, raw: Any) -> list:
    if raw is None:
        return []

    if spec.envelope:
        if not isinstance(raw, dict):
            raise DecodeError(f"{where}: envelope must be an object, got {type(raw).__name__}")
        raw = raw.get("items")
        if raw is None:
            return []

    if not isinstance(raw, list):
        raise DecodeError(f"{where}: items must be a list, got {type(raw).__name__}")
    return raw


# === Host attributes ===

def record_to_attributes(record: Any) -> dict:
    """Flatten a record (and its sub-records) into plain attribute dicts."""
    schema = schema_for(type(record))
    attrs: dict[str, Any] = {}
    for spec in schema:
        value = getattr(record, spec.name)
        if spec.kind == Kind.RECORDS:
            value = [record_to_attributes(item) for item in value]
        elif spec.kind == Kind.LIST:
            value = list(value)
        attrs[spec.name] = value
    return attrs


def record_from_attributes(schema: WireSchema, attributes: dict) -> Any:
    """Build a record from host attributes, coercing scalar types.

    Raises:
        ValueError: for attributes the record does not declare or values
            that cannot be coerced
    """
    unknown = set(attributes) - set(schema.names)
    if unknown:
        raise ValueError(
            f"Unknown attribute(s) for {schema.record_type.__name__}: "
            f"{', '.join(sorted(unknown))}"
        )

    kwargs: dict[str, Any] = {}
    for name, value in attributes.items():
        spec = schema.get(name)
        if value is None:
            continue
        if spec.kind == Kind.RECORDS:
            kwargs[name] = [
                record_from_attributes(spec.item_schema, item) if isinstance(item, dict) else item
                for item in value
            ]
        elif spec.kind == Kind.LIST:
            kwargs[name] = [str(item) for item in value]
        elif spec.kind == Kind.INTEGER:
            kwargs[name] = int(value) if value != "" else 0
        elif spec.kind == Kind.BOOLEAN:
            kwargs[name] = _coerce_bool(value)
        else:
            kwargs[name] = str(value)

    return schema.record_type(**kwargs)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "enabled", "1", "on")
    return bool(value)
