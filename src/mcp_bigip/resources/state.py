"""Per-resource state exchanged with the host, and drift reporting."""
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ResourceState:
    """Declared attributes in, observed attributes out.

    ``id`` is the identity bound to the remote object; an empty id means the
    resource is absent.
    """
    type_name: str
    id: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def present(self) -> bool:
        return bool(self.id)

    def clear(self) -> None:
        self.id = ""
        self.attributes = {}

    def to_dict(self) -> dict:
        return {
            "type": self.type_name,
            "id": self.id,
            "present": self.present,
            "attributes": self.attributes,
        }


def _is_unset(value: Any) -> bool:
    if isinstance(value, (list, dict)):
        return not value
    return value is None or value == ""


def _matches(want: Any, have: Any) -> bool:
    """Compare declared against observed, looking only at what was declared."""
    if isinstance(want, dict):
        if not isinstance(have, dict):
            return False
        return all(
            _matches(value, have.get(key))
            for key, value in want.items()
            if not _is_unset(value)
        )
    if isinstance(want, list):
        if not isinstance(have, list) or len(want) != len(have):
            return False
        return all(_matches(w, h) for w, h in zip(want, have))
    return want == have


@dataclass
class ResourceDiff:
    """Difference between declared and observed attributes."""
    resource_id: str = ""
    changes: list[dict] = field(default_factory=list)

    def add_change(self, change_type: str, attribute: str, details: dict):
        self.changes.append({
            "type": change_type,  # "added", "removed", "modified"
            "attribute": attribute,
            "details": details,
        })

    def has_changes(self) -> bool:
        return len(self.changes) > 0

    def to_text(self) -> str:
        if not self.changes:
            return "No drift detected"

        lines = [f"Drift for {self.resource_id or 'resource'}:"]
        for change in self.changes:
            prefix = {"added": "+", "removed": "-", "modified": "~"}.get(change["type"], "?")
            lines.append(f"  {prefix} {change['attribute']}: {change['details']}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {"resource_id": self.resource_id, "changes": self.changes}


def diff_attributes(declared: dict, observed: dict, resource_id: str = "") -> ResourceDiff:
    """Compare declared attributes with what the appliance reports.

    Attributes left unset in the declaration are not compared. An empty
    ``observed`` means the object does not exist remotely. For list
    attributes, extra remote items are reported as ``added`` and missing
    ones as ``removed``.
    """
    diff = ResourceDiff(resource_id=resource_id)

    if not observed:
        diff.add_change("removed", "*", {"expected": "present", "actual": "absent"})
        return diff

    for key, want in declared.items():
        if _is_unset(want):
            continue
        have = observed.get(key)

        if _is_unset(have):
            diff.add_change("removed", key, {"expected": want, "actual": have})
        elif isinstance(want, list) and isinstance(have, list) and len(want) != len(have):
            if len(have) > len(want) and _matches(want, have[:len(want)]):
                diff.add_change("added", key, {"items": have[len(want):]})
            elif len(have) < len(want) and _matches(want[:len(have)], have):
                diff.add_change("removed", key, {"items": want[len(have):]})
            else:
                diff.add_change("modified", key, {"expected": want, "actual": have})
        elif not _matches(want, have):
            diff.add_change("modified", key, {"expected": want, "actual": have})

    return diff
