"""Name and address helpers shared by the resource handlers."""
import ipaddress
import re

_FULL_PATH = re.compile(r"^/[^/\s]+(/[^/\s]+)+$")
_BARE_NAME = re.compile(r"^[^/\s]+$")


def validate_f5_name(name: str) -> str:
    """Accept ``/Partition/name`` (optionally with a folder) or a bare name.

    Raises:
        ValueError: for empty names, whitespace, or malformed paths
    """
    if not name:
        raise ValueError("name is required")
    if name.startswith("/"):
        if not _FULL_PATH.match(name):
            raise ValueError(f"'{name}' is not a valid full path, expected /Partition/name")
    elif not _BARE_NAME.match(name):
        raise ValueError(f"'{name}' is not a valid object name")
    return name


def full_path(partition: str, name: str) -> str:
    """Identity of an object: ``/partition/name``, or ``name`` when unscoped."""
    if not name or name.startswith("/") or not partition:
        return name
    return f"/{partition.strip('/')}/{name}"


def split_full_path(path: str) -> tuple[str, str]:
    """Split ``/Common/web-pool`` into ``("Common", "web-pool")``."""
    if not path.startswith("/"):
        return "", path
    partition, _, name = path.lstrip("/").rpartition("/")
    return partition, name


def cidr_to_netmask(mask: str) -> str:
    """Expand a prefix length ("24") to a dotted netmask; dotted masks pass through."""
    if not mask or "." in mask or ":" in mask:
        return mask
    try:
        prefix = int(mask)
    except ValueError:
        raise ValueError(f"Invalid netmask '{mask}'") from None
    if not 0 <= prefix <= 32:
        raise ValueError(f"Invalid prefix length '{mask}'")
    return str(ipaddress.IPv4Network(f"0.0.0.0/{prefix}").netmask)
