"""Exception hierarchy shared by the transport, adapter and handlers."""
from typing import Optional


class BigIPError(Exception):
    """Base class for every error raised by this package."""


class TransportError(BigIPError):
    """The appliance could not be reached (after transport retries)."""


class RequestError(BigIPError):
    """The appliance answered with a non-success status.

    iControl REST error bodies look like::

        {"code": 409, "message": "01020066:3: The requested ...", "errorStack": []}
    """

    def __init__(
        self,
        status: int,
        message: str = "",
        code: Optional[int] = None,
        error_stack: Optional[list] = None,
        method: str = "",
        url: str = "",
    ):
        self.status = status
        self.code = code if code is not None else status
        self.message = message
        self.error_stack = error_stack or []
        self.method = method
        self.url = url
        super().__init__(self._format())

    def _format(self) -> str:
        where = f" {self.method} {self.url}".rstrip() if self.method else ""
        return f"HTTP {self.status}{where}: {self.message or 'no message'}"


class NotFoundError(RequestError):
    """HTTP 404 - the addressed object does not exist."""


class ConflictError(RequestError):
    """HTTP 409 - an object with the same identity already exists."""


class DecodeError(BigIPError):
    """The wire payload does not have the structure the field table expects."""


class ResourceNotFound(BigIPError):
    """Import was asked for an identity that does not exist on the appliance."""


class UnknownResourceType(KeyError):
    """No handler is registered under the requested resource type name."""
