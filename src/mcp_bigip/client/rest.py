"""Async iControl REST client.

Paths are built from segments below ``/mgmt/tm``; a ``/`` inside a segment
(partition-qualified names such as ``/Common/web-pool``) is sent as ``~``::

    await client.get("ltm", "pool", "/Common/web-pool")
    # GET https://<host>/mgmt/tm/ltm/pool/~Common~web-pool
"""
import logging
from typing import TYPE_CHECKING, Any, Optional

import httpx

from ..exceptions import (
    ConflictError,
    DecodeError,
    NotFoundError,
    RequestError,
    TransportError,
)
from ..utils.connection import with_retry

if TYPE_CHECKING:
    from ..config.settings import ApplianceConfig

logger = logging.getLogger(__name__)

API_ROOT = "/mgmt/tm"
LOGIN_PATH = "/mgmt/shared/authn/login"


def uri(*parts: str) -> str:
    """Build an iControl REST path from segments."""
    segments = [str(p).replace("/", "~") for p in parts if p not in (None, "")]
    return "/".join([API_ROOT, *segments])


def object_uri(*parts: str) -> str:
    """Like ``uri`` but the last segment must name an object."""
    if not parts or parts[-1] in (None, ""):
        raise ValueError(f"Empty object name in path {'/'.join(str(p) for p in parts)!r}")
    return uri(*parts)


class BigIPClient:
    """REST session to one BIG-IP appliance.

    The client is passed explicitly to every lifecycle operation; it holds the
    HTTP session and nothing about the resources it is used for.
    """

    def __init__(
        self,
        config: "ApplianceConfig",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def is_connected(self) -> bool:
        return self._http is not None

    # Session management

    async def connect(self) -> None:
        """Open the HTTP session (and log in for token auth)."""
        if self._http is not None:
            return

        auth = None
        if self.config.auth_mode == "basic":
            auth = httpx.BasicAuth(self.config.username, self.config.get_password())

        self._http = httpx.AsyncClient(
            base_url=self.config.base_url,
            auth=auth,
            verify=self.config.verify_ssl,
            timeout=httpx.Timeout(self.config.timeout),
            headers={"Content-Type": "application/json"},
            transport=self._transport,
        )
        logger.info(f"Opened REST session to {self.name} ({self.config.base_url})")

        if self.config.auth_mode == "token":
            await self._login()

    async def _login(self) -> None:
        payload = {
            "username": self.config.username,
            "password": self.config.get_password(),
            "loginProviderName": self.config.login_provider,
        }
        resp = await self._send("POST", LOGIN_PATH, payload, None)
        body = self._json(resp)
        try:
            token = body["token"]["token"]
        except (KeyError, TypeError):
            raise DecodeError(f"Login to {self.name} returned no token") from None
        self._http.headers["X-F5-Auth-Token"] = token
        logger.info(f"Obtained auth token for {self.name}")

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None
            logger.info(f"Closed REST session to {self.name}")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    # Requests

    async def _send(
        self,
        method: str,
        path: str,
        body: Optional[dict],
        params: Optional[dict],
    ) -> httpx.Response:
        await self.connect()

        @with_retry(
            attempts=self.config.retries,
            delay=self.config.retry_delay,
            label=f"{method} {path} on {self.name}",
        )
        async def attempt() -> httpx.Response:
            return await self._http.request(method, path, json=body, params=params)

        try:
            resp = await attempt()
        except httpx.TransportError as e:
            raise TransportError(f"{method} {path} on {self.name} failed: {e}") from e

        logger.debug(f"{method} {path} -> {resp.status_code}")
        if resp.status_code >= 400:
            raise self._error(method, path, resp)
        return resp

    @staticmethod
    def _error(method: str, path: str, resp: httpx.Response) -> RequestError:
        message = resp.text
        code = None
        error_stack: list = []
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message", message)
            code = body.get("code")
            error_stack = body.get("errorStack") or []

        if resp.status_code == 404:
            error_cls = NotFoundError
        elif resp.status_code == 409:
            error_cls = ConflictError
        else:
            error_cls = RequestError
        return error_cls(
            resp.status_code, message, code=code, error_stack=error_stack,
            method=method, url=path,
        )

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise DecodeError(f"Malformed JSON from {resp.request.url}: {e}") from e

    async def get(self, *path: str, params: Optional[dict] = None) -> Optional[dict]:
        """GET an object; returns None when the appliance reports 404."""
        try:
            resp = await self._send("GET", object_uri(*path), None, params)
        except NotFoundError:
            return None
        return self._json(resp)

    async def list_collection(self, *path: str) -> list[dict]:
        """GET a collection and return its ``items`` (empty when missing)."""
        body = await self.get(*path)
        if body is None:
            return []
        items = body.get("items", []) if isinstance(body, dict) else body
        if not isinstance(items, list):
            raise DecodeError(f"Collection {uri(*path)} has non-list items")
        return items

    async def post(self, *path: str, body: dict) -> dict:
        resp = await self._send("POST", uri(*path), body, None)
        return self._json(resp)

    async def put(self, *path: str, body: dict) -> dict:
        resp = await self._send("PUT", object_uri(*path), body, None)
        return self._json(resp)

    async def delete(self, *path: str) -> None:
        """DELETE an object; raises NotFoundError when it is already gone."""
        await self._send("DELETE", object_uri(*path), None, None)
