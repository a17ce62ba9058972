"""Shared fixtures: an in-memory BIG-IP served through httpx.MockTransport."""
import copy
import json

import httpx
import pytest

from mcp_bigip.client import BigIPClient
from mcp_bigip.config.settings import ApplianceConfig

API = "/mgmt/tm/"

# Payload keys the appliance stores as child collections instead of inline
SUBCOLLECTIONS = {
    "membersReference": "members",
    "rulesReference": "rules",
    "actionsReference": "actions",
    "conditionsReference": "conditions",
    "deviceReference": "devices",
    "profiles": "profiles",
    "policies": "policies",
}

TCP_DEFAULTS = {
    "defaultsFrom": "/Common/tcp",
    "idleTimeout": 300,
    "closeWaitTimeout": 5,
    "finWait_2Timeout": 300,
    "finWaitTimeout": 5,
    "keepAliveInterval": 1800,
    "deferredAccept": "disabled",
    "fastOpen": "enabled",
}


def _error(status: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"code": status, "message": message, "errorStack": []})


class FakeBigIP:
    """Minimal iControl REST appliance.

    Objects are stored under their escaped path, e.g. ``ltm/pool/~Common~web``;
    a collection GET lists the direct children of a path.
    """

    def __init__(self):
        self.objects: dict[str, dict] = {}
        self.defaults: dict[str, dict] = {"ltm/profile/tcp": TCP_DEFAULTS}
        self.requests: list[httpx.Request] = []
        self.token = "fake-token"
        self.fail_next: list[httpx.Response] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def seed(self, collection: str, body: dict) -> str:
        return self._store(collection, copy.deepcopy(body))

    def get_object(self, key: str) -> dict:
        return self.objects[key]

    def methods(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]

    # Storage

    @staticmethod
    def _identity(body: dict) -> str:
        name = body.get("name", "")
        if name.startswith("/"):
            return name
        if body.get("partition"):
            return f"/{body['partition']}/{name}"
        return name

    def _store(self, collection: str, body: dict) -> str:
        identity = self._identity(body)
        if identity.startswith("/"):
            partition, _, name = identity.lstrip("/").rpartition("/")
            body["name"] = name
            body["partition"] = partition
            body["fullPath"] = identity
        key = f"{collection}/{identity.replace('/', '~')}"

        obj = dict(self.defaults.get(collection, {}))
        children = {}
        for field, value in body.items():
            if field in SUBCOLLECTIONS:
                children[SUBCOLLECTIONS[field]] = value
            else:
                obj[field] = value
        obj.setdefault("kind", f"tm:{collection.replace('/', ':')}:state")
        obj["generation"] = len(self.requests)
        self.objects[key] = obj

        for child, value in children.items():
            items = value.get("items", []) if isinstance(value, dict) else value
            for item in items or []:
                if isinstance(item, str):
                    item = {"name": item}
                self._store(f"{key}/{child}", dict(item))
        return key

    def _drop(self, key: str) -> None:
        for existing in [k for k in self.objects if k == key or k.startswith(key + "/")]:
            del self.objects[existing]

    def _children(self, path: str) -> list[dict]:
        prefix = path + "/"
        return [
            obj for key, obj in self.objects.items()
            if key.startswith(prefix) and "/" not in key[len(prefix):]
        ]

    # HTTP

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_next:
            return self.fail_next.pop(0)

        if request.url.path == "/mgmt/shared/authn/login":
            return httpx.Response(200, json={"token": {"token": self.token}})

        path = request.url.path[len(API):]
        body = json.loads(request.content) if request.content else None

        if request.method == "GET":
            if path in self.objects:
                return httpx.Response(200, json=self.objects[path])
            children = self._children(path)
            if children:
                return httpx.Response(200, json={"kind": "collection", "items": children})
            return _error(404, f"01020036:3: The requested object ({path}) was not found.")

        if request.method == "POST":
            key = f"{path}/{self._identity(body).replace('/', '~')}"
            if key in self.objects:
                return _error(409, f"01020066:3: The requested object ({key}) already exists.")
            self._store(path, body)
            return httpx.Response(200, json=self.objects[key])

        if request.method == "PUT":
            if path not in self.objects:
                return _error(404, f"01020036:3: The requested object ({path}) was not found.")
            collection, _, escaped = path.rpartition("/")
            self._drop(path)
            body["name"] = escaped.replace("~", "/")
            self._store(collection, body)
            return httpx.Response(200, json={})

        if request.method == "DELETE":
            if path not in self.objects:
                return _error(404, f"01020036:3: The requested object ({path}) was not found.")
            self._drop(path)
            return httpx.Response(200, content=b"")

        return _error(405, "method not allowed")


@pytest.fixture
def appliance() -> FakeBigIP:
    return FakeBigIP()


@pytest.fixture
def appliance_config() -> ApplianceConfig:
    return ApplianceConfig(
        name="bigip-test",
        host="bigip.test",
        password="secret",
        retries=2,
        retry_delay=0.01,
    )


@pytest.fixture
def client(appliance, appliance_config) -> BigIPClient:
    return BigIPClient(appliance_config, transport=appliance.transport)
