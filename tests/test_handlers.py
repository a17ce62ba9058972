"""Tests for resource lifecycle handlers against the simulated appliance."""
import json

import pytest

from mcp_bigip.exceptions import ConflictError, ResourceNotFound, UnknownResourceType
from mcp_bigip.resources import RESOURCE_TYPES, ResourceState, get_handler


def _body(request) -> dict:
    return json.loads(request.content)


def _state(type_name: str, **attributes) -> ResourceState:
    return ResourceState(type_name, attributes=attributes)


class TestRegistry:
    """Tests for the resource type registry."""

    def test_all_types_registered(self):
        assert set(RESOURCE_TYPES) == {
            "bigip_ltm_irule",
            "bigip_ltm_node",
            "bigip_ltm_pool",
            "bigip_ltm_monitor",
            "bigip_ltm_virtual_server",
            "bigip_ltm_virtual_address",
            "bigip_ltm_policy",
            "bigip_ltm_profile_tcp",
            "bigip_ltm_profile_fasthttp",
            "bigip_ltm_profile_fastl4",
            "bigip_ltm_profile_httpcompress",
            "bigip_ltm_profile_oneconnect",
            "bigip_ltm_datagroup",
            "bigip_cm_device",
            "bigip_cm_devicegroup",
        }

    def test_unknown_type(self):
        with pytest.raises(UnknownResourceType):
            get_handler("bigip_gtm_pool")

    def test_unknown_type_is_key_error(self):
        with pytest.raises(KeyError):
            get_handler("nope")

    def test_describe(self):
        info = get_handler("bigip_ltm_pool").describe()
        assert info["path"] == "ltm/pool"
        assert any(f["name"] == "members" and f["envelope"] for f in info["fields"])


class TestLifecycle:
    """Common create/read/update/delete contract, exercised on nodes."""

    @pytest.mark.asyncio
    async def test_create_then_read(self, appliance, client):
        handler = get_handler("bigip_ltm_node")
        state = _state("bigip_ltm_node", name="n1", partition="Common", address="10.0.0.1")

        await handler.create(client, state)

        assert state.id == "/Common/n1"
        assert state.attributes["address"] == "10.0.0.1"
        assert state.attributes["full_path"] == "/Common/n1"
        assert appliance.methods() == [
            ("POST", "/mgmt/tm/ltm/node"),
            ("GET", "/mgmt/tm/ltm/node/~Common~n1"),
        ]

    @pytest.mark.asyncio
    async def test_create_full_path_name(self, appliance, client):
        handler = get_handler("bigip_ltm_node")
        state = _state("bigip_ltm_node", name="/Common/n1", address="10.0.0.1")

        await handler.create(client, state)

        assert state.id == "/Common/n1"
        assert state.attributes["name"] == "/Common/n1"
        assert state.attributes["partition"] == "Common"

    @pytest.mark.asyncio
    async def test_create_conflict_propagates(self, appliance, client):
        appliance.seed("ltm/node", {"name": "n1", "partition": "Common"})
        handler = get_handler("bigip_ltm_node")
        state = _state("bigip_ltm_node", name="n1", partition="Common", address="10.0.0.1")

        with pytest.raises(ConflictError):
            await handler.create(client, state)
        assert state.id == ""
        assert len(appliance.requests) == 1

    @pytest.mark.asyncio
    async def test_create_rejects_bad_name(self, appliance, client):
        handler = get_handler("bigip_ltm_node")
        with pytest.raises(ValueError):
            await handler.create(client, _state("bigip_ltm_node", name="bad name"))
        assert appliance.requests == []

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_attribute(self, client):
        handler = get_handler("bigip_ltm_node")
        with pytest.raises(ValueError):
            await handler.create(client, _state("bigip_ltm_node", name="n1", colour="red"))

    @pytest.mark.asyncio
    async def test_read_not_found_clears_state(self, client):
        handler = get_handler("bigip_ltm_node")
        state = ResourceState("bigip_ltm_node", id="/Common/gone", attributes={"name": "gone"})

        await handler.read(client, state)

        assert state.id == ""
        assert state.attributes == {}
        assert not state.present

    @pytest.mark.asyncio
    async def test_read_overwrites_attributes(self, appliance, client):
        appliance.seed("ltm/node", {"name": "n1", "partition": "Common", "address": "10.0.0.9", "ratio": 3})
        handler = get_handler("bigip_ltm_node")
        state = ResourceState(
            "bigip_ltm_node", id="/Common/n1",
            attributes={"name": "n1", "partition": "Common", "address": "10.0.0.1"},
        )

        await handler.read(client, state)

        assert state.attributes["address"] == "10.0.0.9"
        assert state.attributes["ratio"] == 3

    @pytest.mark.asyncio
    async def test_delete(self, appliance, client):
        key = appliance.seed("ltm/node", {"name": "n1", "partition": "Common"})
        handler = get_handler("bigip_ltm_node")
        state = ResourceState("bigip_ltm_node", id="/Common/n1", attributes={"name": "n1"})

        await handler.delete(client, state)

        assert key not in appliance.objects
        assert state.id == ""

    @pytest.mark.asyncio
    async def test_delete_absent_succeeds(self, client):
        handler = get_handler("bigip_ltm_node")
        state = ResourceState("bigip_ltm_node", id="/Common/gone", attributes={"name": "gone"})

        await handler.delete(client, state)

        assert state.id == ""

    @pytest.mark.asyncio
    async def test_exists(self, appliance, client):
        appliance.seed("ltm/node", {"name": "n1", "partition": "Common"})
        handler = get_handler("bigip_ltm_node")

        present = ResourceState("bigip_ltm_node", id="/Common/n1")
        absent = ResourceState("bigip_ltm_node", id="/Common/n2")

        assert await handler.exists(client, present) is True
        assert await handler.exists(client, absent) is False
        assert absent.id == ""

    @pytest.mark.asyncio
    async def test_import(self, appliance, client):
        appliance.seed("ltm/node", {"name": "n1", "partition": "Common", "address": "10.0.0.1"})
        handler = get_handler("bigip_ltm_node")

        state = await handler.import_state(client, "/Common/n1")

        assert state.id == "/Common/n1"
        assert state.attributes["address"] == "10.0.0.1"
        assert state.attributes["partition"] == "Common"

    @pytest.mark.asyncio
    async def test_import_missing(self, client):
        handler = get_handler("bigip_ltm_node")
        with pytest.raises(ResourceNotFound):
            await handler.import_state(client, "/Common/gone")


class TestEmptyIdentity:
    """A state without an identity is absent; nothing is sent to the collection."""

    @pytest.mark.asyncio
    async def test_exists(self, appliance, client):
        appliance.seed("ltm/node", {"name": "n1", "partition": "Common", "address": "10.0.0.1"})
        state = ResourceState("bigip_ltm_node", id="", attributes={"name": "n1"})

        assert await get_handler("bigip_ltm_node").exists(client, state) is False
        assert not state.present
        assert appliance.methods() == []

    @pytest.mark.asyncio
    async def test_read_clears_state(self, appliance, client):
        appliance.seed("ltm/node", {"name": "n1", "partition": "Common", "address": "10.0.0.1"})
        state = ResourceState("bigip_ltm_node", id="", attributes={"name": "n1"})

        await get_handler("bigip_ltm_node").read(client, state)

        assert state.id == ""
        assert state.attributes == {}
        assert appliance.methods() == []

    @pytest.mark.asyncio
    async def test_delete_is_noop(self, appliance, client):
        appliance.seed("ltm/node", {"name": "n1", "partition": "Common", "address": "10.0.0.1"})
        state = ResourceState("bigip_ltm_node", id="")

        await get_handler("bigip_ltm_node").delete(client, state)

        assert appliance.methods() == []
        assert "ltm/node/~Common~n1" in appliance.objects

    @pytest.mark.asyncio
    async def test_update_rejected(self, appliance, client):
        state = ResourceState("bigip_ltm_node", id="", attributes={"name": "n1", "address": "10.0.0.2"})

        with pytest.raises(ValueError, match="without an identity"):
            await get_handler("bigip_ltm_node").update(client, state)
        assert appliance.methods() == []

    @pytest.mark.asyncio
    async def test_import_empty(self, appliance, client):
        with pytest.raises(ResourceNotFound):
            await get_handler("bigip_ltm_pool").import_state(client, "")
        assert appliance.methods() == []


class TestTcpProfile:
    """Updates are full replacements."""

    @pytest.mark.asyncio
    async def test_update_restores_defaults(self, appliance, client):
        handler = get_handler("bigip_ltm_profile_tcp")
        state = _state(
            "bigip_ltm_profile_tcp",
            name="tcp-x", partition="Common", idle_timeout=100, close_wait_timeout=10,
        )
        await handler.create(client, state)
        assert state.attributes["close_wait_timeout"] == 10

        state.attributes = {"name": "tcp-x", "partition": "Common", "idle_timeout": 200}
        await handler.update(client, state)

        assert ("PUT", "/mgmt/tm/ltm/profile/tcp/~Common~tcp-x") in appliance.methods()
        assert state.attributes["idle_timeout"] == 200
        assert state.attributes["close_wait_timeout"] == 5
        assert state.attributes["keepalive_interval"] == 1800
        assert state.attributes["fast_open"] == "enabled"

    @pytest.mark.asyncio
    async def test_update_missing_object(self, client):
        from mcp_bigip.exceptions import NotFoundError

        handler = get_handler("bigip_ltm_profile_tcp")
        state = ResourceState(
            "bigip_ltm_profile_tcp", id="/Common/gone",
            attributes={"name": "gone", "partition": "Common"},
        )
        with pytest.raises(NotFoundError):
            await handler.update(client, state)


class TestPool:
    """Pools and the members sub-collection."""

    @pytest.mark.asyncio
    async def test_members_round_trip(self, appliance, client):
        handler = get_handler("bigip_ltm_pool")
        state = _state(
            "bigip_ltm_pool",
            name="web", partition="Common", allow_snat=True, monitor="/Common/http",
            members=[
                {"name": "n1:80", "partition": "Common"},
                {"name": "n2:80", "partition": "Common", "ratio": 2},
            ],
        )

        await handler.create(client, state)

        posted = _body(appliance.requests[0])
        assert posted["allowSnat"] == "yes"
        assert posted["allowNat"] == "no"
        assert len(posted["membersReference"]["items"]) == 2
        assert ("GET", "/mgmt/tm/ltm/pool/~Common~web/members") in appliance.methods()

        members = state.attributes["members"]
        assert sorted(m["name"] for m in members) == ["n1:80", "n2:80"]
        assert state.attributes["allow_snat"] is True

    @pytest.mark.asyncio
    async def test_monitor_whitespace_trimmed(self, appliance, client):
        appliance.seed("ltm/pool", {"name": "web", "partition": "Common", "monitor": "/Common/http "})
        state = await get_handler("bigip_ltm_pool").import_state(client, "/Common/web")
        assert state.attributes["monitor"] == "/Common/http"
        assert state.attributes["members"] == []


class TestMonitor:
    """Monitors are addressed by the kind of their parent."""

    SEND = "GET / HTTP/1.1\r\nHost: example.com\r\n\r\n"

    @pytest.mark.asyncio
    async def test_create_escapes_send_string(self, appliance, client):
        handler = get_handler("bigip_ltm_monitor")
        state = _state(
            "bigip_ltm_monitor",
            name="web-check", partition="Common", parent="/Common/http",
            send=self.SEND, receive="200 OK", interval=5, timeout=16,
            password="hunter2", username="probe",
        )

        await handler.create(client, state)

        post = appliance.requests[0]
        assert post.url.path == "/mgmt/tm/ltm/monitor/http"
        body = _body(post)
        assert "\\r\\n" in body["send"]
        assert "\r\n" not in body["send"]
        assert state.attributes["send"] == self.SEND

    @pytest.mark.asyncio
    async def test_password_kept_from_declaration(self, appliance, client):
        handler = get_handler("bigip_ltm_monitor")
        state = _state(
            "bigip_ltm_monitor",
            name="m", partition="Common", parent="/Common/https", password="hunter2",
        )
        await handler.create(client, state)

        appliance.get_object("ltm/monitor/https/~Common~m").pop("password")
        await handler.read(client, state)

        assert state.attributes["password"] == "hunter2"

    @pytest.mark.asyncio
    async def test_gateway_parent(self, appliance, client):
        handler = get_handler("bigip_ltm_monitor")
        state = _state("bigip_ltm_monitor", name="gw", partition="Common", parent="/Common/gateway_icmp")

        await handler.create(client, state)

        assert appliance.requests[0].url.path == "/mgmt/tm/ltm/monitor/gateway-icmp"
        assert state.id == "/Common/gw"

    @pytest.mark.asyncio
    async def test_import_scans_kinds(self, appliance, client):
        appliance.seed("ltm/monitor/tcp", {"name": "m", "partition": "Common", "defaultsFrom": "/Common/tcp"})

        state = await get_handler("bigip_ltm_monitor").import_state(client, "/Common/m")

        assert state.attributes["parent"] == "/Common/tcp"
        assert ("GET", "/mgmt/tm/ltm/monitor/http/~Common~m") in appliance.methods()

    @pytest.mark.asyncio
    async def test_import_with_kind(self, appliance, client):
        appliance.seed("ltm/monitor/tcp", {"name": "m", "partition": "Common", "defaultsFrom": "/Common/tcp"})

        state = await get_handler("bigip_ltm_monitor").import_state(client, "tcp:/Common/m")

        assert state.id == "/Common/m"
        assert appliance.methods() == [("GET", "/mgmt/tm/ltm/monitor/tcp/~Common~m")]

    @pytest.mark.asyncio
    async def test_delete_without_parent(self, appliance, client):
        key = appliance.seed("ltm/monitor/udp", {"name": "m", "partition": "Common", "defaultsFrom": "/Common/udp"})
        state = ResourceState("bigip_ltm_monitor", id="/Common/m")

        await get_handler("bigip_ltm_monitor").delete(client, state)

        assert key not in appliance.objects
        assert ("DELETE", "/mgmt/tm/ltm/monitor/udp/~Common~m") in appliance.methods()

    @pytest.mark.asyncio
    async def test_create_without_parent(self, client):
        handler = get_handler("bigip_ltm_monitor")
        with pytest.raises(ValueError):
            await handler.create(client, _state("bigip_ltm_monitor", name="m"))


class TestPolicy:
    """Policies are normalized on write and reassembled on read."""

    ATTRIBUTES = {
        "name": "p",
        "partition": "Common",
        "strategy": "/Common/first-match",
        "controls": ["forwarding"],
        "requires": ["http"],
        "rules": [
            {
                "name": "r1",
                "ordinal": 5,
                "conditions": [{"http_host": True, "host": True, "equals": True,
                                "values": ["a.example.com"], "request": True}],
                "actions": [{"name": "fwd", "forward": True, "pool": "/Common/web", "request": True}],
            },
            {
                "name": "r2",
                "ordinal": 9,
                "actions": [{"reset": True, "request": True}],
            },
        ],
    }

    @pytest.mark.asyncio
    async def test_create_normalizes_rules(self, appliance, client):
        handler = get_handler("bigip_ltm_policy")
        state = _state("bigip_ltm_policy", **self.ATTRIBUTES)

        await handler.create(client, state)

        rules = _body(appliance.requests[0])["rulesReference"]["items"]
        assert [r["ordinal"] for r in rules] == [0, 1]
        assert [r["name"] for r in rules] == ["r1", "r2"]
        assert rules[0]["actionsReference"]["items"][0]["name"] == "0"
        assert rules[0]["conditionsReference"]["items"][0]["name"] == "0"

    @pytest.mark.asyncio
    async def test_read_reassembles_rules(self, appliance, client):
        handler = get_handler("bigip_ltm_policy")
        state = _state("bigip_ltm_policy", **self.ATTRIBUTES)

        await handler.create(client, state)

        assert ("GET", "/mgmt/tm/ltm/policy/~Common~p/rules") in appliance.methods()
        assert ("GET", "/mgmt/tm/ltm/policy/~Common~p/rules/r1/actions") in appliance.methods()
        rules = state.attributes["rules"]
        assert [r["name"] for r in rules] == ["r1", "r2"]
        assert [r["ordinal"] for r in rules] == [0, 1]
        assert rules[0]["actions"][0]["forward"] is True
        assert rules[0]["actions"][0]["pool"] == "/Common/web"
        assert rules[0]["conditions"][0]["values"] == ["a.example.com"]
        assert rules[1]["conditions"] == []
        assert state.attributes["controls"] == ["forwarding"]


class TestVirtualServer:
    """Virtual servers: masks, SNAT and sub-collections."""

    @pytest.mark.asyncio
    async def test_create_and_read(self, appliance, client):
        handler = get_handler("bigip_ltm_virtual_server")
        state = _state(
            "bigip_ltm_virtual_server",
            name="vs", partition="Common",
            destination="/Common/10.0.0.10:443", mask="32", ip_protocol="tcp",
            pool="/Common/web",
            source_address_translation_type="automap",
            profiles=[{"name": "/Common/tcp", "context": "all"}],
            policies=["/Common/p"],
            rules=["/Common/redirect"],
        )

        await handler.create(client, state)

        posted = _body(appliance.requests[0])
        assert posted["mask"] == "255.255.255.255"
        assert posted["sourceAddressTranslation"] == {"type": "automap"}
        assert posted["translateAddress"] == "disabled"

        assert state.attributes["mask"] == "255.255.255.255"
        assert state.attributes["source_address_translation_type"] == "automap"
        assert state.attributes["policies"] == ["/Common/p"]
        assert state.attributes["profiles"][0]["full_path"] == "/Common/tcp"
        assert state.attributes["profiles"][0]["context"] == "all"
        assert state.attributes["rules"] == ["/Common/redirect"]

    @pytest.mark.asyncio
    async def test_bad_mask(self, client):
        handler = get_handler("bigip_ltm_virtual_server")
        with pytest.raises(ValueError):
            await handler.create(client, _state("bigip_ltm_virtual_server", name="vs", mask="40"))


class TestOtherTypes:
    """iRules, virtual addresses, data groups and cluster objects."""

    @pytest.mark.asyncio
    async def test_irule_body_trimmed(self, appliance, client):
        handler = get_handler("bigip_ltm_irule")
        state = _state(
            "bigip_ltm_irule", name="redirect", partition="Common",
            irule="\nwhen HTTP_REQUEST {\n  HTTP::redirect https://[HTTP::host]\n}\n\n",
        )

        await handler.create(client, state)

        assert _body(appliance.requests[0])["apiAnonymous"].startswith("when HTTP_REQUEST")
        assert state.attributes["irule"].endswith("}")

    @pytest.mark.asyncio
    async def test_virtual_address_tokens(self, appliance, client):
        handler = get_handler("bigip_ltm_virtual_address")
        state = _state(
            "bigip_ltm_virtual_address", name="10.0.0.10", partition="Common",
            address="10.0.0.10", arp=True, enabled=True, icmp_echo=False,
        )

        await handler.create(client, state)

        posted = _body(appliance.requests[0])
        assert posted["arp"] == "enabled"
        assert posted["enabled"] == "yes"
        assert posted["autoDelete"] == "false"
        assert "icmpEcho" not in posted
        assert state.attributes["arp"] is True
        assert state.attributes["icmp_echo"] is False
        assert state.id == "/Common/10.0.0.10"

    @pytest.mark.asyncio
    async def test_datagroup_records(self, appliance, client):
        handler = get_handler("bigip_ltm_datagroup")
        state = _state(
            "bigip_ltm_datagroup", name="hosts", partition="Common", type="string",
            records=[{"name": "a.example.com", "data": "pool_a"}, {"name": "b.example.com"}],
        )

        await handler.create(client, state)

        assert appliance.requests[0].url.path == "/mgmt/tm/ltm/data-group/internal"
        assert _body(appliance.requests[0])["records"][1] == {"name": "b.example.com"}
        assert state.attributes["records"][0] == {"name": "a.example.com", "data": "pool_a"}

    @pytest.mark.asyncio
    async def test_device_group_members(self, appliance, client):
        handler = get_handler("bigip_cm_devicegroup")
        state = _state(
            "bigip_cm_devicegroup", name="dg", partition="Common", type="sync-failover",
            auto_sync="enabled",
            devices=[{"name": "bigip1.test", "set_sync_leader": True}, {"name": "bigip2.test"}],
        )

        await handler.create(client, state)

        posted = _body(appliance.requests[0])
        assert posted["deviceReference"]["items"] == [
            {"name": "bigip1.test", "setSyncLeader": True},
            {"name": "bigip2.test", "setSyncLeader": False},
        ]
        assert ("GET", "/mgmt/tm/cm/device-group/~Common~dg/devices") in appliance.methods()
        devices = sorted(state.attributes["devices"], key=lambda d: d["name"])
        assert devices == [
            {"name": "bigip1.test", "set_sync_leader": True},
            {"name": "bigip2.test", "set_sync_leader": False},
        ]

    @pytest.mark.asyncio
    async def test_device_unpartitioned(self, appliance, client):
        handler = get_handler("bigip_cm_device")
        state = _state("bigip_cm_device", name="bigip1.test", configsync_ip="10.1.1.1")

        await handler.create(client, state)

        assert state.id == "bigip1.test"
        assert state.attributes["configsync_ip"] == "10.1.1.1"
        assert appliance.requests[1].url.path == "/mgmt/tm/cm/device/bigip1.test"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("type_name,path", [
        ("bigip_ltm_profile_fasthttp", "/mgmt/tm/ltm/profile/fasthttp"),
        ("bigip_ltm_profile_fastl4", "/mgmt/tm/ltm/profile/fastl4"),
        ("bigip_ltm_profile_httpcompress", "/mgmt/tm/ltm/profile/http-compression"),
        ("bigip_ltm_profile_oneconnect", "/mgmt/tm/ltm/profile/one-connect"),
    ])
    async def test_profile_collections(self, appliance, client, type_name, path):
        handler = get_handler(type_name)
        state = _state(type_name, name="custom", partition="Common")

        await handler.create(client, state)
        assert appliance.requests[0].url.path == path

        await handler.delete(client, state)
        assert ("DELETE", f"{path}/~Common~custom") in appliance.methods()
        assert state.id == ""
