"""MCP Server for BIG-IP LTM configuration.

Drives the lifecycle of LTM and cluster objects on F5 BIG-IP appliances over
iControl REST. Each tool call names an appliance from the inventory, a
resource type and the attributes or identity to work on.

Tools exposed:
- list_appliances: List configured appliances
- list_resource_types: List supported resource types
- resource_create: Create an object and read it back
- resource_read: Refresh an object's observed attributes
- resource_update: Replace an object with the declared attributes
- resource_delete: Delete an object (absent objects are fine)
- resource_exists: Check whether an object exists
- resource_import: Adopt an existing object by identity
- resource_drift: Compare declared attributes against the appliance
- get_audit_log: Show recent changes made through this server
"""
import asyncio
import json
import logging
from typing import Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    TextContent,
    Tool,
    Resource,
)
from pydantic import AnyUrl

from .config.inventory import ApplianceInventory
from .exceptions import BigIPError
from .resources import RESOURCE_TYPES, ResourceState, diff_attributes, get_handler
from .utils.logging_config import setup_logging, timed_section
from .utils.audit_log import ChangeTracker, setup_audit_logging, get_recent_changes

logger = logging.getLogger(__name__)

# Global inventory (initialized on first tool call)
inventory: Optional[ApplianceInventory] = None


def get_inventory() -> ApplianceInventory:
    """Get or create the appliance inventory."""
    global inventory
    if inventory is None:
        inventory = ApplianceInventory()
    return inventory


# Create MCP server
server = Server("ltmcraft")


_APPLIANCE = {
    "type": "string",
    "description": "Appliance ID from the inventory (e.g., 'bigip-a')",
}
_TYPE = {
    "type": "string",
    "description": "Resource type (e.g., 'bigip_ltm_pool')",
    "enum": sorted(RESOURCE_TYPES),
}
_ID = {
    "type": "string",
    "description": "Object identity, e.g. '/Common/web-pool'",
}
_ATTRIBUTES = {
    "type": "object",
    "description": "Resource attributes; see bigip://types/<type> for the fields",
}


# === TOOLS ===

@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return [
        Tool(
            name="list_appliances",
            description="List all configured BIG-IP appliances",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="list_resource_types",
            description="List supported resource types with their REST collections",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="resource_create",
            description="Create an object on the appliance, then read it back",
            inputSchema={
                "type": "object",
                "properties": {
                    "appliance_id": _APPLIANCE,
                    "type": _TYPE,
                    "attributes": _ATTRIBUTES,
                },
                "required": ["appliance_id", "type", "attributes"]
            }
        ),
        Tool(
            name="resource_read",
            description="Read an object's current attributes. A missing object is reported as absent, not as an error",
            inputSchema={
                "type": "object",
                "properties": {
                    "appliance_id": _APPLIANCE,
                    "type": _TYPE,
                    "id": _ID,
                    "attributes": {
                        **_ATTRIBUTES,
                        "description": "Known attributes (monitors need 'parent')",
                    },
                },
                "required": ["appliance_id", "type", "id"]
            }
        ),
        Tool(
            name="resource_update",
            description="Replace an object with the given attributes (unset fields revert to defaults)",
            inputSchema={
                "type": "object",
                "properties": {
                    "appliance_id": _APPLIANCE,
                    "type": _TYPE,
                    "id": _ID,
                    "attributes": _ATTRIBUTES,
                },
                "required": ["appliance_id", "type", "id", "attributes"]
            }
        ),
        Tool(
            name="resource_delete",
            description="Delete an object. Deleting an absent object succeeds",
            inputSchema={
                "type": "object",
                "properties": {
                    "appliance_id": _APPLIANCE,
                    "type": _TYPE,
                    "id": _ID,
                    "attributes": _ATTRIBUTES,
                },
                "required": ["appliance_id", "type", "id"]
            }
        ),
        Tool(
            name="resource_exists",
            description="Check whether an object exists",
            inputSchema={
                "type": "object",
                "properties": {
                    "appliance_id": _APPLIANCE,
                    "type": _TYPE,
                    "id": _ID,
                    "attributes": _ATTRIBUTES,
                },
                "required": ["appliance_id", "type", "id"]
            }
        ),
        Tool(
            name="resource_import",
            description="Adopt an existing object by identity and return its attributes",
            inputSchema={
                "type": "object",
                "properties": {
                    "appliance_id": _APPLIANCE,
                    "type": _TYPE,
                    "import_id": {
                        "type": "string",
                        "description": "Identity to import; monitors accept '<kind>:<identity>'",
                    },
                },
                "required": ["appliance_id", "type", "import_id"]
            }
        ),
        Tool(
            name="resource_drift",
            description="Compare declared attributes against the object on the appliance",
            inputSchema={
                "type": "object",
                "properties": {
                    "appliance_id": _APPLIANCE,
                    "type": _TYPE,
                    "id": _ID,
                    "attributes": _ATTRIBUTES,
                },
                "required": ["appliance_id", "type", "id", "attributes"]
            }
        ),
        Tool(
            name="get_audit_log",
            description="Show recent create/update/delete operations from the audit log",
            inputSchema={
                "type": "object",
                "properties": {
                    "appliance_id": {
                        "type": "string",
                        "description": "Filter by appliance ID"
                    },
                    "type": {
                        "type": "string",
                        "description": "Filter by resource type"
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Maximum records to return",
                        "default": 20
                    }
                },
                "required": []
            }
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    appliance_id = arguments.get("appliance_id", "N/A")

    async with timed_section(f"tool:{name}", target=appliance_id, type=arguments.get("type")):
        try:
            inv = get_inventory()

            if name == "list_appliances":
                return await handle_list_appliances(inv)

            elif name == "list_resource_types":
                return await handle_list_resource_types()

            elif name == "resource_create":
                return await handle_resource_create(inv, arguments)

            elif name == "resource_read":
                return await handle_resource_read(inv, arguments)

            elif name == "resource_update":
                return await handle_resource_update(inv, arguments)

            elif name == "resource_delete":
                return await handle_resource_delete(inv, arguments)

            elif name == "resource_exists":
                return await handle_resource_exists(inv, arguments)

            elif name == "resource_import":
                return await handle_resource_import(inv, arguments)

            elif name == "resource_drift":
                return await handle_resource_drift(inv, arguments)

            elif name == "get_audit_log":
                return await handle_get_audit_log(
                    arguments.get("appliance_id"),
                    arguments.get("type"),
                    arguments.get("limit", 20)
                )

            else:
                return [TextContent(type="text", text=f"Unknown tool: {name}")]

        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return [TextContent(type="text", text=f"Error: {str(e)}")]


def _result(payload: dict) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2, default=str))]


def _state_from(args: dict) -> ResourceState:
    return ResourceState(
        args["type"],
        id=args.get("id", ""),
        attributes=dict(args.get("attributes") or {}),
    )


# === TOOL HANDLERS ===

async def handle_list_appliances(inv: ApplianceInventory) -> list[TextContent]:
    """List all configured appliances."""
    appliances = []
    for appliance_id in inv.get_appliance_ids():
        config = inv.get_appliance_config(appliance_id)
        appliances.append({
            "id": appliance_id,
            "host": config.host,
            "port": config.port,
            "auth_mode": config.auth_mode,
            "verify_ssl": config.verify_ssl,
        })

    return _result({"appliances": appliances})


async def handle_list_resource_types() -> list[TextContent]:
    types = [
        {
            "type": type_name,
            "description": handler.description,
            "path": "/".join(handler.path),
        }
        for type_name, handler in sorted(RESOURCE_TYPES.items())
    ]
    return _result({"resource_types": types})


async def handle_resource_create(inv: ApplianceInventory, args: dict) -> list[TextContent]:
    """Create an object with audit logging."""
    appliance_id = args["appliance_id"]
    handler = get_handler(args["type"])
    client = inv.get_client(appliance_id)
    tracker = ChangeTracker(appliance_id)
    state = _state_from(args)

    try:
        await handler.create(client, state)
    except BigIPError as e:
        tracker.log_change(
            operation="create",
            resource_type=handler.type_name,
            resource_id=state.attributes.get("name", ""),
            success=False,
            after_state=state.attributes,
            error=str(e),
        )
        raise

    tracker.log_change(
        operation="create",
        resource_type=handler.type_name,
        resource_id=state.id,
        success=True,
        after_state=state.attributes,
    )
    return _result({"appliance_id": appliance_id, "action": "create", **state.to_dict()})


async def handle_resource_read(inv: ApplianceInventory, args: dict) -> list[TextContent]:
    handler = get_handler(args["type"])
    client = inv.get_client(args["appliance_id"])
    state = _state_from(args)

    await handler.read(client, state)
    return _result({"appliance_id": args["appliance_id"], **state.to_dict()})


async def handle_resource_update(inv: ApplianceInventory, args: dict) -> list[TextContent]:
    """Replace an object, recording its state before and after."""
    appliance_id = args["appliance_id"]
    handler = get_handler(args["type"])
    client = inv.get_client(appliance_id)
    tracker = ChangeTracker(appliance_id)
    state = _state_from(args)

    # Capture before state for audit
    before = _state_from(args)
    await handler.read(client, before)

    try:
        await handler.update(client, state)
    except BigIPError as e:
        tracker.log_change(
            operation="update",
            resource_type=handler.type_name,
            resource_id=args["id"],
            success=False,
            before_state=before.attributes,
            error=str(e),
        )
        raise

    tracker.log_change(
        operation="update",
        resource_type=handler.type_name,
        resource_id=args["id"],
        success=True,
        before_state=before.attributes,
        after_state=state.attributes,
    )
    return _result({"appliance_id": appliance_id, "action": "update", **state.to_dict()})


async def handle_resource_delete(inv: ApplianceInventory, args: dict) -> list[TextContent]:
    appliance_id = args["appliance_id"]
    handler = get_handler(args["type"])
    client = inv.get_client(appliance_id)
    tracker = ChangeTracker(appliance_id)
    state = _state_from(args)

    before = _state_from(args)
    await handler.read(client, before)

    try:
        await handler.delete(client, state)
    except BigIPError as e:
        tracker.log_change(
            operation="delete",
            resource_type=handler.type_name,
            resource_id=args["id"],
            success=False,
            before_state=before.attributes,
            error=str(e),
        )
        raise

    tracker.log_change(
        operation="delete",
        resource_type=handler.type_name,
        resource_id=args["id"],
        success=True,
        before_state=before.attributes,
    )
    return _result({
        "appliance_id": appliance_id,
        "action": "delete",
        "id": args["id"],
        "was_present": before.present,
    })


async def handle_resource_exists(inv: ApplianceInventory, args: dict) -> list[TextContent]:
    handler = get_handler(args["type"])
    client = inv.get_client(args["appliance_id"])
    state = _state_from(args)

    exists = await handler.exists(client, state)
    return _result({
        "appliance_id": args["appliance_id"],
        "type": handler.type_name,
        "id": args["id"],
        "exists": exists,
    })


async def handle_resource_import(inv: ApplianceInventory, args: dict) -> list[TextContent]:
    handler = get_handler(args["type"])
    client = inv.get_client(args["appliance_id"])

    state = await handler.import_state(client, args["import_id"])
    return _result({"appliance_id": args["appliance_id"], "action": "import", **state.to_dict()})


async def handle_resource_drift(inv: ApplianceInventory, args: dict) -> list[TextContent]:
    """Compare declared attributes with the observed object."""
    handler = get_handler(args["type"])
    client = inv.get_client(args["appliance_id"])
    declared = dict(args.get("attributes") or {})
    observed = _state_from(args)

    await handler.read(client, observed)
    diff = diff_attributes(declared, observed.attributes, resource_id=args["id"])

    return _result({
        "appliance_id": args["appliance_id"],
        "type": handler.type_name,
        "id": args["id"],
        "in_sync": not diff.has_changes(),
        "changes": diff.changes,
        "summary": diff.to_text(),
    })


async def handle_get_audit_log(
    appliance_id: Optional[str] = None,
    resource_type: Optional[str] = None,
    limit: int = 20
) -> list[TextContent]:
    """Get recent changes from the audit log."""
    records = get_recent_changes(
        appliance=appliance_id,
        resource_type=resource_type,
        limit=limit
    )

    formatted_records = []
    for r in records:
        formatted_records.append({
            "timestamp": r.timestamp,
            "appliance": r.appliance,
            "operation": r.operation,
            "resource_type": r.resource_type,
            "resource_id": r.resource_id,
            "success": r.success,
            "error": r.error,
        })

    return _result({
        "total_records": len(formatted_records),
        "filters": {
            "appliance_id": appliance_id,
            "type": resource_type,
            "limit": limit,
        },
        "records": formatted_records,
    })


# === RESOURCES ===

@server.list_resources()
async def list_resources() -> list[Resource]:
    """List the field table of every resource type."""
    return [
        Resource(
            uri=AnyUrl(f"bigip://types/{type_name}"),
            name=f"{type_name} fields",
            description=handler.description,
            mimeType="application/json",
        )
        for type_name, handler in sorted(RESOURCE_TYPES.items())
    ]


@server.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource."""
    # Parse URI: bigip://types/<type>
    uri_str = str(uri)
    prefix = "bigip://types/"
    if uri_str.startswith(prefix):
        type_name = uri_str[len(prefix):]
        if type_name in RESOURCE_TYPES:
            return json.dumps(get_handler(type_name).describe(), indent=2)

    return json.dumps({"error": f"Unknown resource: {uri}"})


def main():
    """Run the MCP server."""
    setup_audit_logging()
    setup_logging()

    async def run():
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass
    finally:
        if inventory:
            asyncio.run(inventory.close_all())


if __name__ == "__main__":
    main()
