"""Generic lifecycle for iControl REST objects.

A handler is stateless: it owns a field table and a collection path, and every
operation receives the ``BigIPClient`` and the ``ResourceState`` to work on.
Type-specific behaviour lives in a few hooks:

- ``prepare``   adjust a record before it is written (defaults, normalization)
- ``observe``   adjust a record after it is read (whitespace, escaping)
- ``expand``    pull sub-collections into the payload before decode
- ``collection``  choose the collection path for a record
"""
import logging
from abc import ABC
from typing import Any, Optional

from ..adapter import (
    WireSchema,
    decode,
    encode,
    record_from_attributes,
    record_to_attributes,
)
from ..client import BigIPClient
from ..exceptions import BigIPError, NotFoundError, ResourceNotFound
from ..utils.logging_config import timed
from ..validators import full_path, validate_f5_name
from .state import ResourceState

logger = logging.getLogger(__name__)


class ResourceHandler(ABC):
    """Base class for resource type handlers."""

    type_name: str = ""
    description: str = ""
    schema: WireSchema
    path: tuple[str, ...] = ()

    # Declared values that win over what the appliance reports back
    sticky_attributes: tuple[str, ...] = ("name", "partition")

    # Hooks

    def build(self, attributes: dict) -> Any:
        """Turn declared attributes into a record ready to send."""
        return self.prepare(record_from_attributes(self.schema, attributes))

    def prepare(self, record: Any) -> Any:
        return record

    def observe(self, record: Any) -> Any:
        return record

    def identity(self, record: Any) -> str:
        return full_path(getattr(record, "partition", ""), record.name)

    def collection(self, attributes: dict) -> tuple[str, ...]:
        return self.path

    async def expand(self, client: BigIPClient, identity: str, dto: dict) -> dict:
        return dto

    def merge(self, declared: dict, observed: dict) -> dict:
        merged = dict(observed)
        for key in self.sticky_attributes:
            if declared.get(key):
                merged[key] = declared[key]
        return merged

    def import_attributes(self, import_id: str) -> dict:
        return {"name": import_id}

    # Wire operations

    async def fetch(self, client: BigIPClient, identity: str, attributes: dict) -> Optional[Any]:
        """GET one object and decode it; None when it does not exist."""
        dto = await client.get(*self.collection(attributes), identity)
        if dto is None:
            return None
        dto = await self.expand(client, identity, dto)
        return self.observe(decode(self.schema, dto))

    async def remove(self, client: BigIPClient, identity: str, attributes: dict) -> None:
        await client.delete(*self.collection(attributes), identity)

    # Lifecycle

    @timed("create")
    async def create(self, client: BigIPClient, state: ResourceState) -> None:
        """POST the declared object, bind its identity and read it back."""
        record = self.build(state.attributes)
        validate_f5_name(record.name)
        identity = self.identity(record)

        logger.info(f"Creating {self.type_name} {identity} on {client.name}")
        try:
            await client.post(*self.collection(state.attributes), body=encode(record))
        except BigIPError as e:
            logger.error(f"Error creating {self.type_name} {identity}: {e}")
            raise

        state.id = identity
        await self.read(client, state)

    @timed("read")
    async def read(self, client: BigIPClient, state: ResourceState) -> None:
        """Refresh attributes from the appliance, clearing state when it is gone."""
        if not state.id:
            state.clear()
            return

        logger.debug(f"Reading {self.type_name} {state.id}")
        observed = await self.fetch(client, state.id, state.attributes)
        if observed is None:
            logger.warning(f"{self.type_name} ({state.id}) not found, removing from state")
            state.clear()
            return

        state.attributes = self.merge(state.attributes, record_to_attributes(observed))

    @timed("update")
    async def update(self, client: BigIPClient, state: ResourceState) -> None:
        """Replace the object with the declared attributes (full PUT)."""
        if not state.id:
            raise ValueError(f"Cannot update {self.type_name} without an identity")
        record = self.build(state.attributes)

        logger.info(f"Updating {self.type_name} {state.id} on {client.name}")
        try:
            await client.put(*self.collection(state.attributes), state.id, body=encode(record))
        except BigIPError as e:
            logger.error(f"Error modifying {self.type_name} {state.id}: {e}")
            raise

        await self.read(client, state)

    @timed("delete")
    async def delete(self, client: BigIPClient, state: ResourceState) -> None:
        if not state.id:
            state.clear()
            return

        logger.info(f"Deleting {self.type_name} {state.id} on {client.name}")
        try:
            await self.remove(client, state.id, state.attributes)
        except NotFoundError:
            logger.info(f"{self.type_name} {state.id} already absent")
        state.clear()

    @timed("exists")
    async def exists(self, client: BigIPClient, state: ResourceState) -> bool:
        if not state.id:
            state.clear()
            return False

        observed = await self.fetch(client, state.id, state.attributes)
        if observed is None:
            logger.warning(f"{self.type_name} ({state.id}) not found, removing from state")
            state.clear()
            return False
        return True

    @timed("import")
    async def import_state(self, client: BigIPClient, import_id: str) -> ResourceState:
        """Adopt an existing object by identity.

        Raises:
            ResourceNotFound: when nothing exists under ``import_id``
        """
        attributes = self.import_attributes(import_id)
        state = ResourceState(self.type_name, id=attributes["name"], attributes=attributes)
        await self.read(client, state)
        if not state.present:
            raise ResourceNotFound(f"{self.type_name} {import_id} does not exist on {client.name}")
        return state

    def describe(self) -> dict:
        return {
            "type": self.type_name,
            "description": self.description,
            "path": "/".join(self.path),
            "fields": self.schema.describe(),
        }
