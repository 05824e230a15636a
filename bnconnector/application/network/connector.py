"""
Business network connector.

Translates the ORM host's CRUD and discovery verbs into business network
registry operations and owns the connection lifecycle:

    DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED

Any connect or disconnect failure returns the connector to DISCONNECTED.
Concurrent callers that need a connection share the single in-flight
connection task.

Every public operation accepts an optional trailing ``callback(error,
result)``. Without one the coroutine raises on failure.
"""

import asyncio
import logging
from typing import Any, Optional

from bnconnector.application.network.callbacks import Callback, complete, maybe_await
from bnconnector.domain.network.entities import (
    CLASS_KEY,
    ConnectionState,
    ModelDefinition,
    NetworkSettings,
    RecordFilter,
    ResourceCategory,
)
from bnconnector.domain.network.errors import NetworkConnectorError, UnsupportedTypeError
from bnconnector.domain.network.filters import apply_filter, parse_filter
from bnconnector.domain.network.ports import (
    BusinessNetworkConnection,
    BusinessNetworkDefinition,
    Registry,
    Serializer,
)
from bnconnector.domain.network.resolution import has_identity, resolve_category
from bnconnector.domain.network.schema import build_model_schema

logger = logging.getLogger(__name__)

# Submitted transactions are immutable.
_MUTABLE_CATEGORIES = frozenset({ResourceCategory.ASSET, ResourceCategory.PARTICIPANT})


class BusinessNetworkConnector:
    """Connector between an ORM data-access layer and a business network.

    Attributes:
        settings: Immutable connection settings.
        business_network_connection: The ledger client port.
        business_network_definition: Definition returned by the last
            successful connect, or None.
        connected: True once a connect has succeeded.
        connecting: True while a connect is in flight.
        connection_task: The in-flight connection task, if any.
    """

    def __init__(
        self,
        settings: NetworkSettings,
        business_network_connection: BusinessNetworkConnection,
    ) -> None:
        self.settings = settings
        self.business_network_connection = business_network_connection
        self.business_network_definition: Optional[BusinessNetworkDefinition] = None
        self.connected = False
        self.connecting = False
        self.connection_task: Optional[asyncio.Future] = None

    @property
    def state(self) -> ConnectionState:
        if self.connected:
            return ConnectionState.CONNECTED
        if self.connecting:
            return ConnectionState.CONNECTING
        return ConnectionState.DISCONNECTED

    # ── Connection lifecycle ─────────────────────────────────────────

    async def connect(self, callback: Optional[Callback] = None) -> Optional[BusinessNetworkDefinition]:
        """Connect to the business network.

        Returns:
            The business network definition.
        """
        return await complete(self._connect(), callback)

    async def _connect(self) -> BusinessNetworkDefinition:
        if self.connected and self.business_network_definition is not None:
            return self.business_network_definition
        return await asyncio.shield(self.start_connecting())

    def start_connecting(self) -> asyncio.Future:
        """Begin connecting without waiting for the outcome.

        Returns the shared connection task (an already-resolved future when
        connected). Its failure is logged even if nobody awaits it.
        Must be called from a running event loop.
        """
        if self.connected:
            future = asyncio.get_running_loop().create_future()
            future.set_result(self.business_network_definition)
            return future
        if not (self.connecting and self.connection_task is not None):
            self.connecting = True
            self.connection_task = asyncio.ensure_future(self._open_connection())
            self.connection_task.add_done_callback(_consume_outcome)
        return self.connection_task

    async def _open_connection(self) -> BusinessNetworkDefinition:
        logger.info(
            "Connecting to business network %s (profile=%s, participant=%s)",
            self.settings.business_network_identifier,
            self.settings.connection_profile_name,
            self.settings.participant_id,
        )
        try:
            definition = await maybe_await(
                self.business_network_connection.connect(*self.settings.connect_args())
            )
        except Exception as exc:
            self.connected = False
            self.connecting = False
            self.connection_task = None
            logger.error(
                "Connection to business network %s failed: %s",
                self.settings.business_network_identifier,
                exc,
            )
            raise

        self.business_network_definition = definition
        self.connected = True
        self.connecting = False
        self.connection_task = None
        logger.info("Connected to business network %s", self.settings.business_network_identifier)
        return definition

    async def ensure_connected(self) -> None:
        """Make sure a connection exists, without ever opening two at once."""
        if self.connected:
            return
        if self.connecting and self.connection_task is not None:
            await asyncio.shield(self.connection_task)
            return
        await self.connect()

    async def disconnect(self, callback: Optional[Callback] = None) -> None:
        """Disconnect from the business network.

        Connection flags are cleared whether or not the client's
        disconnect succeeds.
        """
        return await complete(self._disconnect(), callback)

    async def _disconnect(self) -> None:
        pending = self.connection_task
        if pending is not None and not pending.done():
            # Let the in-flight connect settle so it cannot flip the flags back.
            await asyncio.wait([pending])
        logger.info("Disconnecting from business network %s", self.settings.business_network_identifier)
        try:
            await maybe_await(self.business_network_connection.disconnect())
        finally:
            self.connected = False
            self.connecting = False
            self.connection_task = None
            self.business_network_definition = None

    async def ping(self, callback: Optional[Callback] = None) -> Any:
        """Ping the business network. The client's result is returned as-is."""
        return await complete(self._ping(), callback)

    async def _ping(self) -> Any:
        return await maybe_await(self.business_network_connection.ping())

    # ── Discovery ────────────────────────────────────────────────────

    async def discover_model_definitions(
        self, options: Optional[dict] = None, callback: Optional[Callback] = None
    ) -> Optional[list[dict[str, str]]]:
        """List the declared types as ORM model definitions.

        Declarations without an identifying field are left out.
        """
        return await complete(self._discover_model_definitions(), callback)

    async def _discover_model_definitions(self) -> list[dict[str, str]]:
        await self.ensure_connected()
        declarations = self._definition().get_introspector().get_class_declarations()
        definitions = [
            ModelDefinition(name=declaration.get_fully_qualified_name()).to_dict()
            for declaration in declarations
            if has_identity(declaration)
        ]
        logger.debug("Discovered %d model definitions", len(definitions))
        return definitions

    async def discover_schemas(
        self,
        model_name: str,
        options: Optional[dict] = None,
        callback: Optional[Callback] = None,
    ) -> Optional[dict[str, Any]]:
        """Describe one declared type as an ORM model schema."""
        return await complete(self._discover_schemas(model_name), callback)

    async def _discover_schemas(self, model_name: str) -> dict[str, Any]:
        await self.ensure_connected()
        declaration = self._definition().get_introspector().get_class_declaration(model_name)
        return build_model_schema(declaration, model_name)

    # ── CRUD ─────────────────────────────────────────────────────────

    async def create(
        self,
        model_name: str,
        data: dict[str, Any],
        options: Optional[dict] = None,
        callback: Optional[Callback] = None,
    ) -> Optional[str]:
        """Add an asset or participant, or submit a transaction.

        ``data`` defaults its ``$class`` to ``model_name``.

        Returns:
            The identifier of the new resource.
        """
        return await complete(self._create(model_name, data), callback)

    async def _create(self, model_name: str, data: dict[str, Any]) -> str:
        await self.ensure_connected()
        payload = dict(data)
        if not payload.get(CLASS_KEY):
            payload[CLASS_KEY] = model_name

        resource = self._serializer().from_json(payload)
        declaration = resource.get_class_declaration()
        category = resolve_category(declaration, payload[CLASS_KEY])

        if category is ResourceCategory.TRANSACTION:
            await maybe_await(self.business_network_connection.submit_transaction(resource))
        else:
            registry = await self._registry(category, declaration.get_fully_qualified_name())
            await maybe_await(registry.add(resource))

        logger.debug("Created %s resource of type %s", category.value, payload[CLASS_KEY])
        return resource.get_identifier()

    async def retrieve(
        self,
        model_name: str,
        resource_id: str,
        options: Optional[dict] = None,
        callback: Optional[Callback] = None,
    ) -> Optional[dict[str, Any]]:
        """Return one record, serialized to plain JSON."""
        return await complete(self._retrieve(model_name, resource_id), callback)

    async def _retrieve(self, model_name: str, resource_id: str) -> dict[str, Any]:
        await self.ensure_connected()
        category = self._declared_category(model_name)
        registry = await self._registry(category, model_name)
        resource = await maybe_await(registry.get(resource_id))
        return self._serializer().to_json(resource)

    async def all(
        self,
        model_name: str,
        query_filter: Optional[dict[str, Any]] = None,
        callback: Optional[Callback] = None,
    ) -> Optional[list[dict[str, Any]]]:
        """Return every record of a type, in registry order.

        ``query_filter`` is a LoopBack filter; ``where`` equality and
        ``skip``/``offset``/``limit`` are honoured.
        """
        return await complete(self._all(model_name, query_filter), callback)

    async def _all(self, model_name: str, query_filter: Optional[dict[str, Any]]) -> list[dict[str, Any]]:
        record_filter = parse_filter(query_filter)
        return await self._select(model_name, record_filter)

    async def _select(self, model_name: str, record_filter: RecordFilter) -> list[dict[str, Any]]:
        await self.ensure_connected()
        category = self._declared_category(model_name)
        registry = await self._registry(category, model_name)
        resources = await maybe_await(registry.get_all())
        serializer = self._serializer()
        records = [serializer.to_json(resource) for resource in resources]
        return apply_filter(records, record_filter)

    async def count(
        self,
        model_name: str,
        where: Optional[dict[str, Any]] = None,
        options: Optional[dict] = None,
        callback: Optional[Callback] = None,
    ) -> Optional[int]:
        """Return how many records of a type match ``where``."""
        return await complete(self._count(model_name, where), callback)

    async def _count(self, model_name: str, where: Optional[dict[str, Any]]) -> int:
        records = await self._select(model_name, parse_filter({"where": where}))
        return len(records)

    async def exists(
        self,
        model_name: str,
        resource_id: str,
        options: Optional[dict] = None,
        callback: Optional[Callback] = None,
    ) -> Optional[bool]:
        return await complete(self._exists(model_name, resource_id), callback)

    async def _exists(self, model_name: str, resource_id: str) -> bool:
        await self.ensure_connected()
        category = self._declared_category(model_name)
        registry = await self._registry(category, model_name)
        return bool(await maybe_await(registry.exists(resource_id)))

    async def update(
        self,
        model_name: str,
        data: dict[str, Any],
        options: Optional[dict] = None,
        callback: Optional[Callback] = None,
    ) -> None:
        """Replace an existing asset or participant."""
        return await complete(self._update(model_name, data), callback)

    async def _update(self, model_name: str, data: dict[str, Any]) -> None:
        await self.ensure_connected()
        payload = dict(data)
        if not payload.get(CLASS_KEY):
            payload[CLASS_KEY] = model_name

        resource = self._serializer().from_json(payload)
        declaration = resource.get_class_declaration()
        category = resolve_category(declaration, payload[CLASS_KEY])
        self._require_mutable(category, payload[CLASS_KEY], "update")

        registry = await self._registry(category, declaration.get_fully_qualified_name())
        await maybe_await(registry.update(resource))
        logger.debug("Updated %s resource of type %s", category.value, payload[CLASS_KEY])

    async def delete(
        self,
        model_name: str,
        resource_id: str,
        options: Optional[dict] = None,
        callback: Optional[Callback] = None,
    ) -> None:
        """Remove an asset or participant by id."""
        return await complete(self._delete(model_name, resource_id), callback)

    async def _delete(self, model_name: str, resource_id: str) -> None:
        await self.ensure_connected()
        category = self._declared_category(model_name)
        self._require_mutable(category, model_name, "delete")
        registry = await self._registry(category, model_name)
        await maybe_await(registry.remove(resource_id))
        logger.debug("Deleted %s resource of type %s", category.value, model_name)

    # ── Helpers ──────────────────────────────────────────────────────

    def _definition(self) -> BusinessNetworkDefinition:
        if self.business_network_definition is None:
            raise NetworkConnectorError("Not connected to a business network")
        return self.business_network_definition

    def _serializer(self) -> Serializer:
        return self._definition().get_serializer()

    def _declared_category(self, model_name: str) -> ResourceCategory:
        declaration = self._definition().get_model_manager().get_type(model_name)
        return resolve_category(declaration, model_name)

    @staticmethod
    def _require_mutable(category: ResourceCategory, type_name: str, operation: str) -> None:
        if category not in _MUTABLE_CATEGORIES:
            raise UnsupportedTypeError(type_name, operation)

    async def _registry(self, category: ResourceCategory, type_name: str) -> Registry:
        client = self.business_network_connection
        if category is ResourceCategory.ASSET:
            registry = client.get_asset_registry(type_name)
        elif category is ResourceCategory.PARTICIPANT:
            registry = client.get_participant_registry(type_name)
        else:
            registry = client.get_transaction_registry(type_name)
        return await maybe_await(registry)


def _consume_outcome(task: asyncio.Future) -> None:
    """Retrieve a finished connection task's error.

    A connect that nobody awaits must not leave an unretrieved exception
    behind; the failure has already been logged.
    """
    if not task.cancelled():
        task.exception()
