"""
Adapter: Local business network connection.

Implements the BusinessNetworkConnection and BusinessNetworkDefinition
ports for networks deployed as ``<model_dir>/<network id>.yaml`` model
files, with registries stored through SQLAlchemy.

Submitted transactions are recorded in their transaction registry and
are not executed. Connection profiles and participant secrets are
accepted but not verified.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from sqlalchemy.engine import Engine

from bnconnector.domain.network.errors import ResourceNotFoundError, ResourceValidationError
from bnconnector.domain.network.ports import (
    AssetDeclaration,
    BusinessNetworkConnection,
    BusinessNetworkDefinition,
    ParticipantDeclaration,
    TransactionDeclaration,
)
from bnconnector.infrastructure.network.model import (
    LocalIntrospector,
    LocalModelManager,
    load_model_file,
)
from bnconnector.infrastructure.network.registry_repository import (
    LocalRegistry,
    LocalTransactionRegistry,
    RegistryStore,
)
from bnconnector.infrastructure.network.serializer import LocalResource, LocalSerializer

logger = logging.getLogger(__name__)

SYSTEM_REGISTRIES = "$sysregistries"


class LocalBusinessNetworkDefinition(BusinessNetworkDefinition):
    """Definition of a business network loaded from a local model file."""

    def __init__(self, identifier: str, model_manager: LocalModelManager) -> None:
        self.identifier = identifier
        self._model_manager = model_manager
        self._introspector = LocalIntrospector(model_manager)
        self._serializer = LocalSerializer(model_manager)

    def get_introspector(self) -> LocalIntrospector:
        return self._introspector

    def get_serializer(self) -> LocalSerializer:
        return self._serializer

    def get_model_manager(self) -> LocalModelManager:
        return self._model_manager


class LocalBusinessNetworkConnection(BusinessNetworkConnection):
    """Connection to a business network run from local files and a SQL store."""

    def __init__(self, engine: Engine, model_dir: Path) -> None:
        self._engine = engine
        self._model_dir = Path(model_dir)
        self._definition: Optional[LocalBusinessNetworkDefinition] = None
        self._store: Optional[RegistryStore] = None
        self._participant_id: Optional[str] = None

    def connect(
        self,
        connection_profile_name: str,
        business_network_identifier: str,
        participant_id: str,
        participant_pwd: str,
    ) -> LocalBusinessNetworkDefinition:
        """Load the network's model and prepare its registry store.

        Raises:
            ConnectionError: If no model file exists for the network.
        """
        model_path = self._model_dir / f"{business_network_identifier}.yaml"
        if not model_path.is_file():
            raise ConnectionError(
                f"Business network {business_network_identifier} is not deployed "
                f"(no model file at {model_path})"
            )

        definition = LocalBusinessNetworkDefinition(
            business_network_identifier, load_model_file(model_path)
        )
        store = RegistryStore(self._engine, business_network_identifier)
        store.ensure_schema()

        self._definition = definition
        self._store = store
        self._participant_id = participant_id
        logger.info(
            "Local business network %s ready (profile=%s)",
            business_network_identifier,
            connection_profile_name,
        )
        return definition

    def disconnect(self) -> None:
        self._definition = None
        self._store = None
        self._participant_id = None

    def _require_definition(self) -> LocalBusinessNetworkDefinition:
        if self._definition is None:
            raise ConnectionError("Not connected to a business network")
        return self._definition

    def ping(self) -> dict[str, Any]:
        definition = self._require_definition()
        return {
            "network": definition.identifier,
            "participant": self._participant_id,
            "models": len(definition.get_model_manager().declarations),
        }

    def get_business_network(self) -> LocalBusinessNetworkDefinition:
        return self._require_definition()

    def _registry(self, kind: str, declaration_type: type, registry_type: type, type_name: str) -> LocalRegistry:
        definition = self._require_definition()
        declaration = definition.get_model_manager().declarations.get(type_name)
        if not isinstance(declaration, declaration_type):
            raise ResourceNotFoundError(SYSTEM_REGISTRIES, f"{kind}:{type_name}")
        return registry_type(self._store, definition.get_serializer(), type_name)

    def get_asset_registry(self, type_name: str) -> LocalRegistry:
        return self._registry("Asset", AssetDeclaration, LocalRegistry, type_name)

    def get_participant_registry(self, type_name: str) -> LocalRegistry:
        return self._registry("Participant", ParticipantDeclaration, LocalRegistry, type_name)

    def get_transaction_registry(self, type_name: str) -> LocalTransactionRegistry:
        return self._registry("Transaction", TransactionDeclaration, LocalTransactionRegistry, type_name)

    def submit_transaction(self, resource: LocalResource) -> None:
        """Record a transaction in its transaction registry."""
        if not isinstance(resource.get_class_declaration(), TransactionDeclaration):
            raise ResourceValidationError(resource.get_fully_qualified_type(), "is not a transaction")
        registry = self.get_transaction_registry(resource.get_fully_qualified_type())
        registry.add(resource)
        logger.info(
            "Recorded transaction %s of type %s",
            resource.get_identifier(),
            resource.get_fully_qualified_type(),
        )
