"""
Port interfaces (ABCs) for the network bounded context.

Ports define the contracts the connector requires from a business
network client. Infrastructure adapters implement these interfaces;
a remote ledger client binding would implement the same ones.

Methods documented as "may be awaitable" can be implemented either as
plain functions or as coroutines. The connector awaits results that
are awaitable and uses the others as-is.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class Property(ABC):
    """A field declared on a model type."""

    @abstractmethod
    def get_name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_type(self) -> str:
        """Return the declared type name (e.g. String, Double, a concept)."""
        raise NotImplementedError

    @abstractmethod
    def is_optional(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_array(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_primitive(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_relationship(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_enum(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_default_value(self) -> Optional[Any]:
        raise NotImplementedError


class ClassDeclaration(ABC):
    """Metadata describing one declared model type."""

    @abstractmethod
    def get_name(self) -> str:
        """Return the short type name, e.g. ``BaseAsset``."""
        raise NotImplementedError

    @abstractmethod
    def get_namespace(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_fully_qualified_name(self) -> str:
        """Return ``<namespace>.<name>``."""
        raise NotImplementedError

    @abstractmethod
    def get_identifier_field_name(self) -> Optional[str]:
        """Return the identifying field, or None for identity-less types."""
        raise NotImplementedError

    @abstractmethod
    def get_properties(self) -> list[Property]:
        raise NotImplementedError

    @abstractmethod
    def is_abstract(self) -> bool:
        raise NotImplementedError


class AssetDeclaration(ClassDeclaration):
    """Declaration of an asset type."""


class ParticipantDeclaration(ClassDeclaration):
    """Declaration of a participant type."""


class TransactionDeclaration(ClassDeclaration):
    """Declaration of a transaction type."""


class Resource(ABC):
    """A typed instance of a declared model type."""

    @abstractmethod
    def get_class_declaration(self) -> ClassDeclaration:
        raise NotImplementedError

    @abstractmethod
    def get_fully_qualified_type(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_identifier(self) -> Optional[str]:
        """Return the identifier, or None if the type has no identifying field."""
        raise NotImplementedError


class Serializer(ABC):
    """Converts between wire JSON objects and typed resources."""

    @abstractmethod
    def from_json(self, data: dict[str, Any]) -> Resource:
        """Deserialize a JSON object tagged with ``$class``."""
        raise NotImplementedError

    @abstractmethod
    def to_json(self, resource: Resource) -> dict[str, Any]:
        raise NotImplementedError


class Introspector(ABC):
    """Read-only view over the declared types of a business network."""

    @abstractmethod
    def get_class_declarations(self) -> list[ClassDeclaration]:
        raise NotImplementedError

    @abstractmethod
    def get_class_declaration(self, name: str) -> ClassDeclaration:
        """Return a declaration by fully-qualified name.

        Raises if the name is not declared.
        """
        raise NotImplementedError


class ModelManager(ABC):
    """Type lookup over the models of a business network."""

    @abstractmethod
    def get_type(self, name: str) -> ClassDeclaration:
        raise NotImplementedError


class BusinessNetworkDefinition(ABC):
    """A deployed business network: its models and serialization rules."""

    @abstractmethod
    def get_introspector(self) -> Introspector:
        raise NotImplementedError

    @abstractmethod
    def get_serializer(self) -> Serializer:
        raise NotImplementedError

    @abstractmethod
    def get_model_manager(self) -> ModelManager:
        raise NotImplementedError


class Registry(ABC):
    """Collection endpoint for one declared type.

    Every method may be awaitable.
    """

    @abstractmethod
    def get(self, resource_id: str) -> Resource:
        raise NotImplementedError

    @abstractmethod
    def get_all(self) -> list[Resource]:
        """Return every resource in registry insertion order."""
        raise NotImplementedError

    @abstractmethod
    def add(self, resource: Resource) -> None:
        raise NotImplementedError

    @abstractmethod
    def update(self, resource: Resource) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, resource_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def exists(self, resource_id: str) -> bool:
        raise NotImplementedError


class BusinessNetworkConnection(ABC):
    """Client connection to a business network.

    Every method may be awaitable.
    """

    @abstractmethod
    def connect(
        self,
        connection_profile_name: str,
        business_network_identifier: str,
        participant_id: str,
        participant_pwd: str,
    ) -> BusinessNetworkDefinition:
        """Open the connection and return the network definition."""
        raise NotImplementedError

    @abstractmethod
    def disconnect(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def ping(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    def submit_transaction(self, resource: Resource) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_asset_registry(self, type_name: str) -> Registry:
        raise NotImplementedError

    @abstractmethod
    def get_participant_registry(self, type_name: str) -> Registry:
        raise NotImplementedError

    @abstractmethod
    def get_transaction_registry(self, type_name: str) -> Registry:
        """Return the read-only registry of submitted transactions."""
        raise NotImplementedError

    @abstractmethod
    def get_business_network(self) -> BusinessNetworkDefinition:
        raise NotImplementedError
