"""
Adapter: Registry storage.

Implements the Registry port over a single SQL table shared by every
registry of every local business network. Records keep their insertion
order through the ``position`` column.
"""

import json
import logging
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.engine import Connection, Engine

from bnconnector.domain.network.errors import (
    NetworkConnectorError,
    ResourceExistsError,
    ResourceNotFoundError,
    ResourceValidationError,
)
from bnconnector.domain.network.ports import Registry
from bnconnector.infrastructure.network.serializer import LocalResource, LocalSerializer

logger = logging.getLogger(__name__)

CREATE_TABLE = text(
    """
    CREATE TABLE IF NOT EXISTS registry_entries (
        network_id    VARCHAR(255) NOT NULL,
        registry_type VARCHAR(255) NOT NULL,
        resource_id   VARCHAR(255) NOT NULL,
        position      INTEGER      NOT NULL,
        data          TEXT         NOT NULL,
        PRIMARY KEY (network_id, registry_type, resource_id)
    )
    """
)


class RegistryStore:
    """Row access for the ``registry_entries`` table of one network."""

    def __init__(self, engine: Engine, network_id: str) -> None:
        self._engine = engine
        self._network_id = network_id

    def ensure_schema(self) -> None:
        with self._engine.begin() as conn:
            conn.execute(CREATE_TABLE)

    def _key(self, registry_type: str, resource_id: Optional[str] = None) -> dict[str, Any]:
        key = {"network_id": self._network_id, "registry_type": registry_type}
        if resource_id is not None:
            key["resource_id"] = resource_id
        return key

    def _fetch(self, conn: Connection, registry_type: str, resource_id: str) -> Optional[dict[str, Any]]:
        row = conn.execute(
            text(
                """
                SELECT data FROM registry_entries
                WHERE network_id = :network_id
                  AND registry_type = :registry_type
                  AND resource_id = :resource_id
                """
            ),
            self._key(registry_type, resource_id),
        ).first()
        return json.loads(row[0]) if row is not None else None

    def fetch(self, registry_type: str, resource_id: str) -> Optional[dict[str, Any]]:
        with self._engine.connect() as conn:
            return self._fetch(conn, registry_type, resource_id)

    def fetch_all(self, registry_type: str) -> list[dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(
                    """
                    SELECT data FROM registry_entries
                    WHERE network_id = :network_id
                      AND registry_type = :registry_type
                    ORDER BY position ASC
                    """
                ),
                self._key(registry_type),
            ).fetchall()
        return [json.loads(row[0]) for row in rows]

    def insert(self, registry_type: str, resource_id: str, data: dict[str, Any]) -> None:
        """Append a record to a registry.

        Raises:
            ResourceExistsError: If the id is already registered.
        """
        with self._engine.begin() as conn:
            if self._fetch(conn, registry_type, resource_id) is not None:
                raise ResourceExistsError(registry_type, resource_id)
            position = conn.execute(
                text(
                    """
                    SELECT COALESCE(MAX(position), 0) + 1 FROM registry_entries
                    WHERE network_id = :network_id AND registry_type = :registry_type
                    """
                ),
                self._key(registry_type),
            ).scalar_one()
            try:
                conn.execute(
                    text(
                        """
                        INSERT INTO registry_entries
                            (network_id, registry_type, resource_id, position, data)
                        VALUES
                            (:network_id, :registry_type, :resource_id, :position, :data)
                        """
                    ),
                    {**self._key(registry_type, resource_id), "position": position, "data": json.dumps(data)},
                )
            except IntegrityError:
                # A concurrent writer registered the same id first.
                raise ResourceExistsError(registry_type, resource_id) from None
        logger.debug("Inserted %s into %s at position %d", resource_id, registry_type, position)

    def replace(self, registry_type: str, resource_id: str, data: dict[str, Any]) -> None:
        """Overwrite a record, keeping its position.

        Raises:
            ResourceNotFoundError: If the id is not registered.
        """
        with self._engine.begin() as conn:
            result = conn.execute(
                text(
                    """
                    UPDATE registry_entries SET data = :data
                    WHERE network_id = :network_id
                      AND registry_type = :registry_type
                      AND resource_id = :resource_id
                    """
                ),
                {**self._key(registry_type, resource_id), "data": json.dumps(data)},
            )
            if result.rowcount == 0:
                raise ResourceNotFoundError(registry_type, resource_id)

    def delete(self, registry_type: str, resource_id: str) -> None:
        """Remove a record.

        Raises:
            ResourceNotFoundError: If the id is not registered.
        """
        with self._engine.begin() as conn:
            result = conn.execute(
                text(
                    """
                    DELETE FROM registry_entries
                    WHERE network_id = :network_id
                      AND registry_type = :registry_type
                      AND resource_id = :resource_id
                    """
                ),
                self._key(registry_type, resource_id),
            )
            if result.rowcount == 0:
                raise ResourceNotFoundError(registry_type, resource_id)


class LocalRegistry(Registry):
    """Registry of one declared type, backed by a RegistryStore.

    Records are stored as their serialized JSON and turned back into
    resources on read.
    """

    def __init__(self, store: RegistryStore, serializer: LocalSerializer, type_name: str) -> None:
        self._store = store
        self._serializer = serializer
        self.type_name = type_name

    def _check_type(self, resource: LocalResource) -> None:
        if resource.get_fully_qualified_type() != self.type_name:
            raise ResourceValidationError(
                resource.get_fully_qualified_type(),
                f"does not belong in registry {self.type_name}",
            )

    def get(self, resource_id: str) -> LocalResource:
        data = self._store.fetch(self.type_name, resource_id)
        if data is None:
            raise ResourceNotFoundError(self.type_name, resource_id)
        return self._serializer.from_json(data)

    def get_all(self) -> list[LocalResource]:
        return [self._serializer.from_json(data) for data in self._store.fetch_all(self.type_name)]

    def add(self, resource: LocalResource) -> None:
        self._check_type(resource)
        self._store.insert(self.type_name, resource.get_identifier(), self._serializer.to_json(resource))

    def update(self, resource: LocalResource) -> None:
        self._check_type(resource)
        self._store.replace(self.type_name, resource.get_identifier(), self._serializer.to_json(resource))

    def remove(self, resource_id: str) -> None:
        self._store.delete(self.type_name, resource_id)

    def exists(self, resource_id: str) -> bool:
        return self._store.fetch(self.type_name, resource_id) is not None


class LocalTransactionRegistry(LocalRegistry):
    """Record of submitted transactions. Entries cannot change once added."""

    def update(self, resource: LocalResource) -> None:
        raise NetworkConnectorError(f"Transactions in {self.type_name} cannot be updated")

    def remove(self, resource_id: str) -> None:
        raise NetworkConnectorError(f"Transactions in {self.type_name} cannot be removed")
