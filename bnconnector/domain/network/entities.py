"""
Domain entities for the network bounded context.

Value objects shared by the connector, its ports and its adapters.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


CLASS_KEY = "$class"


class ConnectionState(Enum):
    """Lifecycle state of a connector's ledger connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ResourceCategory(Enum):
    """The three record categories a business network model supports.

    The category decides which registry (or the transaction submission
    path) handles a resource.
    """

    ASSET = "asset"
    PARTICIPANT = "participant"
    TRANSACTION = "transaction"

    @property
    def article(self) -> str:
        """Indefinite article used in human-readable descriptions."""
        return "An" if self.value[0] in "aeiou" else "A"


@dataclass(frozen=True)
class NetworkSettings:
    """Immutable connection settings for one business network.

    Attributes:
        connection_profile_name: Name of the connection profile to use.
        business_network_identifier: Identifier of the deployed network.
        participant_id: Enrollment id of the connecting participant.
        participant_pwd: Enrollment secret. Excluded from repr.
    """

    connection_profile_name: str
    business_network_identifier: str
    participant_id: str
    participant_pwd: str = field(repr=False)

    def connect_args(self) -> tuple[str, str, str, str]:
        """Return the positional arguments for a ledger client connect call."""
        return (
            self.connection_profile_name,
            self.business_network_identifier,
            self.participant_id,
            self.participant_pwd,
        )


@dataclass(frozen=True)
class ModelDefinition:
    """A table-like model exposed to the ORM host."""

    name: str
    type: str = "table"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "name": self.name}


@dataclass(frozen=True)
class RecordFilter:
    """A LoopBack-style query filter applied to serialized records.

    Attributes:
        where: Equality constraints on top-level record fields.
        skip: Number of leading records to drop.
        limit: Maximum number of records to return, or None for all.
    """

    where: dict[str, Any] = field(default_factory=dict)
    skip: int = 0
    limit: int | None = None
