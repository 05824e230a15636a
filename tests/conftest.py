"""
Shared pytest fixtures for connector tests.

Provides:
- Mocked ledger collaborators (connection, definition, serializer, model manager)
- A connector built over them, disconnected or already connected
- A small local model and a local network backed by a temporary SQLite file
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml
from sqlalchemy import create_engine

from bnconnector.application.network.connector import BusinessNetworkConnector
from bnconnector.domain.network.entities import NetworkSettings
from bnconnector.domain.network.ports import (
    BusinessNetworkConnection,
    BusinessNetworkDefinition,
    ModelManager,
    Serializer,
)
from bnconnector.infrastructure.network.local_connection import LocalBusinessNetworkConnection
from bnconnector.infrastructure.network.model import LocalIntrospector, load_model
from bnconnector.shared.security.rate_limiting import limiter

NETWORK_ID = "org-acme-network"

MOCK_SETTINGS = NetworkSettings(
    connection_profile_name="MockProfileName",
    business_network_identifier="MockBusinessNetId",
    participant_id="MockEnrollmentId",
    participant_pwd="MockEnrollmentPwd",
)

BASE_MODEL = {
    "namespace": "org.acme.base",
    "assets": [
        {
            "name": "BaseAsset",
            "identified_by": "theValue",
            "properties": [{"name": "theValue", "type": "String"}],
        }
    ],
    "participants": [
        {
            "name": "BaseParticipant",
            "identified_by": "theValue",
            "properties": [{"name": "theValue", "type": "String"}],
        }
    ],
}

ACME_MODEL = {
    "namespace": "org.acme.base",
    "enums": [{"name": "Colour", "values": ["RED", "GREEN", "BLUE"]}],
    "concepts": [
        {
            "name": "Address",
            "properties": [
                {"name": "street", "type": "String"},
                {"name": "city", "type": "String", "optional": True},
            ],
        }
    ],
    "assets": [
        {
            "name": "Vehicle",
            "identified_by": "vin",
            "properties": [
                {"name": "vin", "type": "String"},
                {"name": "colour", "type": "Colour", "default": "RED"},
                {"name": "mileage", "type": "Integer", "optional": True},
                {"name": "registered", "type": "DateTime", "optional": True},
                {"name": "tags", "type": "String", "array": True, "optional": True},
                {"name": "owner", "type": "Driver", "relationship": True, "optional": True},
            ],
        },
        {
            "name": "Vessel",
            "abstract": True,
            "identified_by": "imo",
            "properties": [{"name": "imo", "type": "String"}],
        },
    ],
    "participants": [
        {
            "name": "Driver",
            "identified_by": "driverId",
            "properties": [
                {"name": "driverId", "type": "String"},
                {"name": "address", "type": "Address", "optional": True},
            ],
        }
    ],
    "transactions": [
        {
            "name": "TransferVehicle",
            "properties": [
                {"name": "vehicle", "type": "Vehicle", "relationship": True},
                {"name": "newOwner", "type": "Driver", "relationship": True},
            ],
        }
    ],
}


# ══════════════════════════════════════════════════════════════════════
# Mocked collaborators
# ══════════════════════════════════════════════════════════════════════


@pytest.fixture
def serializer() -> MagicMock:
    return MagicMock(spec=Serializer)


@pytest.fixture
def model_manager() -> MagicMock:
    return MagicMock(spec=ModelManager)


@pytest.fixture
def definition(serializer: MagicMock, model_manager: MagicMock) -> MagicMock:
    """Business network definition whose introspector reads BASE_MODEL."""
    mock_definition = MagicMock(spec=BusinessNetworkDefinition)
    mock_definition.get_introspector.return_value = LocalIntrospector(load_model(BASE_MODEL))
    mock_definition.get_serializer.return_value = serializer
    mock_definition.get_model_manager.return_value = model_manager
    return mock_definition


@pytest.fixture
def connection(definition: MagicMock) -> MagicMock:
    """Ledger client whose connect yields the mocked definition."""
    mock_connection = MagicMock(spec=BusinessNetworkConnection)
    mock_connection.connect = AsyncMock(return_value=definition)
    mock_connection.disconnect = AsyncMock(return_value=None)
    mock_connection.ping = AsyncMock(return_value={"version": "0.19.0"})
    mock_connection.submit_transaction = AsyncMock(return_value=None)
    return mock_connection


@pytest.fixture
def connector(connection: MagicMock) -> BusinessNetworkConnector:
    return BusinessNetworkConnector(MOCK_SETTINGS, connection)


@pytest.fixture
def connected(connector: BusinessNetworkConnector, definition: MagicMock) -> BusinessNetworkConnector:
    """A connector that has already connected."""
    connector.business_network_definition = definition
    connector.connected = True
    return connector


# ══════════════════════════════════════════════════════════════════════
# Local network
# ══════════════════════════════════════════════════════════════════════


@pytest.fixture
def model_dir(tmp_path: Path) -> Path:
    """Directory holding ACME_MODEL as the deployed network's model file."""
    directory = tmp_path / "networks"
    directory.mkdir()
    with open(directory / f"{NETWORK_ID}.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump(ACME_MODEL, f)
    return directory


@pytest.fixture
def engine(tmp_path: Path):
    db_engine = create_engine(f"sqlite:///{tmp_path / 'registries.db'}")
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def local_connection(engine, model_dir: Path) -> LocalBusinessNetworkConnection:
    return LocalBusinessNetworkConnection(engine=engine, model_dir=model_dir)


@pytest.fixture
def no_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def acme_manager():
    """Model manager for ACME_MODEL."""
    return load_model(ACME_MODEL)
