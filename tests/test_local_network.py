"""
Tests for the local business network adapters.

Covers:
- Model loading from YAML documents
- LocalSerializer validation and defaults
- RegistryStore / LocalRegistry over a temporary SQLite database
- LocalBusinessNetworkConnection connect, registries and transactions
- The connector end to end over the local network
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from bnconnector.application.network.connector import BusinessNetworkConnector
from bnconnector.domain.network.entities import NetworkSettings
from bnconnector.domain.network.errors import (
    ModelNotFoundError,
    NetworkConnectorError,
    ResourceExistsError,
    ResourceNotFoundError,
    ResourceValidationError,
    UnsupportedTypeError,
)
from bnconnector.domain.network.ports import AssetDeclaration, TransactionDeclaration
from bnconnector.infrastructure.network.model import load_model, load_model_file
from bnconnector.infrastructure.network.registry_repository import (
    LocalRegistry,
    LocalTransactionRegistry,
    RegistryStore,
)
from bnconnector.infrastructure.network.serializer import LocalSerializer

NETWORK_ID = "org-acme-network"
VEHICLE = "org.acme.base.Vehicle"
DRIVER = "org.acme.base.Driver"
TRANSFER = "org.acme.base.TransferVehicle"


@pytest.fixture
def serializer(acme_manager) -> LocalSerializer:
    return LocalSerializer(acme_manager)


@pytest.fixture
def store(engine) -> RegistryStore:
    registry_store = RegistryStore(engine, NETWORK_ID)
    registry_store.ensure_schema()
    return registry_store


@pytest.fixture
def vehicles(store, serializer) -> LocalRegistry:
    return LocalRegistry(store, serializer, VEHICLE)


def _vehicle(serializer, vin: str, **fields):
    return serializer.from_json({"$class": VEHICLE, "vin": vin, **fields})


# ══════════════════════════════════════════════════════════════════════
# Model
# ══════════════════════════════════════════════════════════════════════


class TestLoadModel:
    """Tests for building declarations from model documents."""

    def test_declarations_by_category(self, acme_manager):
        assert isinstance(acme_manager.get_type(VEHICLE), AssetDeclaration)
        assert isinstance(acme_manager.get_type(TRANSFER), TransactionDeclaration)
        assert acme_manager.get_type(VEHICLE).get_identifier_field_name() == "vin"
        assert acme_manager.get_type("org.acme.base.Address").get_identifier_field_name() is None

    def test_enum_properties_are_flagged(self, acme_manager):
        colour = acme_manager.get_type(VEHICLE).get_property("colour")
        assert colour.is_enum() is True
        assert colour.is_primitive() is False
        assert acme_manager.enum_values("Colour") == ["RED", "GREEN", "BLUE"]

    def test_unknown_type(self, acme_manager):
        with pytest.raises(ModelNotFoundError, match="org.acme.base.Boat"):
            acme_manager.get_type("org.acme.base.Boat")

    def test_missing_namespace(self):
        with pytest.raises(ValueError, match="namespace"):
            load_model({"assets": []})

    def test_undeclared_identifier(self):
        source = {
            "namespace": "org.acme",
            "assets": [{"name": "Car", "identified_by": "vin", "properties": []}],
        }
        with pytest.raises(ValueError, match="undeclared field vin"):
            load_model(source)

    def test_duplicate_declaration(self):
        asset = {"name": "Car", "identified_by": "vin", "properties": [{"name": "vin", "type": "String"}]}
        with pytest.raises(ValueError, match="Duplicate"):
            load_model({"namespace": "org.acme", "assets": [asset, asset]})

    def test_load_sample_network_file(self):
        path = Path(__file__).resolve().parent.parent / "networks" / "org-acme-network.yaml"
        manager = load_model_file(path)
        assert "org.acme.base.BaseAsset" in manager.declarations


# ══════════════════════════════════════════════════════════════════════
# Serializer
# ══════════════════════════════════════════════════════════════════════


class TestLocalSerializer:
    """Tests for JSON validation against declarations."""

    def test_fills_defaults_and_round_trips(self, serializer):
        resource = _vehicle(serializer, "VIN1", mileage=120)

        assert resource.get_identifier() == "VIN1"
        assert serializer.to_json(resource) == {
            "$class": VEHICLE,
            "vin": "VIN1",
            "colour": "RED",
            "mileage": 120,
        }

    def test_transaction_gets_id_and_timestamp(self, serializer):
        resource = serializer.from_json({"$class": TRANSFER, "vehicle": "VIN1", "newOwner": "D1"})

        assert resource.get_identifier()
        assert resource.data["timestamp"]

    def test_nested_concept_is_tagged(self, serializer):
        resource = serializer.from_json(
            {"$class": DRIVER, "driverId": "D1", "address": {"street": "1 Main St"}}
        )
        assert resource.data["address"] == {"$class": "org.acme.base.Address", "street": "1 Main St"}

    @pytest.mark.parametrize(
        "data, reason",
        [
            ({"$class": VEHICLE}, "missing required property vin"),
            ({"$class": VEHICLE, "vin": "V", "wheels": 4}, "unknown properties wheels"),
            ({"$class": VEHICLE, "vin": "V", "colour": "PINK"}, "colour must be one of"),
            ({"$class": VEHICLE, "vin": "V", "mileage": "far"}, "mileage must be an integer"),
            ({"$class": VEHICLE, "vin": "V", "mileage": True}, "mileage must be an integer"),
            ({"$class": VEHICLE, "vin": "V", "registered": "yesterday"}, "ISO 8601"),
            ({"$class": VEHICLE, "vin": "V", "tags": "red"}, "tags must be an array"),
            ({"$class": VEHICLE, "vin": "V", "owner": {"driverId": "D1"}}, "identifier string"),
            ({"$class": "org.acme.base.Vessel", "imo": "1"}, "abstract"),
            (
                {"$class": DRIVER, "driverId": "D1", "address": {"$class": VEHICLE, "vin": "V"}},
                "address must be a concrete concept",
            ),
            (
                {"$class": DRIVER, "driverId": "D1", "address": {"$class": "org.acme.base.Vessel", "imo": "1"}},
                "address must be a concrete concept",
            ),
            ({"vin": "V"}, "missing \\$class"),
        ],
    )
    def test_rejects_invalid_payloads(self, serializer, data, reason):
        with pytest.raises(ResourceValidationError, match=reason):
            serializer.from_json(data)

    def test_accepts_iso_datetime(self, serializer):
        resource = _vehicle(serializer, "VIN1", registered="2024-03-01T10:00:00Z")
        assert resource.data["registered"] == "2024-03-01T10:00:00Z"

    def test_concept_has_no_identifier(self, serializer):
        resource = serializer.from_json({"$class": "org.acme.base.Address", "street": "x"})

        assert resource.get_identifier() is None
        assert resource.data == {"$class": "org.acme.base.Address", "street": "x"}


# ══════════════════════════════════════════════════════════════════════
# Registries
# ══════════════════════════════════════════════════════════════════════


class TestLocalRegistry:
    """Tests for registries over the SQL store."""

    def test_get_all_keeps_insertion_order(self, vehicles, serializer):
        for vin in ("C", "A", "B"):
            vehicles.add(_vehicle(serializer, vin))

        assert [r.get_identifier() for r in vehicles.get_all()] == ["C", "A", "B"]

    def test_update_keeps_position(self, vehicles, serializer):
        for vin in ("A", "B"):
            vehicles.add(_vehicle(serializer, vin))

        vehicles.update(_vehicle(serializer, "A", colour="BLUE"))

        records = [serializer.to_json(r) for r in vehicles.get_all()]
        assert [r["vin"] for r in records] == ["A", "B"]
        assert records[0]["colour"] == "BLUE"

    def test_duplicate_add(self, vehicles, serializer):
        vehicles.add(_vehicle(serializer, "A"))
        with pytest.raises(ResourceExistsError):
            vehicles.add(_vehicle(serializer, "A"))

    def test_insert_conflicting_with_concurrent_writer(self, store, vehicles, serializer):
        vehicles.add(_vehicle(serializer, "A"))

        with patch.object(store, "_fetch", return_value=None):
            with pytest.raises(ResourceExistsError, match="already exists"):
                store.insert(VEHICLE, "A", {"$class": VEHICLE, "vin": "A"})

        assert [r.get_identifier() for r in vehicles.get_all()] == ["A"]

    def test_missing_records(self, vehicles, serializer):
        with pytest.raises(ResourceNotFoundError):
            vehicles.get("nope")
        with pytest.raises(ResourceNotFoundError):
            vehicles.update(_vehicle(serializer, "nope"))
        with pytest.raises(ResourceNotFoundError):
            vehicles.remove("nope")

    def test_remove_and_exists(self, vehicles, serializer):
        vehicles.add(_vehicle(serializer, "A"))
        assert vehicles.exists("A") is True

        vehicles.remove("A")
        assert vehicles.exists("A") is False

    def test_rejects_other_types(self, vehicles, serializer):
        driver = serializer.from_json({"$class": DRIVER, "driverId": "D1"})
        with pytest.raises(ResourceValidationError, match="does not belong"):
            vehicles.add(driver)

    def test_networks_are_isolated(self, engine, serializer, vehicles):
        other = RegistryStore(engine, "other-network")
        vehicles.add(_vehicle(serializer, "A"))

        assert other.fetch_all(VEHICLE) == []

    def test_transactions_are_immutable(self, store, serializer):
        transactions = LocalTransactionRegistry(store, serializer, TRANSFER)
        resource = serializer.from_json({"$class": TRANSFER, "vehicle": "V", "newOwner": "D"})
        transactions.add(resource)

        with pytest.raises(NetworkConnectorError):
            transactions.update(resource)
        with pytest.raises(NetworkConnectorError):
            transactions.remove(resource.get_identifier())


# ══════════════════════════════════════════════════════════════════════
# Connection
# ══════════════════════════════════════════════════════════════════════


class TestLocalConnection:
    """Tests for LocalBusinessNetworkConnection."""

    def test_connect_loads_model(self, local_connection):
        definition = local_connection.connect("local", NETWORK_ID, "admin", "adminpw")

        assert definition.identifier == NETWORK_ID
        assert local_connection.ping() == {
            "network": NETWORK_ID,
            "participant": "admin",
            "models": 5,
        }

    def test_connect_to_missing_network(self, local_connection):
        with pytest.raises(ConnectionError, match="not deployed"):
            local_connection.connect("local", "no-such-network", "admin", "adminpw")

    def test_calls_before_connect(self, local_connection):
        with pytest.raises(ConnectionError):
            local_connection.ping()

    def test_registry_kind_must_match(self, local_connection):
        local_connection.connect("local", NETWORK_ID, "admin", "adminpw")

        with pytest.raises(ResourceNotFoundError):
            local_connection.get_asset_registry(DRIVER)
        assert isinstance(local_connection.get_participant_registry(DRIVER), LocalRegistry)
        assert isinstance(local_connection.get_transaction_registry(TRANSFER), LocalTransactionRegistry)

    def test_submit_transaction_is_recorded(self, local_connection):
        definition = local_connection.connect("local", NETWORK_ID, "admin", "adminpw")
        resource = definition.get_serializer().from_json(
            {"$class": TRANSFER, "transactionId": "tx-1", "vehicle": "V", "newOwner": "D"}
        )

        local_connection.submit_transaction(resource)

        assert local_connection.get_transaction_registry(TRANSFER).exists("tx-1")

    def test_disconnect_clears_state(self, local_connection):
        local_connection.connect("local", NETWORK_ID, "admin", "adminpw")
        local_connection.disconnect()

        with pytest.raises(ConnectionError):
            local_connection.get_business_network()


# ══════════════════════════════════════════════════════════════════════
# Connector over the local network
# ══════════════════════════════════════════════════════════════════════


@pytest.fixture
def local_connector(local_connection) -> BusinessNetworkConnector:
    settings = NetworkSettings("local", NETWORK_ID, "admin", "adminpw")
    return BusinessNetworkConnector(settings, local_connection)


class TestConnectorOverLocalNetwork:
    """The connector driving real local adapters."""

    @pytest.mark.asyncio
    async def test_crud_round(self, local_connector):
        assert await local_connector.create(VEHICLE, {"vin": "V1"}) == "V1"
        await local_connector.create(VEHICLE, {"vin": "V2", "colour": "BLUE"})

        assert await local_connector.retrieve(VEHICLE, "V1") == {"$class": VEHICLE, "vin": "V1", "colour": "RED"}
        assert [r["vin"] for r in await local_connector.all(VEHICLE)] == ["V1", "V2"]
        assert await local_connector.count(VEHICLE, {"colour": "BLUE"}) == 1

        await local_connector.update(VEHICLE, {"vin": "V1", "colour": "GREEN"})
        assert (await local_connector.retrieve(VEHICLE, "V1"))["colour"] == "GREEN"

        await local_connector.delete(VEHICLE, "V2")
        assert await local_connector.exists(VEHICLE, "V2") is False

    @pytest.mark.asyncio
    async def test_transactions_are_submitted_and_listed(self, local_connector):
        identifier = await local_connector.create(TRANSFER, {"vehicle": "V1", "newOwner": "D1"})

        records = await local_connector.all(TRANSFER)
        assert [r["transactionId"] for r in records] == [identifier]

        with pytest.raises(UnsupportedTypeError):
            await local_connector.delete(TRANSFER, identifier)

    @pytest.mark.asyncio
    async def test_concept_is_unsupported(self, local_connector):
        with pytest.raises(UnsupportedTypeError, match="org.acme.base.Address"):
            await local_connector.all("org.acme.base.Address")

    @pytest.mark.asyncio
    async def test_concept_writes_are_unsupported(self, local_connector):
        with pytest.raises(UnsupportedTypeError) as exc_info:
            await local_connector.create("org.acme.base.Address", {"street": "Main"})
        assert str(exc_info.value) == "Unable to handle resource of type: org.acme.base.Address"

        with pytest.raises(UnsupportedTypeError) as exc_info:
            await local_connector.update("org.acme.base.Address", {"street": "Main"})
        assert str(exc_info.value) == "Unable to handle resource of type: org.acme.base.Address"

    @pytest.mark.asyncio
    async def test_discovery(self, local_connector):
        definitions = await local_connector.discover_model_definitions()

        assert [d["name"] for d in definitions] == [VEHICLE, "org.acme.base.Vessel", DRIVER, TRANSFER]
