"""
Adapter: Local business network model.

Implements the Property, ClassDeclaration, ModelManager and Introspector
ports from a YAML model file, e.g.::

    namespace: org.acme.base
    enums:
      - name: Colour
        values: [RED, GREEN]
    assets:
      - name: BaseAsset
        identified_by: theValue
        properties:
          - {name: theValue, type: String}
          - {name: colour, type: Colour, optional: true}
          - {name: owner, type: BaseParticipant, relationship: true}
    participants: [...]
    transactions: [...]
    concepts: [...]

Type references are short names inside the file's namespace.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from bnconnector.domain.network.errors import ModelNotFoundError
from bnconnector.domain.network.ports import (
    AssetDeclaration,
    ClassDeclaration,
    Introspector,
    ModelManager,
    ParticipantDeclaration,
    Property,
    TransactionDeclaration,
)

logger = logging.getLogger(__name__)

PRIMITIVE_TYPE_NAMES = frozenset({"String", "Boolean", "DateTime", "Double", "Integer", "Long"})

TRANSACTION_ID_FIELD = "transactionId"
TIMESTAMP_FIELD = "timestamp"


@dataclass(frozen=True)
class LocalProperty(Property):
    """A property declared in a local model file."""

    name: str
    type_name: str
    optional: bool = False
    array: bool = False
    relationship: bool = False
    enum: bool = False
    default: Optional[Any] = None

    def get_name(self) -> str:
        return self.name

    def get_type(self) -> str:
        return self.type_name

    def is_optional(self) -> bool:
        return self.optional

    def is_array(self) -> bool:
        return self.array

    def is_primitive(self) -> bool:
        return self.type_name in PRIMITIVE_TYPE_NAMES

    def is_relationship(self) -> bool:
        return self.relationship

    def is_enum(self) -> bool:
        return self.enum

    def get_default_value(self) -> Optional[Any]:
        return self.default


class LocalClassDeclaration(ClassDeclaration):
    """A type declared in a local model file.

    Used as-is for concepts; the asset, participant and transaction
    subclasses below add their category.
    """

    def __init__(
        self,
        namespace: str,
        name: str,
        identifier_field: Optional[str],
        properties: list[LocalProperty],
        abstract: bool = False,
    ) -> None:
        self._namespace = namespace
        self._name = name
        self._identifier_field = identifier_field
        self._properties = properties
        self._abstract = abstract

    def get_name(self) -> str:
        return self._name

    def get_namespace(self) -> str:
        return self._namespace

    def get_fully_qualified_name(self) -> str:
        return f"{self._namespace}.{self._name}"

    def get_identifier_field_name(self) -> Optional[str]:
        return self._identifier_field

    def get_properties(self) -> list[LocalProperty]:
        return list(self._properties)

    def get_property(self, name: str) -> Optional[LocalProperty]:
        return next((p for p in self._properties if p.name == name), None)

    def is_abstract(self) -> bool:
        return self._abstract

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.get_fully_qualified_name()}>"


class LocalAssetDeclaration(LocalClassDeclaration, AssetDeclaration):
    pass


class LocalParticipantDeclaration(LocalClassDeclaration, ParticipantDeclaration):
    pass


class LocalTransactionDeclaration(LocalClassDeclaration, TransactionDeclaration):
    pass


@dataclass
class LocalModelManager(ModelManager):
    """All declarations of one local business network, keyed by name."""

    namespace: str
    declarations: dict[str, LocalClassDeclaration] = field(default_factory=dict)
    enums: dict[str, list[str]] = field(default_factory=dict)

    def get_type(self, name: str) -> LocalClassDeclaration:
        """Return a declaration by fully-qualified name.

        Raises:
            ModelNotFoundError: If the name is not declared.
        """
        try:
            return self.declarations[name]
        except KeyError:
            raise ModelNotFoundError(name) from None

    def qualify(self, short_name: str) -> str:
        return f"{self.namespace}.{short_name}"

    def enum_values(self, type_name: str) -> list[str]:
        return self.enums.get(self.qualify(type_name), [])


class LocalIntrospector(Introspector):
    """Introspector over a LocalModelManager."""

    def __init__(self, model_manager: LocalModelManager) -> None:
        self._model_manager = model_manager

    def get_class_declarations(self) -> list[ClassDeclaration]:
        return list(self._model_manager.declarations.values())

    def get_class_declaration(self, name: str) -> ClassDeclaration:
        return self._model_manager.get_type(name)


_SECTIONS: tuple[tuple[str, type[LocalClassDeclaration]], ...] = (
    ("concepts", LocalClassDeclaration),
    ("assets", LocalAssetDeclaration),
    ("participants", LocalParticipantDeclaration),
    ("transactions", LocalTransactionDeclaration),
)


def _build_property(raw: dict[str, Any], enum_names: set[str]) -> LocalProperty:
    if "name" not in raw or "type" not in raw:
        raise ValueError(f"Property needs a name and a type: {raw!r}")
    return LocalProperty(
        name=raw["name"],
        type_name=raw["type"],
        optional=bool(raw.get("optional", False)),
        array=bool(raw.get("array", False)),
        relationship=bool(raw.get("relationship", False)),
        enum=raw["type"] in enum_names,
        default=raw.get("default"),
    )


def _build_declaration(
    namespace: str,
    raw: dict[str, Any],
    declaration_type: type[LocalClassDeclaration],
    enum_names: set[str],
) -> LocalClassDeclaration:
    properties = [_build_property(p, enum_names) for p in raw.get("properties") or []]
    identifier_field = raw.get("identified_by")

    if declaration_type is LocalTransactionDeclaration and identifier_field is None:
        identifier_field = TRANSACTION_ID_FIELD
        properties = [
            LocalProperty(name=TRANSACTION_ID_FIELD, type_name="String"),
            LocalProperty(name=TIMESTAMP_FIELD, type_name="DateTime", optional=True),
            *properties,
        ]

    if identifier_field is not None and identifier_field not in {p.name for p in properties}:
        raise ValueError(
            f"{namespace}.{raw['name']} is identified by undeclared field {identifier_field}"
        )

    return declaration_type(
        namespace=namespace,
        name=raw["name"],
        identifier_field=identifier_field,
        properties=properties,
        abstract=bool(raw.get("abstract", False)),
    )


def load_model(source: dict[str, Any]) -> LocalModelManager:
    """Build a LocalModelManager from a parsed model document.

    Args:
        source: The model document (see module docstring).

    Returns:
        The model manager holding every declaration.

    Raises:
        ValueError: If the document is malformed.
    """
    namespace = source.get("namespace")
    if not namespace:
        raise ValueError("Model file must declare a namespace")

    manager = LocalModelManager(namespace=namespace)
    for raw_enum in source.get("enums") or []:
        manager.enums[manager.qualify(raw_enum["name"])] = list(raw_enum.get("values") or [])
    enum_names = {raw_enum["name"] for raw_enum in source.get("enums") or []}

    for section, declaration_type in _SECTIONS:
        for raw in source.get(section) or []:
            declaration = _build_declaration(namespace, raw, declaration_type, enum_names)
            fqn = declaration.get_fully_qualified_name()
            if fqn in manager.declarations:
                raise ValueError(f"Duplicate declaration: {fqn}")
            manager.declarations[fqn] = declaration

    logger.info(
        "Loaded model %s with %d declarations",
        namespace,
        len(manager.declarations),
    )
    return manager


def load_model_file(path: Path) -> LocalModelManager:
    """Load a LocalModelManager from a YAML model file."""
    with open(path, "r", encoding="utf-8") as f:
        source = yaml.safe_load(f) or {}
    return load_model(source)
