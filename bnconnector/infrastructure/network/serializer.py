"""
Adapter: Local JSON serializer.

Implements the Resource and Serializer ports for local business networks.
Payloads are validated against their declaration: required fields,
unknown fields, primitive types, enum values and nested concepts.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from dateutil.parser import isoparse

from bnconnector.domain.network.entities import CLASS_KEY
from bnconnector.domain.network.errors import ResourceValidationError
from bnconnector.domain.network.ports import Resource, Serializer
from bnconnector.infrastructure.network.model import (
    TIMESTAMP_FIELD,
    TRANSACTION_ID_FIELD,
    LocalClassDeclaration,
    LocalModelManager,
    LocalProperty,
    LocalTransactionDeclaration,
)


class LocalResource(Resource):
    """A validated instance of a local declaration."""

    def __init__(self, declaration: LocalClassDeclaration, data: dict[str, Any]) -> None:
        self._declaration = declaration
        self.data = data

    def get_class_declaration(self) -> LocalClassDeclaration:
        return self._declaration

    def get_fully_qualified_type(self) -> str:
        return self._declaration.get_fully_qualified_name()

    def get_identifier(self) -> Optional[str]:
        """Return the identifying field's value, or None for identity-less types."""
        field_name = self._declaration.get_identifier_field_name()
        if field_name is None:
            return None
        return self.data.get(field_name)

    def __repr__(self) -> str:
        return f"<LocalResource {self.get_fully_qualified_type()}>"


class LocalSerializer(Serializer):
    """Converts between ``$class``-tagged JSON and LocalResource."""

    def __init__(self, model_manager: LocalModelManager) -> None:
        self._model_manager = model_manager

    def from_json(self, data: dict[str, Any]) -> LocalResource:
        """Validate a JSON object and wrap it as a resource.

        Concepts and other identity-less types are deserialized too. Transactions
        without an id or timestamp get generated ones.

        Raises:
            ResourceValidationError: If the payload does not match.
            ModelNotFoundError: If ``$class`` is not declared.
        """
        class_name = data.get(CLASS_KEY)
        if not class_name:
            raise ResourceValidationError("<unknown>", f"missing {CLASS_KEY}")

        declaration = self._model_manager.get_type(class_name)
        if declaration.is_abstract():
            raise ResourceValidationError(class_name, "cannot instantiate an abstract type")

        payload = {k: v for k, v in data.items() if k != CLASS_KEY}
        if isinstance(declaration, LocalTransactionDeclaration):
            payload.setdefault(TRANSACTION_ID_FIELD, uuid.uuid4().hex)
            payload.setdefault(TIMESTAMP_FIELD, datetime.now(timezone.utc).isoformat())

        return LocalResource(declaration, self._validate(declaration, payload))

    def to_json(self, resource: LocalResource) -> dict[str, Any]:
        return {CLASS_KEY: resource.get_fully_qualified_type(), **resource.data}

    def _validate(self, declaration: LocalClassDeclaration, payload: dict[str, Any]) -> dict[str, Any]:
        type_name = declaration.get_fully_qualified_name()
        declared = {p.name for p in declaration.get_properties()}
        unknown = sorted(set(payload) - declared)
        if unknown:
            raise ResourceValidationError(type_name, f"unknown properties {', '.join(unknown)}")

        validated: dict[str, Any] = {}
        for prop in declaration.get_properties():
            value = payload.get(prop.name)
            if value is None:
                if prop.default is not None:
                    validated[prop.name] = prop.default
                elif not prop.optional:
                    raise ResourceValidationError(type_name, f"missing required property {prop.name}")
                continue
            validated[prop.name] = self._check_property(type_name, prop, value)
        return validated

    def _check_property(self, type_name: str, prop: LocalProperty, value: Any) -> Any:
        if prop.array:
            if not isinstance(value, list):
                raise ResourceValidationError(type_name, f"{prop.name} must be an array")
            return [self._check_value(type_name, prop, item) for item in value]
        return self._check_value(type_name, prop, value)

    def _check_value(self, type_name: str, prop: LocalProperty, value: Any) -> Any:
        def fail(expected: str) -> ResourceValidationError:
            return ResourceValidationError(type_name, f"{prop.name} must be {expected}, got {value!r}")

        if prop.relationship:
            if not isinstance(value, str):
                raise fail("an identifier string")
            return value

        if prop.enum:
            allowed = self._model_manager.enum_values(prop.type_name)
            if value not in allowed:
                raise fail(f"one of {', '.join(allowed)}")
            return value

        kind = prop.type_name
        if kind == "String":
            if not isinstance(value, str):
                raise fail("a string")
        elif kind == "Boolean":
            if not isinstance(value, bool):
                raise fail("a boolean")
        elif kind in ("Integer", "Long"):
            if isinstance(value, bool) or not isinstance(value, int):
                raise fail("an integer")
        elif kind == "Double":
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise fail("a number")
        elif kind == "DateTime":
            if not isinstance(value, str):
                raise fail("an ISO 8601 date-time")
            try:
                isoparse(value)
            except ValueError:
                raise fail("an ISO 8601 date-time") from None
        else:
            return self._check_concept(type_name, prop, value)
        return value

    def _check_concept(self, type_name: str, prop: LocalProperty, value: Any) -> dict[str, Any]:
        if not isinstance(value, dict):
            raise ResourceValidationError(type_name, f"{prop.name} must be an object")
        concept = self._model_manager.get_type(value.get(CLASS_KEY) or self._model_manager.qualify(prop.type_name))
        if type(concept) is not LocalClassDeclaration or concept.is_abstract():
            raise ResourceValidationError(
                type_name,
                f"{prop.name} must be a concrete concept, got {concept.get_fully_qualified_name()}",
            )
        nested = {k: v for k, v in value.items() if k != CLASS_KEY}
        return {CLASS_KEY: concept.get_fully_qualified_name(), **self._validate(concept, nested)}
