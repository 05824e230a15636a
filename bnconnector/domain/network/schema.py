"""
ORM schema generation from class declarations.

Produces the LoopBack-compatible model descriptor the ORM host expects
from schema discovery. The field names, nesting and the fixed values
(``base``, ``idInjection``, ``options.validateUpsert``) must stay exactly
as emitted here.
"""

from typing import Any

from bnconnector.domain.network.ports import ClassDeclaration, Property
from bnconnector.domain.network.resolution import resolve_category

BASE_MODEL = "PersistedModel"
ID_DESCRIPTION = "The instance identifier for this type"

PRIMITIVE_TYPES = {
    "String": "string",
    "Boolean": "boolean",
    "DateTime": "date",
    "Double": "number",
    "Integer": "number",
    "Long": "number",
}


def property_type(prop: Property) -> str | list[str]:
    """Map a declared property type onto an ORM property type.

    Relationships are stored as identifiers and enums as their value
    names, so both map to strings. Non-primitive types are concepts.
    """
    if prop.is_relationship() or prop.is_enum():
        orm_type = "string"
    elif prop.is_primitive():
        orm_type = PRIMITIVE_TYPES.get(prop.get_type(), "string")
    else:
        orm_type = "object"
    return [orm_type] if prop.is_array() else orm_type


def property_schema(prop: Property, identifier_field: str | None) -> dict[str, Any]:
    """Build the ORM property descriptor for one declared property."""
    schema: dict[str, Any] = {
        "required": not prop.is_optional(),
        "type": property_type(prop),
    }
    if prop.get_name() == identifier_field:
        schema["description"] = ID_DESCRIPTION
        schema["id"] = True
        schema["required"] = True
    default = prop.get_default_value()
    if default is not None:
        schema["default"] = default
    return schema


def build_model_schema(declaration: ClassDeclaration, type_name: str | None = None) -> dict[str, Any]:
    """Build the ORM model descriptor for an asset, participant or transaction.

    Args:
        declaration: The declaration to describe.
        type_name: Name the caller asked for, used when reporting an
            unsupported declaration.

    Returns:
        A dict shaped as a LoopBack model definition.

    Raises:
        UnsupportedTypeError: If the declaration is of another kind.
    """
    category = resolve_category(declaration, type_name)
    fqn = declaration.get_fully_qualified_name()
    name = declaration.get_name()
    identifier_field = declaration.get_identifier_field_name()

    return {
        "acls": [],
        "base": BASE_MODEL,
        "description": f"{category.article} {category.value} named {name}",
        "idInjection": True,
        "methods": [],
        "name": name,
        "options": {"validateUpsert": True},
        "plural": fqn,
        "properties": {
            prop.get_name(): property_schema(prop, identifier_field)
            for prop in declaration.get_properties()
        },
        "relations": {},
        "validations": [],
    }
