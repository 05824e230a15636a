"""
Type resolution for business network resources.

Maps a class declaration onto exactly one ResourceCategory.
Anything that is not an asset, participant or transaction declaration
is rejected with UnsupportedTypeError; there is no default category.
"""

from typing import Any

from bnconnector.domain.network.entities import ResourceCategory
from bnconnector.domain.network.errors import UnsupportedTypeError
from bnconnector.domain.network.ports import (
    AssetDeclaration,
    ParticipantDeclaration,
    TransactionDeclaration,
)

_CATEGORIES: tuple[tuple[type, ResourceCategory], ...] = (
    (AssetDeclaration, ResourceCategory.ASSET),
    (ParticipantDeclaration, ResourceCategory.PARTICIPANT),
    (TransactionDeclaration, ResourceCategory.TRANSACTION),
)


def resolve_category(declaration: Any, type_name: str | None = None) -> ResourceCategory:
    """Return the category of a class declaration.

    Args:
        declaration: The declaration returned by a model manager,
            introspector or resource.
        type_name: Name the caller asked for, used in the error message
            when the declaration cannot describe itself.

    Returns:
        The matching ResourceCategory.

    Raises:
        UnsupportedTypeError: If the declaration is none of the three
            supported kinds.
    """
    for declaration_type, category in _CATEGORIES:
        if isinstance(declaration, declaration_type):
            return category
    raise UnsupportedTypeError(type_name or type(declaration).__name__)


def has_identity(declaration: Any) -> bool:
    """Return True if the declaration exposes an identifying field.

    Stub entries that are not declarations at all have no identity.
    """
    getter = getattr(declaration, "get_identifier_field_name", None)
    if not callable(getter):
        return False
    return bool(getter())
