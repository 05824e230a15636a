"""
Query filters over serialized registry records.

Registries only enumerate whole collections, so ORM filters are applied
to the serialized records afterwards. Only top-level equality in
``where`` and ``skip``/``offset``/``limit`` paging are understood; other
filter keys are ignored. Record order is never changed.
"""

from typing import Any, Iterable, Optional

from bnconnector.domain.network.entities import RecordFilter
from bnconnector.domain.network.errors import InvalidFilterError


def _non_negative_int(value: Any, key: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidFilterError(f"'{key}' must be an integer, got {value!r}") from None
    if number < 0:
        raise InvalidFilterError(f"'{key}' must not be negative, got {number}")
    return number


def parse_filter(raw: Optional[dict[str, Any]]) -> RecordFilter:
    """Build a RecordFilter from a LoopBack-style filter object.

    Args:
        raw: The filter as received from the ORM host, or None.

    Returns:
        The parsed filter. An empty or unknown filter selects everything.

    Raises:
        InvalidFilterError: If ``where`` is not an object or paging values are
            not non-negative integers.
    """
    if not raw:
        return RecordFilter()

    where = raw.get("where") or {}
    if not isinstance(where, dict):
        raise InvalidFilterError("'where' must be an object")

    skip = 0
    for key in ("skip", "offset"):
        if raw.get(key) is not None:
            skip = _non_negative_int(raw[key], key)

    limit = None
    if raw.get("limit") is not None:
        limit = _non_negative_int(raw["limit"], "limit")

    return RecordFilter(where=dict(where), skip=skip, limit=limit)


def matches(record: dict[str, Any], where: dict[str, Any]) -> bool:
    """Return True if every ``where`` field equals the record's value."""
    return all(key in record and record[key] == value for key, value in where.items())


def apply_filter(
    records: Iterable[dict[str, Any]], record_filter: RecordFilter
) -> list[dict[str, Any]]:
    """Apply a RecordFilter to records, preserving their order."""
    selected = [r for r in records if matches(r, record_filter.where)]
    selected = selected[record_filter.skip:]
    if record_filter.limit is not None:
        selected = selected[: record_filter.limit]
    return selected
