"""Autocomplete policy for the parcel intake form."""

from __future__ import annotations

from typing import Awaitable, Callable, Dict, List, Optional

from ..logging import get_logger
from . import service


LOG = get_logger("localdb-suggest")

MOBILE_MIN_CHARS = 3

FIELD_SENDER_MOBILE = "sender_mobile"
FIELD_RECEIVER_MOBILE = "receiver_mobile"
FIELD_SENDER_NAME = "sender_name"
FIELD_RECEIVER_NAME = "receiver_name"
FIELD_DESCRIPTION = "description"
FIELD_REMARK = "remark"

_SEARCHES: Dict[str, Callable[[str], Awaitable[List[str]]]] = {
    FIELD_SENDER_MOBILE: service.search_mobile_nos,
    FIELD_RECEIVER_MOBILE: service.search_mobile_nos,
    FIELD_SENDER_NAME: service.search_customer_names,
    FIELD_RECEIVER_NAME: service.search_customer_names,
    FIELD_DESCRIPTION: service.search_descriptions,
    FIELD_REMARK: service.search_remarks,
}

FIELDS = tuple(_SEARCHES)


def _below_threshold(field: str, value: str) -> bool:
    if field in (FIELD_SENDER_MOBILE, FIELD_RECEIVER_MOBILE):
        return len(value) < MOBILE_MIN_CHARS
    return not value.strip()


async def suggest(field: str, value: str) -> List[str]:
    """Return suggestions for ``value`` typed into form ``field``.

    Short input yields an empty list without touching the store.
    """
    search = _SEARCHES.get(field)
    if search is None:
        raise ValueError(f"Unknown suggestion field: {field}")
    if _below_threshold(field, value):
        return []
    return await search(value)


async def lookup_customer_name(mobile_no: str) -> Optional[str]:
    """Name to fill in once a mobile number field loses focus."""
    if not mobile_no:
        return None
    customer = await service.get_customer_by_mobile(mobile_no)
    return customer.customer_name if customer else None


class SuggestionFeed:
    """Per-form query tracker that drops superseded results.

    Each query is tagged with a per-field sequence number; a result that
    resolves after a newer query for the same field was issued comes back
    as ``None`` instead of overwriting the fresher suggestions.
    """

    def __init__(self) -> None:
        self._issued: Dict[str, int] = {}

    async def query(self, field: str, value: str) -> Optional[List[str]]:
        if field not in _SEARCHES:
            raise ValueError(f"Unknown suggestion field: {field}")
        seq = self._issued.get(field, 0) + 1
        self._issued[field] = seq
        result = await suggest(field, value)
        if self._issued[field] != seq:
            LOG.debug(f"Dropping stale {field} suggestions for {value!r} (seq {seq})")
            return None
        return result
