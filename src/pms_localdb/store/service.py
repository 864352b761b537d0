"""Process-wide async access to the local suggestion store.

The first ``get_store`` call schedules the open-and-migrate step on the
store's worker thread and memoises the resulting future; later and
concurrent callers await that same future, so the database is opened and
migrated at most once per process. A failed open stays memoised and every
later call re-raises it.

All SQLite work runs on the single worker thread that owns the connection.
"""

from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, TypeVar

from ..config import load_db_path
from ..logging import get_logger
from . import export
from .db import LocalStoreError, SuggestionDatabase
from .models import Customer


LOG = get_logger("localdb-service")

T = TypeVar("T")

_EXECUTOR = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pms-localdb")
_store_future: Optional["Future[SuggestionDatabase]"] = None
# Guards the check-and-assign of _store_future only; the open itself runs on _EXECUTOR.
_STORE_LOCK = threading.Lock()


def open_store(db_path: Optional[str] = None) -> "Future[SuggestionDatabase]":
    """Start opening the shared store (once) and return its memoised future."""
    global _store_future
    with _STORE_LOCK:
        if _store_future is None:
            path = db_path or load_db_path()
            LOG.debug(f"Opening local store at {path}")
            _store_future = _EXECUTOR.submit(SuggestionDatabase, path)
        elif db_path is not None:
            LOG.debug(f"Local store already opened; ignoring db_path={db_path}")
        return _store_future


async def get_store(db_path: Optional[str] = None) -> SuggestionDatabase:
    return await asyncio.wrap_future(open_store(db_path))


def shutdown_store() -> None:
    """Close the shared store and forget it; the next access reopens."""
    global _store_future
    with _STORE_LOCK:
        fut, _store_future = _store_future, None
    if fut is None:
        return
    try:
        db = fut.result()
    except LocalStoreError as exc:
        LOG.debug(f"Local store never opened ({exc}); nothing to close")
        return
    _EXECUTOR.submit(db.close).result()
    LOG.debug("Local store closed")


async def _run(fn: Callable[..., T], *args: Any) -> T:
    db = await get_store()
    return await asyncio.wrap_future(_EXECUTOR.submit(fn, db, *args))


# --------------- Customers ---------------
async def upsert_customer(name: Optional[str], mobile_no: str) -> Customer:
    return await _run(SuggestionDatabase.upsert_customer, name, mobile_no)


async def get_customer_by_mobile(mobile_no: str) -> Optional[Customer]:
    return await _run(SuggestionDatabase.get_customer_by_mobile, mobile_no)


async def get_all_customers() -> List[Customer]:
    return await _run(SuggestionDatabase.get_all_customers)


async def search_mobile_nos(partial: str) -> List[str]:
    return await _run(SuggestionDatabase.search_mobile_nos, partial)


async def search_customer_names(partial: str) -> List[str]:
    return await _run(SuggestionDatabase.search_customer_names, partial)


async def filter_customers(query: str) -> List[Customer]:
    return await _run(SuggestionDatabase.filter_customers, query)


# --------------- Descriptions & remarks ---------------
async def add_description(text: str) -> None:
    await _run(SuggestionDatabase.add_description, text)


async def add_remark(text: str) -> None:
    await _run(SuggestionDatabase.add_remark, text)


async def get_all_descriptions() -> List[str]:
    return await _run(SuggestionDatabase.get_all_descriptions)


async def get_all_remarks() -> List[str]:
    return await _run(SuggestionDatabase.get_all_remarks)


async def search_descriptions(partial: str) -> List[str]:
    return await _run(SuggestionDatabase.search_descriptions, partial)


async def search_remarks(partial: str) -> List[str]:
    return await _run(SuggestionDatabase.search_remarks, partial)


# --------------- Export ---------------
async def snapshot() -> Dict[str, List[Any]]:
    return await _run(export.snapshot)


async def export_all() -> str:
    return await _run(export.export_json)


async def write_export(directory: str) -> str:
    return await _run(export.write_export, directory)
