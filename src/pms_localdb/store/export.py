from __future__ import annotations

import json
import os
from typing import Any, Dict, List

from ..logging import get_logger
from .constants import COLLECTION_CUSTOMERS, COLLECTION_DESCRIPTIONS, COLLECTION_REMARKS, EXPORT_FILENAME
from .db import SuggestionDatabase


LOG = get_logger("localdb-export")


def snapshot(db: SuggestionDatabase) -> Dict[str, List[Any]]:
    """Map every collection present in the store to its full record list.

    Collections are read one after another, not in a shared transaction.
    """
    readers = {
        COLLECTION_CUSTOMERS: lambda: [c.to_dict() for c in db.get_all_customers()],
        COLLECTION_DESCRIPTIONS: db.get_all_descriptions,
        COLLECTION_REMARKS: db.get_all_remarks,
    }
    data: Dict[str, List[Any]] = {}
    for name in db.present_collections():
        data[name] = readers[name]()
    return data


def export_json(db: SuggestionDatabase) -> str:
    return json.dumps(snapshot(db), ensure_ascii=False, indent=2)


def write_export(db: SuggestionDatabase, directory: str) -> str:
    """Write the JSON export to ``directory`` and return the file path."""
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(os.path.abspath(directory), EXPORT_FILENAME)
    payload = export_json(db)
    with open(path, "w", encoding="utf-8") as f:
        f.write(payload)
    LOG.info(f"Exported local store to {path}")
    return path
