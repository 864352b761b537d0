from __future__ import annotations

from typing import Tuple

# Collection (table) names in the local store.
COLLECTION_CUSTOMERS = "customers"
COLLECTION_DESCRIPTIONS = "descriptions"
COLLECTION_REMARKS = "remarks"

COLLECTIONS: Tuple[str, ...] = (
    COLLECTION_CUSTOMERS,
    COLLECTION_DESCRIPTIONS,
    COLLECTION_REMARKS,
)

# Self-keyed string sets share one table shape.
VOCABULARY_COLLECTIONS: Tuple[str, ...] = (
    COLLECTION_DESCRIPTIONS,
    COLLECTION_REMARKS,
)

# Stored in PRAGMA user_version.
SCHEMA_VERSION = 2

EXPORT_FILENAME = "pms-local-data.json"
