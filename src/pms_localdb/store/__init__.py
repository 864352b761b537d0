"""Local suggestion store package.

An on-device SQLite store with three collections (customers, descriptions,
remarks) that drives autocomplete on the parcel intake form.

Modules:
- db: SQLite schema, versioned migrations and the synchronous store
- service: process-wide async accessor and store operations
- export: JSON snapshot of every collection
- sync: remote refresh and parcel-submission intake
- suggest: autocomplete thresholds and stale-result handling
"""

from .db import LocalStoreError, StoreMigrationError, SuggestionDatabase
from .models import Customer, ParcelSubmission
from .service import get_store, open_store, shutdown_store

__all__ = [
    "Customer",
    "LocalStoreError",
    "ParcelSubmission",
    "StoreMigrationError",
    "SuggestionDatabase",
    "get_store",
    "open_store",
    "shutdown_store",
]
