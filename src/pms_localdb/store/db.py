from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from ..logging import get_logger
from .constants import (
    COLLECTION_CUSTOMERS,
    COLLECTION_DESCRIPTIONS,
    COLLECTION_REMARKS,
    COLLECTIONS,
    SCHEMA_VERSION,
    VOCABULARY_COLLECTIONS,
)
from .matching import prefix_match, prefix_match_ci, substring_match_ci
from .models import Customer


LOG = get_logger("localdb-db")


class LocalStoreError(Exception):
    """A read or write against the local store failed."""


class StoreMigrationError(LocalStoreError):
    """Opening or migrating the local store failed; the store is unusable."""


CUSTOMERS_SQL = """
CREATE TABLE IF NOT EXISTS customers (
  mobile_no      TEXT PRIMARY KEY,
  customer_name  TEXT NOT NULL DEFAULT ''
);
"""

VOCABULARY_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
  value  TEXT PRIMARY KEY
);
"""


class SuggestionDatabase:
    """SQLite-backed store for customer contacts, descriptions and remarks.

    - One connection per instance, opened in the constructor.
    - Runs pending schema migrations on open (see ``migrate``).
    - Full scans return rows in insertion order; an overwrite keeps the
      row's original position.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = os.path.abspath(db_path)
        try:
            os.makedirs(os.path.dirname(self.db_path), exist_ok=True)
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        except (OSError, sqlite3.Error) as exc:
            LOG.error(f"Could not open local store at {self.db_path}: {exc}")
            raise StoreMigrationError(f"Could not open local store at {self.db_path}: {exc}") from exc
        self.conn.row_factory = sqlite3.Row
        try:
            self.conn.execute("PRAGMA journal_mode=WAL;")
        except sqlite3.Error:
            # Non-fatal; rollback journal works too
            pass
        LOG.info(f"Local store path: {self.db_path}")
        try:
            self.migrate()
        except StoreMigrationError:
            self.conn.close()
            raise

    def close(self) -> None:
        self.conn.close()

    @contextmanager
    def _io(self, action: str, *, write: bool = False) -> Iterator[sqlite3.Cursor]:
        try:
            cur = self.conn.cursor()
            try:
                yield cur
                if write:
                    self.conn.commit()
            finally:
                cur.close()
        except sqlite3.Error as exc:
            if write:
                self._rollback()
            LOG.error(f"Local store {action} failed: {exc}")
            raise LocalStoreError(f"{action} failed: {exc}") from exc

    def _rollback(self) -> None:
        try:
            if self.conn.in_transaction:
                self.conn.rollback()
        except sqlite3.ProgrammingError:
            # Connection already closed
            pass

    # --------------- Schema versioning ---------------
    @property
    def schema_version(self) -> int:
        row = self.conn.execute("PRAGMA user_version;").fetchone()
        return int(row[0]) if row else 0

    def has_collection(self, name: str) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type='table' AND name=?;", (name,)
        ).fetchone()
        return row is not None

    def _migrations(self) -> Sequence[Tuple[int, Callable[[], None]]]:
        return (
            (1, self._migrate_v1_customers),
            (2, self._migrate_v2_vocabularies),
        )

    def migrate(self) -> List[int]:
        """Apply every migration step newer than the stored schema version.

        Each step only creates what is missing and commits together with its
        version bump, so re-running is a no-op. Returns the applied versions.
        """
        applied: List[int] = []
        try:
            current = self.schema_version
            if current > SCHEMA_VERSION:
                raise StoreMigrationError(
                    f"Local store version {current} is newer than supported version {SCHEMA_VERSION}"
                )
            for version, step in self._migrations():
                if version <= current:
                    continue
                LOG.info(f"Migrating local store to version {version}")
                self.conn.execute("BEGIN IMMEDIATE;")
                try:
                    step()
                    self.conn.execute(f"PRAGMA user_version = {int(version)};")
                    self.conn.commit()
                except sqlite3.Error:
                    self.conn.rollback()
                    raise
                applied.append(version)
        except sqlite3.Error as exc:
            LOG.exception("Local store migration failed")
            raise StoreMigrationError(f"Local store migration failed: {exc}") from exc
        if not applied:
            LOG.debug(f"Local store already at version {current}")
        return applied

    def _migrate_v1_customers(self) -> None:
        if not self.has_collection(COLLECTION_CUSTOMERS):
            self.conn.execute(CUSTOMERS_SQL)
            return
        self._rename_legacy_customer_columns()

    def _rename_legacy_customer_columns(self) -> None:
        # Earliest version-1 stores keyed customers by phone/name.
        columns = [row[1] for row in self.conn.execute("PRAGMA table_info(customers);").fetchall()]
        if "phone" in columns and "mobile_no" not in columns:
            LOG.info("Renaming legacy customers.phone column to mobile_no")
            self.conn.execute("ALTER TABLE customers RENAME COLUMN phone TO mobile_no;")
        if "name" in columns and "customer_name" not in columns:
            LOG.info("Renaming legacy customers.name column to customer_name")
            self.conn.execute("ALTER TABLE customers RENAME COLUMN name TO customer_name;")

    def _migrate_v2_vocabularies(self) -> None:
        if self.has_collection(COLLECTION_CUSTOMERS):
            self._rename_legacy_customer_columns()
        for table in VOCABULARY_COLLECTIONS:
            if not self.has_collection(table):
                self.conn.execute(VOCABULARY_SQL.format(table=table))

    def present_collections(self) -> List[str]:
        with self._io("list collections") as cur:
            cur.execute("SELECT name FROM sqlite_master WHERE type='table';")
            names = {row[0] for row in cur.fetchall()}
        return [name for name in COLLECTIONS if name in names]

    # --------------- Customers ---------------
    def upsert_customer(self, name: Optional[str], mobile_no: str) -> Customer:
        customer = Customer(mobile_no=str(mobile_no), customer_name="" if name is None else str(name))
        with self._io("upsert customer", write=True) as cur:
            cur.execute(
                """
                INSERT INTO customers (mobile_no, customer_name)
                VALUES (?, ?)
                ON CONFLICT(mobile_no) DO UPDATE SET customer_name=excluded.customer_name;
                """,
                (customer.mobile_no, customer.customer_name),
            )
        return customer

    def get_customer_by_mobile(self, mobile_no: str) -> Optional[Customer]:
        with self._io("customer lookup") as cur:
            cur.execute(
                "SELECT mobile_no, customer_name FROM customers WHERE mobile_no = ?;",
                (str(mobile_no),),
            )
            row = cur.fetchone()
        if row is None:
            return None
        return Customer(mobile_no=row["mobile_no"], customer_name=row["customer_name"])

    def get_all_customers(self) -> List[Customer]:
        with self._io("customer scan") as cur:
            cur.execute("SELECT mobile_no, customer_name FROM customers ORDER BY rowid;")
            rows = cur.fetchall()
        return [Customer(mobile_no=row["mobile_no"], customer_name=row["customer_name"]) for row in rows]

    def search_mobile_nos(self, partial: str) -> List[str]:
        return [c.mobile_no for c in self.get_all_customers() if prefix_match(c.mobile_no, partial)]

    def search_customer_names(self, partial: str) -> List[str]:
        return [c.customer_name for c in self.get_all_customers() if substring_match_ci(c.customer_name, partial)]

    def filter_customers(self, query: str) -> List[Customer]:
        """Customers whose name or mobile number contains ``query`` (any case)."""
        return [
            c
            for c in self.get_all_customers()
            if substring_match_ci(c.customer_name, query) or substring_match_ci(c.mobile_no, query)
        ]

    # --------------- Descriptions & remarks ---------------
    def _add_value(self, table: str, value: str) -> None:
        if table not in VOCABULARY_COLLECTIONS:
            raise ValueError(f"Unsupported collection: {table}")
        with self._io(f"add to {table}", write=True) as cur:
            cur.execute(
                f"INSERT INTO {table} (value) VALUES (?) ON CONFLICT(value) DO NOTHING;",
                (str(value),),
            )

    def _all_values(self, table: str) -> List[str]:
        if table not in VOCABULARY_COLLECTIONS:
            raise ValueError(f"Unsupported collection: {table}")
        with self._io(f"{table} scan") as cur:
            cur.execute(f"SELECT value FROM {table} ORDER BY rowid;")
            return [row[0] for row in cur.fetchall()]

    def add_description(self, text: str) -> None:
        self._add_value(COLLECTION_DESCRIPTIONS, text)

    def add_remark(self, text: str) -> None:
        self._add_value(COLLECTION_REMARKS, text)

    def get_all_descriptions(self) -> List[str]:
        return self._all_values(COLLECTION_DESCRIPTIONS)

    def get_all_remarks(self) -> List[str]:
        return self._all_values(COLLECTION_REMARKS)

    def search_descriptions(self, partial: str) -> List[str]:
        return [d for d in self.get_all_descriptions() if prefix_match_ci(d, partial)]

    def search_remarks(self, partial: str) -> List[str]:
        return [r for r in self.get_all_remarks() if prefix_match_ci(r, partial)]
