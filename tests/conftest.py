from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from pms_localdb.store import service


@pytest.fixture(autouse=True)
def isolated_store(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the shared store at a per-test file and close it afterwards."""
    db_path = tmp_path / "var" / "pms-db.sqlite3"
    monkeypatch.setenv("PMS_LOCAL_DB", str(db_path))
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_KEY", raising=False)
    service.shutdown_store()
    yield db_path
    service.shutdown_store()
