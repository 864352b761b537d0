from __future__ import annotations

import asyncio
import json
import threading
import time
from pathlib import Path

import pytest

from pms_localdb.store import service
from pms_localdb.store.constants import EXPORT_FILENAME
from pms_localdb.store.db import StoreMigrationError
from pms_localdb.store.models import Customer


def test_concurrent_first_use_shares_one_store(isolated_store: Path) -> None:
    async def _run():
        return await asyncio.gather(*(service.get_store() for _ in range(20)))

    stores = asyncio.run(_run())
    assert all(s is stores[0] for s in stores)
    assert stores[0].db_path == str(isolated_store)


def test_open_from_several_threads_shares_one_store(isolated_store: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    real_load = service.load_db_path

    def slow_load():
        time.sleep(0.05)
        return real_load()

    monkeypatch.setattr(service, "load_db_path", slow_load)
    barrier = threading.Barrier(4)
    futures = []

    def worker() -> None:
        barrier.wait()
        futures.append(service.open_store())

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    stores = {id(f.result()) for f in futures}
    assert len(futures) == 4
    assert len(stores) == 1


def test_store_is_reused_across_event_loops(isolated_store: Path) -> None:
    first = asyncio.run(service.get_store())
    second = asyncio.run(service.get_store(str(isolated_store.parent / "other.sqlite3")))
    assert first is second
    assert not (isolated_store.parent / "other.sqlite3").exists()


def test_upsert_then_search_then_overwrite() -> None:
    async def _run():
        await service.upsert_customer("Asha", "9876543210")
        found = await service.search_mobile_nos("987")
        await service.upsert_customer("Asha K", "9876543210")
        return found, await service.get_customer_by_mobile("9876543210")

    found, customer = asyncio.run(_run())
    assert found == ["9876543210"]
    assert customer == Customer(mobile_no="9876543210", customer_name="Asha K")


def test_not_found_on_empty_store() -> None:
    assert asyncio.run(service.get_customer_by_mobile("0000000000")) is None


def test_concurrent_writes_and_searches() -> None:
    async def _run():
        await asyncio.gather(
            *(service.upsert_customer(f"Customer {i}", f"98{i:08d}") for i in range(25)),
            *(service.add_description("Books") for _ in range(5)),
            service.search_customer_names("customer"),
        )
        return await service.get_all_customers(), await service.get_all_descriptions()

    customers, descriptions = asyncio.run(_run())
    assert len(customers) == 25
    assert descriptions == ["Books"]


def test_export_counts_match_collections(tmp_path: Path) -> None:
    async def _run():
        for i in range(3):
            await service.upsert_customer(f"C{i}", f"900000000{i}")
        await service.upsert_customer("C0 again", "9000000000")
        for text in ("Books", "Bags", "Books"):
            await service.add_description(text)
        for text in ("Urgent", "Fragile"):
            await service.add_remark(text)
        return await service.export_all(), await service.write_export(str(tmp_path / "out"))

    body, path = asyncio.run(_run())
    data = json.loads(body)
    assert len(data["customers"]) == 3
    assert data["customers"][0] == {"mobile_no": "9000000000", "customer_name": "C0 again"}
    assert data["descriptions"] == ["Books", "Bags"]
    assert data["remarks"] == ["Urgent", "Fragile"]
    assert Path(path).name == EXPORT_FILENAME
    assert json.loads(Path(path).read_text(encoding="utf-8")) == data


def test_failed_open_stays_failed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    monkeypatch.setenv("PMS_LOCAL_DB", str(blocker / "pms-db.sqlite3"))
    service.shutdown_store()

    with pytest.raises(StoreMigrationError):
        asyncio.run(service.upsert_customer("Asha", "9876543210"))
    # Fixing the cause does not help until the process restarts.
    blocker.unlink()
    with pytest.raises(StoreMigrationError):
        asyncio.run(service.get_all_customers())
