from __future__ import annotations

from pathlib import Path

import pytest

from pms_localdb.store.constants import SCHEMA_VERSION
from pms_localdb.store.db import LocalStoreError, SuggestionDatabase
from pms_localdb.store.models import Customer


def _open(tmp_path: Path) -> SuggestionDatabase:
    return SuggestionDatabase(str(tmp_path / "store" / "pms-db.sqlite3"))


def test_fresh_store_has_all_collections(tmp_path: Path) -> None:
    db = _open(tmp_path)
    assert db.schema_version == SCHEMA_VERSION
    assert db.present_collections() == ["customers", "descriptions", "remarks"]


def test_upsert_same_mobile_keeps_one_record_with_last_name(tmp_path: Path) -> None:
    db = _open(tmp_path)
    db.upsert_customer("Ravi", "9000000001")
    db.upsert_customer("Ravi Kumar", "9000000001")
    db.upsert_customer("Ravi K", "9000000001")

    customers = db.get_all_customers()
    assert customers == [Customer(mobile_no="9000000001", customer_name="Ravi K")]


def test_overwrite_keeps_insertion_position(tmp_path: Path) -> None:
    db = _open(tmp_path)
    db.upsert_customer("First", "111")
    db.upsert_customer("Second", "222")
    db.upsert_customer("First again", "111")

    assert [c.mobile_no for c in db.get_all_customers()] == ["111", "222"]
    assert db.get_all_customers()[0].customer_name == "First again"


def test_missing_customer_is_none(tmp_path: Path) -> None:
    db = _open(tmp_path)
    assert db.get_customer_by_mobile("0000000000") is None


def test_empty_name_is_stored(tmp_path: Path) -> None:
    db = _open(tmp_path)
    db.upsert_customer("", "9123456780")
    db.upsert_customer(None, "9123456781")
    assert db.get_customer_by_mobile("9123456780") == Customer("9123456780", "")
    assert db.get_customer_by_mobile("9123456781") == Customer("9123456781", "")


def test_mobile_prefix_versus_name_substring(tmp_path: Path) -> None:
    db = _open(tmp_path)
    db.upsert_customer("Ram Patel", "9998887771")
    db.upsert_customer("Shyam Ram", "8887776661")

    assert db.search_customer_names("ram") == ["Ram Patel", "Shyam Ram"]
    assert db.search_mobile_nos("999") == ["9998887771"]
    # digits in the middle do not count for mobile search
    assert db.search_mobile_nos("777") == []
    assert db.search_mobile_nos("") == ["9998887771", "8887776661"]


def test_filter_customers_matches_name_or_mobile(tmp_path: Path) -> None:
    db = _open(tmp_path)
    db.upsert_customer("Asha", "9876543210")
    db.upsert_customer("Bhavin", "9123400000")

    assert [c.customer_name for c in db.filter_customers("ASH")] == ["Asha"]
    assert [c.customer_name for c in db.filter_customers("2340")] == ["Bhavin"]


def test_descriptions_are_a_set(tmp_path: Path) -> None:
    db = _open(tmp_path)
    db.add_description("Books")
    db.add_description("Books")
    db.add_description("Bags")
    assert db.get_all_descriptions() == ["Books", "Bags"]


def test_descriptions_and_remarks_are_isolated(tmp_path: Path) -> None:
    db = _open(tmp_path)
    db.add_description("Fragile")
    db.add_remark("Handle with care")
    assert db.get_all_descriptions() == ["Fragile"]
    assert db.get_all_remarks() == ["Handle with care"]


def test_text_search_is_case_insensitive_prefix(tmp_path: Path) -> None:
    db = _open(tmp_path)
    for text in ("Books", "Notebooks", "bottles"):
        db.add_description(text)
        db.add_remark(text)

    assert db.search_descriptions("BO") == ["Books", "bottles"]
    assert db.search_remarks("bo") == ["Books", "bottles"]
    assert db.search_descriptions("") == ["Books", "Notebooks", "bottles"]


def test_empty_string_is_a_regular_value(tmp_path: Path) -> None:
    db = _open(tmp_path)
    db.add_remark("")
    db.add_remark("")
    assert db.get_all_remarks() == [""]


def test_data_survives_reopen(tmp_path: Path) -> None:
    db = _open(tmp_path)
    db.upsert_customer("Asha", "9876543210")
    db.add_description("Books")
    db.close()

    again = _open(tmp_path)
    assert again.get_customer_by_mobile("9876543210") == Customer("9876543210", "Asha")
    assert again.get_all_descriptions() == ["Books"]


def test_storage_failure_raises_local_store_error(tmp_path: Path) -> None:
    db = _open(tmp_path)
    db.close()
    with pytest.raises(LocalStoreError):
        db.upsert_customer("Asha", "9876543210")
    with pytest.raises(LocalStoreError):
        db.get_all_descriptions()
