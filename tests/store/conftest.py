"""Fixtures for record store tests.

``any_store`` is parametrized over every local backend so the same
behavioural tests run against memory, JSON, CSV and SQL storage.
"""
import pytest

from store.csv_file import CsvFileStore
from store.json_file import JsonFileStore
from store.memory import MemoryStore
from store.sql import SqlStore


LOCAL_BACKENDS = ("memory", "json", "csv", "sql")


def build_store(backend, tmp_path):
    if backend == "memory":
        return MemoryStore()
    if backend == "json":
        return JsonFileStore(tmp_path / "json")
    if backend == "csv":
        return CsvFileStore(tmp_path / "csv")
    if backend == "sql":
        return SqlStore(database_url=f"sqlite:///{tmp_path / 'shop.db'}")
    raise ValueError(backend)


@pytest.fixture(params=LOCAL_BACKENDS)
def any_store(request, tmp_path):
    """Yield an empty store for each local backend."""
    store = build_store(request.param, tmp_path)
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def seeded_store(any_store):
    """Store with two customers, one product and three finance records."""
    kim = any_store.create("customers", {
        "name": "Kim Minji", "phone": "010-1111-2222", "skin_type": "dry",
    })
    lee = any_store.create("customers", {
        "name": "Lee Sora", "phone": "010-3333-4444",
    })
    facial = any_store.create("products", {
        "name": "Facial 3x", "price": 90000, "type": "voucher",
        "unit_count": 3,
    })
    for record_id, day, kind, amount in (
        ("f-1", "2024-03-01", "income", 1000),
        ("f-2", "2024-03-15", "expense", 400),
        ("f-3", "2024-04-01", "income", 9999),
    ):
        any_store.create("finance", {
            "id": record_id, "date": day, "type": kind,
            "title": f"record {record_id}", "amount": amount,
        })
    return any_store, {"kim": kim, "lee": lee, "facial": facial}
