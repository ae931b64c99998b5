"""Shared fixtures for the whole test suite.

Provides a small esthetic-shop data set (customers, products, purchases,
appointments, finance records) as plain snake_case record dicts, and an
in-memory store pre-loaded with it.
"""
import pytest

from store.memory import MemoryStore


def make_shop_records():
    """Build a fresh, deterministic data set.

    - Kim bought 2 x "Facial 3x" (unit count 3) and has 4 appointments on it
    - Kim also bought 1 x "Lifting" whose product was later deleted
    - Lee has no purchases
    """
    return {
        "customers": [
            {"id": "c-kim", "name": "Kim Minji", "phone": "010-1111-2222",
             "birth_date": "1990-05-01", "skin_type": "dry", "memo": None,
             "point": 100, "created_at": "2024-01-01T09:00:00",
             "updated_at": "2024-01-01T09:00:00"},
            {"id": "c-lee", "name": "Lee Sora", "phone": "010-3333-4444",
             "birth_date": None, "skin_type": "oily", "memo": "VIP",
             "point": 0, "created_at": "2024-02-01T09:00:00",
             "updated_at": "2024-02-01T09:00:00"},
        ],
        "products": [
            {"id": "p-facial", "name": "Facial 3x", "price": 90000,
             "type": "voucher", "unit_count": 3, "status": "active",
             "description": None, "created_at": "2024-01-01T08:00:00",
             "updated_at": "2024-01-01T08:00:00"},
            {"id": "p-peel", "name": "Peeling", "price": 40000,
             "type": "single", "unit_count": 1, "status": "inactive",
             "description": "discontinued", "created_at": "2024-01-02T08:00:00",
             "updated_at": "2024-01-02T08:00:00"},
        ],
        "purchases": [
            {"id": "pu-1", "customer_id": "c-kim", "product_id": "p-facial",
             "quantity": 2, "purchase_date": "2024-03-01", "total_price": 180000,
             "created_at": "2024-03-01T10:00:00",
             "updated_at": "2024-03-01T10:00:00"},
            {"id": "pu-2", "customer_id": "c-kim", "product_id": "p-gone",
             "quantity": 1, "purchase_date": "2024-03-02", "total_price": 120000,
             "created_at": "2024-03-02T10:00:00",
             "updated_at": "2024-03-02T10:00:00"},
        ],
        "appointments": [
            {"id": f"a-{n}", "customer_id": "c-kim", "product_id": "p-facial",
             "datetime": f"2024-03-0{n}T14:00", "memo": None,
             "status": "completed",
             "created_at": "2024-03-01T10:00:00",
             "updated_at": "2024-03-01T10:00:00"}
            for n in range(1, 5)
        ],
        "finance": [
            {"id": "f-1", "date": "2024-03-01", "type": "income",
             "title": "Facial voucher", "amount": 1000, "memo": None},
            {"id": "f-2", "date": "2024-03-15", "type": "expense",
             "title": "Supplies", "amount": 400, "memo": "cream"},
            {"id": "f-3", "date": "2024-04-01", "type": "income",
             "title": "Lifting", "amount": 9999, "memo": None},
        ],
    }


@pytest.fixture
def shop_records():
    """Fresh copy of the sample data set."""
    return make_shop_records()


@pytest.fixture
def memory_store(shop_records):
    """MemoryStore pre-loaded with the sample data set."""
    return MemoryStore(shop_records)


@pytest.fixture
def empty_store():
    """Empty MemoryStore."""
    return MemoryStore()


@pytest.fixture
def loguru_messages():
    """Collect loguru messages (WARNING and above) emitted during a test."""
    from loguru import logger

    messages = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]),
        level="WARNING",
    )
    try:
        yield messages
    finally:
        logger.remove(handler_id)
