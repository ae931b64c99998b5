"""Fixtures for isolated database module tests.

Provides a fresh temp-file SQLite DatabaseManager for each test, plus
helpers that insert minimal rows.
"""
import os
import shutil
import tempfile
from datetime import datetime

import pytest

from database import DatabaseManager
from database.base_crud import BaseCRUD


@pytest.fixture
def temp_db():
    """Yield a fresh DatabaseManager bound to a temp SQLite database."""
    temp_dir = tempfile.mkdtemp(prefix="db-tests-")
    db_path = os.path.join(temp_dir, "test.db")
    manager = DatabaseManager(database_url=f"sqlite:///{db_path}")
    manager.create_tables()

    try:
        yield manager
    finally:
        manager.close()
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def db_conn(temp_db):
    """Yield a DatabaseConnection from the temp_db manager."""
    return temp_db.conn


@pytest.fixture
def base_crud(db_conn):
    """Yield a BaseCRUD instance."""
    return BaseCRUD(db_conn)


@pytest.fixture
def sample_datetime():
    """Stable datetime value for deterministic tests."""
    return datetime(2024, 3, 1, 10, 0, 0)


def make_customer(db, suffix="default", **fields):
    """Helper: create a customer and return its ID."""
    data = {"id": f"c-{suffix}", "name": f"Customer {suffix}",
            "phone": f"010-{suffix}"}
    data.update(fields)
    return db.create_record("customers", data)["id"]


def make_product(db, suffix="default", **fields):
    """Helper: create a product and return its ID."""
    data = {"id": f"p-{suffix}", "name": f"Product {suffix}",
            "price": 10000, "type": "voucher", "unit_count": 5}
    data.update(fields)
    return db.create_record("products", data)["id"]
