"""Repository tests: BaseCRUD plus the entity and business repositories."""
from datetime import datetime

from database.models import Customer, FinanceRecord, Product
from tests.database.conftest import make_customer, make_product


class TestBaseCRUD:
    """Test BaseCRUD generic operations."""

    def test_create_ignores_unknown_columns(self, base_crud):
        customer = base_crud.create(Customer, id="c1", name="Kim", hobby="golf")
        assert customer.id == "c1"
        assert not hasattr(customer, "hobby")

    def test_column_defaults(self, base_crud):
        product = base_crud.create(Product, id="p1", name="Care")
        assert product.type == "single"
        assert product.unit_count == 1
        assert product.status == "active"
        assert isinstance(product.created_at, datetime)

    def test_get_all_filters_and_order(self, base_crud):
        for record_id, day in (("a", "2024-01-05"), ("b", "2024-01-09")):
            base_crud.create(FinanceRecord, id=record_id, date=day,
                             type="income", title=record_id, amount=1)
        rows = base_crud.get_all(FinanceRecord, order_by="date", descending=False)
        assert [r.id for r in rows] == ["a", "b"]
        rows = base_crud.get_all(FinanceRecord, filters={"id": "b"})
        assert [r.id for r in rows] == ["b"]

    def test_update_does_not_touch_id(self, base_crud):
        base_crud.create(Customer, id="c1", name="Kim")
        updated = base_crud.update_by_id(Customer, "c1", id="c2", name="Kim M")
        assert updated.id == "c1"
        assert updated.name == "Kim M"

    def test_external_session(self, base_crud, db_conn):
        with db_conn.get_session() as session:
            base_crud.create(Customer, session=session, id="c1", name="Kim")
            session.commit()
        assert base_crud.get_by_id(Customer, "c1").name == "Kim"

    def test_to_dict(self, base_crud, sample_datetime):
        product = base_crud.create(Product, id="p1", name="Care", price=1500,
                                   created_at=sample_datetime)
        data = base_crud.to_dict(product)
        assert data["price"] == 1500
        assert isinstance(data["price"], int)
        assert data["created_at"] == "2024-03-01T10:00:00"
        assert base_crud.to_dict(None) is None


class TestCustomerRepository:
    """Test CustomerRepository."""

    def test_search_case_insensitive(self, temp_db):
        make_customer(temp_db, "kim", name="Kim Minji")
        assert len(temp_db.customers.search("KIM")) == 1
        assert temp_db.customers.search("park") == []

    def test_search_wildcards_are_literal(self, temp_db):
        make_customer(temp_db, "lee", name="Lee Sora")
        make_customer(temp_db, "jo", name="Jo_Ara")
        assert [c.id for c in temp_db.customers.search("o_a")] == ["c-jo"]
        assert temp_db.customers.search("%") == []


class TestProductRepository:
    """Test ProductRepository."""

    def test_active_products(self, temp_db):
        make_product(temp_db, "a", status="inactive")
        make_product(temp_db, "b")
        active = temp_db.products.get_active_products()
        assert [p.id for p in active] == ["p-b"]


class TestBusinessRepositories:
    """Test purchase / appointment / finance repositories."""

    def test_purchases_by_customer(self, temp_db):
        kim = make_customer(temp_db, "kim")
        product = make_product(temp_db)
        temp_db.create_record("purchases", {"id": "pu1", "customer_id": kim,
                                            "product_id": product,
                                            "purchase_date": "2024-03-01"})
        temp_db.create_record("purchases", {"id": "pu2", "customer_id": kim,
                                            "product_id": product,
                                            "purchase_date": "2024-03-05"})
        assert [p.id for p in temp_db.purchases.get_by_customer(kim)] == ["pu2", "pu1"]

    def test_finance_by_month(self, temp_db):
        temp_db.create_record("finance", {"id": "f1", "date": "2024-03-10",
                                          "type": "income", "title": "t",
                                          "amount": 5})
        assert [r.id for r in temp_db.finance.get_by_month("2024-03")] == ["f1"]
        assert temp_db.finance.get_by_month("2024-04") == []
