"""SQL 表存储后端，基于 database.DatabaseManager（SQLAlchemy）。"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from business.coercion import to_amount, to_count, to_unit_count
from database import DatabaseManager
from .base import RecordStore, RecordStoreError
from .mapping import CUSTOMERS, PURCHASES, APPOINTMENTS


# 写入前需要转换为数值的列
_NUMERIC_FIELDS = ("price", "amount", "total_price")
_INTEGER_FIELDS = ("quantity", "point")
_TIMESTAMP_FIELDS = ("created_at", "updated_at")


def _to_columns(record: Dict[str, Any]) -> Dict[str, Any]:
    """内部记录 → 可直接写入 ORM 的列值。"""
    values = dict(record)
    for key in _NUMERIC_FIELDS:
        if values.get(key) is not None:
            values[key] = to_amount(values[key], key)
    for key in _INTEGER_FIELDS:
        if values.get(key) is not None:
            values[key] = to_count(values[key], key)
    if "unit_count" in values:
        values["unit_count"] = to_unit_count(values["unit_count"])
    for key in _TIMESTAMP_FIELDS:
        value = values.get(key)
        if isinstance(value, str):
            try:
                values[key] = datetime.fromisoformat(value)
            except ValueError:
                logger.warning(f"无法解析时间 {value!r}（{key}），使用默认值")
                values.pop(key)
    return values


class SqlStore(RecordStore):
    """SQL 表记录存储。

    Attributes:
        db: 数据库管理器。

    Example::

        store = SqlStore(database_url="sqlite:///data/shop.db")
        store.create("finance", {"date": "2024-03-01", "type": "income",
                                 "title": "facial", "amount": 50000})
    """

    backend_name = "sql"

    def __init__(self, database_url: Optional[str] = None,
                 db: Optional[DatabaseManager] = None) -> None:
        self.db = db or DatabaseManager(database_url)
        self.db.create_tables()
        logger.info(f"SQL 存储已就绪: {self.db.database_url}")

    def _call(self, action: str, func, *args):
        try:
            return func(*args)
        except SQLAlchemyError as e:
            logger.error(f"[sql] {action} 失败: {e}")
            raise RecordStoreError(f"{action} failed: {e}") from e

    def _fetch_all(self, kind: str) -> List[Dict[str, Any]]:
        return self._call(f"list {kind}", self.db.list_records, kind)

    def get(self, kind: str, record_id: str) -> Optional[Dict[str, Any]]:
        self._check_kind(kind)
        return self._call(
            f"get {kind}", self.db.get_record, kind, str(record_id)
        )

    def _insert(self, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        return self._call(
            f"create {kind}", self.db.create_record, kind, _to_columns(record)
        )

    def _update(self, kind: str, record_id: str,
                changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._call(
            f"update {kind}", self.db.update_record,
            kind, record_id, _to_columns(changes)
        )

    def _delete(self, kind: str, record_id: str) -> bool:
        return self._call(
            f"delete {kind}", self.db.delete_record, kind, record_id
        )

    def search_customers(self, query: str) -> List[Dict[str, Any]]:
        keyword = (query or "").strip()
        if not keyword:
            return self.list(CUSTOMERS)
        return self._call("search customers", self.db.search_customers, keyword)

    def list_by_customer(self, kind: str,
                         customer_id: str) -> List[Dict[str, Any]]:
        if kind not in (PURCHASES, APPOINTMENTS):
            return super().list_by_customer(kind, customer_id)
        return self._call(
            f"list {kind} by customer", self.db.list_by_customer,
            kind, str(customer_id)
        )

    def list_finance_by_month(self, month_key: str) -> List[Dict[str, Any]]:
        records = self._call(
            "list finance by month", self.db.get_finance_by_month, month_key
        )
        # 前缀查询后再按月份键精确比对
        return [r for r in records if str(r.get("date") or "")[:7] == month_key]

    def check_connection(self) -> Dict[str, Any]:
        try:
            self.db.ping()
        except SQLAlchemyError as e:
            logger.error(f"[sql] 连接检查失败: {e}")
            return {"connected": False, "backend": self.backend_name,
                    "error": str(e)}
        return {"connected": True, "backend": self.backend_name}

    def close(self) -> None:
        self.db.close()
