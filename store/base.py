"""记录存储抽象层 —— 统一的记录读写协议。

RecordStore 定义了所有存储后端（SQL 表、托管表、本地 JSON、CSV、内存）
共同遵守的接口。上层（Web 服务、仪表盘、汇总统计）只依赖此接口，
具体后端由配置选择，测试中可直接注入 MemoryStore。

核心概念：
- 记录（record）：snake_case 字段的普通字典
- 记录类型（kind）：customers / products / purchases / appointments / finance
- StoreSnapshot：一次性读取的全部集合，供汇总计算使用

子类只需实现 _fetch_all / _insert / _update / _delete / check_connection，
ID 分配、时间戳、默认值、排序和按条件过滤由基类统一处理。
"""
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from loguru import logger

from business.coercion import field as record_field, to_amount, to_count
from business.finance_summary import month_key_of
from .mapping import (
    CAMEL_MAPS, CUSTOMERS, PRODUCTS, PURCHASES, APPOINTMENTS, FINANCE,
    RECORD_KINDS,
)


class RecordStoreError(Exception):
    """存储后端读写失败。"""


class RecordNotFoundError(RecordStoreError):
    """按 ID 找不到记录。"""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} record not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class DuplicateRecordError(RecordStoreError):
    """指定的记录ID已存在。"""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} record already exists: {record_id}")
        self.kind = kind
        self.record_id = record_id


class UnknownRecordKindError(RecordStoreError, ValueError):
    """不支持的记录类型。"""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Unknown record kind: {kind}")
        self.kind = kind


# 列表默认排序字段（倒序）
SORT_FIELDS: Dict[str, str] = {
    CUSTOMERS: "created_at",
    PRODUCTS: "created_at",
    PURCHASES: "purchase_date",
    APPOINTMENTS: "datetime",
    FINANCE: "date",
}

# 新建记录时的默认值
DEFAULTS: Dict[str, Dict[str, Any]] = {
    CUSTOMERS: {"point": 0},
    PRODUCTS: {"type": "single", "unit_count": 1, "status": "active"},
    PURCHASES: {"quantity": 1},
    APPOINTMENTS: {"status": "scheduled"},
    FINANCE: {},
}

# 更新时不允许修改的字段
_IMMUTABLE_FIELDS = ("id", "created_at")


@dataclass
class StoreSnapshot:
    """某一时刻读取的全部记录集合。"""
    customers: List[Dict[str, Any]] = field(default_factory=list)
    products: List[Dict[str, Any]] = field(default_factory=list)
    purchases: List[Dict[str, Any]] = field(default_factory=list)
    appointments: List[Dict[str, Any]] = field(default_factory=list)
    finance: List[Dict[str, Any]] = field(default_factory=list)


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


def new_record_id() -> str:
    """生成新的记录ID。"""
    return str(uuid.uuid4())


class RecordStore(ABC):
    """记录存储抽象基类。

    Attributes:
        backend_name: 后端名称，用于日志和连接状态展示。
    """

    backend_name: str = "abstract"

    # ================================================================
    # 后端需要实现的原语
    # ================================================================

    @abstractmethod
    def _fetch_all(self, kind: str) -> List[Dict[str, Any]]:
        """读取某类型的全部记录（无排序要求）。"""

    @abstractmethod
    def _insert(self, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """写入一条已补全ID和时间戳的记录，返回存储后的记录。"""

    @abstractmethod
    def _update(self, kind: str, record_id: str,
                changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """按ID更新记录，返回更新后的记录；不存在返回 None。"""

    @abstractmethod
    def _delete(self, kind: str, record_id: str) -> bool:
        """按ID删除记录，返回是否删除成功。"""

    @abstractmethod
    def check_connection(self) -> Dict[str, Any]:
        """检查后端连接状态。

        Returns:
            ``{"connected": bool, "backend": str, "error": str(可选)}``
        """

    # ================================================================
    # 通用 CRUD
    # ================================================================

    @staticmethod
    def _check_kind(kind: str) -> None:
        if kind not in RECORD_KINDS:
            raise UnknownRecordKindError(kind)

    def list(self, kind: str) -> List[Dict[str, Any]]:
        """获取某类型的全部记录，按默认字段倒序。"""
        self._check_kind(kind)
        records = self._fetch_all(kind)
        sort_field = SORT_FIELDS[kind]
        return sorted(
            records,
            key=lambda r: str(r.get(sort_field) or ""),
            reverse=True,
        )

    def get(self, kind: str, record_id: str) -> Optional[Dict[str, Any]]:
        """按ID获取单条记录，不存在返回 None。"""
        self._check_kind(kind)
        for record in self._fetch_all(kind):
            if str(record.get("id")) == str(record_id):
                return record
        return None

    def create(self, kind: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """新建记录。

        自动补全ID、创建/更新时间和默认值；购买记录未给出总价时
        按商品单价 × 数量计算。

        Args:
            kind: 记录类型。
            data: 记录数据（snake_case 字段）。

        Returns:
            存储后的完整记录。

        Raises:
            DuplicateRecordError: 调用方给出的ID已被占用。
        """
        self._check_kind(kind)
        record = self._prepare_new(kind, data)
        if data.get("id") and self.get(kind, record["id"]) is not None:
            raise DuplicateRecordError(kind, record["id"])
        stored = self._insert(kind, record)
        logger.info(f"[{self.backend_name}] 新建 {kind} 记录: {stored.get('id')}")
        return stored

    def update(self, kind: str, record_id: str,
               changes: Dict[str, Any]) -> Dict[str, Any]:
        """按ID更新记录。

        Raises:
            RecordNotFoundError: 记录不存在。
        """
        self._check_kind(kind)
        allowed = CAMEL_MAPS[kind].internal_fields
        changes = {
            key: value for key, value in changes.items()
            if key in allowed and key not in _IMMUTABLE_FIELDS
        }
        changes["updated_at"] = _now()
        updated = self._update(kind, str(record_id), changes)
        if updated is None:
            raise RecordNotFoundError(kind, record_id)
        logger.info(f"[{self.backend_name}] 更新 {kind} 记录: {record_id}")
        return updated

    def delete(self, kind: str, record_id: str) -> None:
        """按ID删除记录。

        Raises:
            RecordNotFoundError: 记录不存在。
        """
        self._check_kind(kind)
        if not self._delete(kind, str(record_id)):
            raise RecordNotFoundError(kind, record_id)
        logger.info(f"[{self.backend_name}] 删除 {kind} 记录: {record_id}")

    def _prepare_new(self, kind: str, data: Dict[str, Any]) -> Dict[str, Any]:
        record = dict(DEFAULTS[kind])
        allowed = CAMEL_MAPS[kind].internal_fields
        record.update({
            k: v for k, v in data.items() if k in allowed and v is not None
        })
        record["id"] = str(record.get("id") or new_record_id())
        now = _now()
        record.setdefault("created_at", now)
        record.setdefault("updated_at", now)

        if kind == PURCHASES:
            record.setdefault("purchase_date", date.today().isoformat())
            if record.get("total_price") is None:
                product = self.get(PRODUCTS, record.get("product_id"))
                if product is not None:
                    record["total_price"] = (
                        to_amount(record_field(product, "price"), "product.price")
                        * to_count(record.get("quantity"), "purchase.quantity")
                    )
        return record

    # ================================================================
    # 条件查询
    # ================================================================

    def search_customers(self, query: str) -> List[Dict[str, Any]]:
        """按姓名或电话模糊搜索顾客（不区分大小写）。"""
        keyword = (query or "").strip().lower()
        customers = self.list(CUSTOMERS)
        if not keyword:
            return customers
        return [
            c for c in customers
            if keyword in str(c.get("name") or "").lower()
            or keyword in str(c.get("phone") or "").lower()
        ]

    def list_by_customer(self, kind: str,
                         customer_id: str) -> List[Dict[str, Any]]:
        """获取某顾客的购买或预约记录。"""
        if kind not in (PURCHASES, APPOINTMENTS):
            raise UnknownRecordKindError(kind)
        return [
            r for r in self.list(kind)
            if str(r.get("customer_id")) == str(customer_id)
        ]

    def list_finance_by_month(self, month_key: str) -> List[Dict[str, Any]]:
        """获取指定月份（YYYY-MM 前缀匹配）的收支记录。"""
        return [
            r for r in self.list(FINANCE)
            if month_key_of(r.get("date")) == month_key
        ]

    def snapshot(self) -> StoreSnapshot:
        """一次性读取全部集合。"""
        return StoreSnapshot(
            customers=self.list(CUSTOMERS),
            products=self.list(PRODUCTS),
            purchases=self.list(PURCHASES),
            appointments=self.list(APPOINTMENTS),
            finance=self.list(FINANCE),
        )

    def close(self) -> None:
        """释放后端资源（默认无操作）。"""
