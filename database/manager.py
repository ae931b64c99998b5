"""数据库管理器 —— 统一门面（Facade）。

DatabaseManager 是 database 模块的统一入口，组合了所有子仓库，
提供两套 API：

1. **子仓库访问**（细粒度）：
   通过 ``db.customers``、``db.purchases`` 等属性直接访问子仓库，
   返回 ORM 对象，适合需要精细控制的场景。

2. **便捷方法**（粗粒度）：
   提供按记录类型操作的扁平化方法（如 ``list_records()``、
   ``create_record()``），返回字典，供记录存储层和上层业务代码使用。
"""
from typing import Optional, List, Dict, Any, Type

from sqlalchemy.orm import Session

from .connection import DatabaseConnection
from .entity_repos import CustomerRepository, ProductRepository
from .business_repos import (
    PurchaseRepository, AppointmentRepository, FinanceRepository
)
from .base_crud import BaseCRUD
from .models import (
    Base, Customer, Product, Purchase, Appointment, FinanceRecord
)


# 记录类型 → (ORM 模型, 默认排序字段)
MODELS: Dict[str, Type[Base]] = {
    "customers": Customer,
    "products": Product,
    "purchases": Purchase,
    "appointments": Appointment,
    "finance": FinanceRecord,
}

ORDER_FIELDS: Dict[str, str] = {
    "customers": "created_at",
    "products": "created_at",
    "purchases": "purchase_date",
    "appointments": "datetime",
    "finance": "date",
}


class DatabaseManager:
    """数据库管理器 —— 统一门面。

    Attributes:
        conn: 数据库连接管理器。
        customers: 顾客仓库。
        products: 商品仓库。
        purchases: 购买记录仓库。
        appointments: 预约记录仓库。
        finance: 收支流水仓库。

    Example::

        db = DatabaseManager("sqlite:///data/shop.db")
        db.create_tables()

        # 通过子仓库访问（返回 ORM 对象）
        active = db.products.get_active_products()

        # 通过便捷方法访问（返回字典）
        records = db.list_records("finance")
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        """初始化数据库管理器。

        Args:
            database_url: 数据库连接URL。如果为None则使用settings配置。
        """
        # 基础设施层
        self.conn = DatabaseConnection(database_url)

        # 实体仓库
        self.customers = CustomerRepository(self.conn)
        self.products = ProductRepository(self.conn)

        # 业务记录仓库
        self.purchases = PurchaseRepository(self.conn)
        self.appointments = AppointmentRepository(self.conn)
        self.finance = FinanceRepository(self.conn)

        self._repos: Dict[str, BaseCRUD] = {
            "customers": self.customers,
            "products": self.products,
            "purchases": self.purchases,
            "appointments": self.appointments,
            "finance": self.finance,
        }

    # ================================================================
    # 基础设施方法
    # ================================================================

    def create_tables(self) -> None:
        """创建所有数据库表（幂等操作）。"""
        self.conn.create_tables()

    def get_session(self) -> Session:
        """获取数据库会话。"""
        return self.conn.get_session()

    @property
    def database_url(self) -> str:
        """数据库连接URL。"""
        return self.conn.database_url

    @property
    def engine(self):
        """SQLAlchemy 引擎对象。"""
        return self.conn.engine

    def ping(self) -> None:
        """检查数据库是否可用，不可用时抛出异常。"""
        self.conn.ping()

    def close(self) -> None:
        """关闭数据库连接，释放所有资源。"""
        self.conn.close()

    # ================================================================
    # 按记录类型的便捷方法（返回字典）
    # ================================================================

    def _repo(self, kind: str) -> BaseCRUD:
        if kind not in self._repos:
            raise ValueError(f"Unknown record kind: {kind}")
        return self._repos[kind]

    def list_records(self, kind: str,
                     filters: Optional[Dict[str, Any]] = None
                     ) -> List[Dict[str, Any]]:
        """获取某类型的全部记录，按默认字段倒序。

        Args:
            kind: 记录类型（customers/products/purchases/appointments/finance）。
            filters: 等值过滤条件（可选）。

        Returns:
            记录字典列表。
        """
        repo = self._repo(kind)
        rows = repo.get_all(
            MODELS[kind], filters=filters, order_by=ORDER_FIELDS[kind]
        )
        return [repo.to_dict(r) for r in rows]

    def get_record(self, kind: str,
                   record_id: str) -> Optional[Dict[str, Any]]:
        """按ID获取记录，不存在返回 None。"""
        repo = self._repo(kind)
        return repo.to_dict(repo.get_by_id(MODELS[kind], record_id))

    def create_record(self, kind: str,
                      data: Dict[str, Any]) -> Dict[str, Any]:
        """新建记录（data 须已包含 id）。"""
        repo = self._repo(kind)
        return repo.to_dict(repo.create(MODELS[kind], **data))

    def update_record(self, kind: str, record_id: str,
                      changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """按ID更新记录，不存在返回 None。"""
        repo = self._repo(kind)
        return repo.to_dict(
            repo.update_by_id(MODELS[kind], record_id, **changes)
        )

    def delete_record(self, kind: str, record_id: str) -> bool:
        """按ID删除记录，返回是否删除成功。"""
        return self._repo(kind).delete_by_id(MODELS[kind], record_id)

    # ================================================================
    # 便捷查询方法
    # ================================================================

    def search_customers(self, keyword: str) -> List[Dict[str, Any]]:
        """按姓名或电话模糊搜索顾客。"""
        return [
            self.customers.to_dict(c) for c in self.customers.search(keyword)
        ]

    def get_finance_by_month(self, month_key: str) -> List[Dict[str, Any]]:
        """获取指定月份的收支记录（YYYY-MM）。"""
        return [
            self.finance.to_dict(r)
            for r in self.finance.get_by_month(month_key)
        ]


    def list_by_customer(self, kind: str,
                         customer_id: str) -> List[Dict[str, Any]]:
        """获取某顾客的购买或预约记录（purchases/appointments）。"""
        if kind == "purchases":
            rows = self.purchases.get_by_customer(customer_id)
        elif kind == "appointments":
            rows = self.appointments.get_by_customer(customer_id)
        else:
            raise ValueError(f"Unsupported record kind for customer lookup: {kind}")
        return [self._repo(kind).to_dict(r) for r in rows]
