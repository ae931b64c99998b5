"""实体仓库 —— 基础实体的数据访问层。

管理系统中的基础实体（顾客、商品），
每个仓库继承 BaseCRUD 获得通用能力，并添加领域特定的查询方法。
"""
from typing import Optional, List
from sqlalchemy import or_
from sqlalchemy.orm import Session

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import Customer, Product


class CustomerRepository(BaseCRUD):
    """顾客 仓库。

    管理顾客基本信息：联系方式、生日、肤质、积分、备注。
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def search(self, keyword: str,
               session: Optional[Session] = None) -> List[Customer]:
        """按姓名或电话模糊搜索顾客（不区分大小写）。

        Args:
            keyword: 搜索关键词。

        Returns:
            匹配的顾客列表，按创建时间倒序。
        """
        def _query(sess):
            # % 与 _ 按字面匹配
            literal = (keyword.replace("\\", "\\\\")
                       .replace("%", "\\%").replace("_", "\\_"))
            pattern = f"%{literal}%"
            return sess.query(Customer).filter(
                or_(
                    Customer.name.ilike(pattern, escape="\\"),
                    Customer.phone.ilike(pattern, escape="\\")
                )
            ).order_by(Customer.created_at.desc()).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)


class ProductRepository(BaseCRUD):
    """商品 仓库。

    管理单次服务和次卡商品。
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def get_active_products(self,
                            session: Optional[Session] = None
                            ) -> List[Product]:
        """获取所有在售商品。"""
        return self.get_all(
            Product, filters={"status": "active"},
            order_by="created_at", session=session
        )
