"""业务记录仓库 —— 核心业务数据的数据访问层。

管理系统中的核心业务记录（购买记录、预约记录、收支流水），
这些记录是日常经营活动产生的交易数据。

关联的顾客、商品不做外键校验：记录可能引用已删除的顾客或商品，
统计时由上层按“未知”处理。
"""
from typing import Optional, List
from sqlalchemy.orm import Session

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import Purchase, Appointment, FinanceRecord


class PurchaseRepository(BaseCRUD):
    """购买记录 仓库。

    记录顾客购买的商品和数量，次卡余量由购买数量 × 商品单位次数计算。
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def get_by_customer(self, customer_id: str,
                        session: Optional[Session] = None
                        ) -> List[Purchase]:
        """获取顾客的全部购买记录，按购买日期倒序。"""
        return self.get_all(
            Purchase, filters={"customer_id": customer_id},
            order_by="purchase_date", session=session
        )


class AppointmentRepository(BaseCRUD):
    """预约记录 仓库。

    每条预约消耗一次对应商品的次数。
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def get_by_customer(self, customer_id: str,
                        session: Optional[Session] = None
                        ) -> List[Appointment]:
        """获取顾客的全部预约，按预约时间倒序。"""
        return self.get_all(
            Appointment, filters={"customer_id": customer_id},
            order_by="datetime", session=session
        )


class FinanceRepository(BaseCRUD):
    """收支流水 仓库。"""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def get_by_month(self, month_key: str,
                     session: Optional[Session] = None
                     ) -> List[FinanceRecord]:
        """获取指定月份的收支记录。

        Args:
            month_key: 月份，``YYYY-MM``，按日期字符串前缀匹配。

        Returns:
            收支记录列表，按日期倒序。
        """
        def _query(sess):
            return sess.query(FinanceRecord).filter(
                FinanceRecord.date.startswith(month_key)
            ).order_by(FinanceRecord.date.desc()).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)
