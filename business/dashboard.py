"""仪表盘汇总：从记录存储读取一次快照，组装首页所需的统计数据。"""
from datetime import date
from typing import Any, Dict, Optional

from loguru import logger

from store.base import RecordStore, StoreSnapshot
from .coercion import field
from .finance_summary import current_month_stats, recent_records


RECENT_FINANCE_LIMIT = 5


def build_dashboard(snapshot: StoreSnapshot,
                    today: Optional[date] = None) -> Dict[str, Any]:
    """根据快照计算仪表盘数据。

    Args:
        snapshot: 记录存储快照。
        today: 统计基准日，默认今天。

    Returns:
        包含以下键的字典：

        - ``customer_count``: 顾客总数
        - ``today_appointments``: 今日预约（按时间升序）
        - ``active_products``: 在售商品
        - ``month_stats``: 当月收支统计（驼峰键）
        - ``recent_finance``: 最近 5 条收支记录
    """
    today = today or date.today()
    day = today.isoformat()

    today_appointments = sorted(
        (a for a in snapshot.appointments
         if str(field(a, "datetime", "")).startswith(day)),
        key=lambda a: str(field(a, "datetime", "")),
    )
    active_products = [
        p for p in snapshot.products if field(p, "status") == "active"
    ]

    return {
        "customer_count": len(snapshot.customers),
        "today_appointments": today_appointments,
        "active_products": active_products,
        "month_stats": current_month_stats(snapshot.finance, today).to_dict(),
        "recent_finance": recent_records(snapshot.finance, RECENT_FINANCE_LIMIT),
    }


def load_dashboard(store: RecordStore,
                   today: Optional[date] = None) -> Dict[str, Any]:
    """从记录存储读取快照并计算仪表盘数据。"""
    dashboard = build_dashboard(store.snapshot(), today)
    logger.debug(
        f"仪表盘: {dashboard['customer_count']} 位顾客, "
        f"今日预约 {len(dashboard['today_appointments'])} 个"
    )
    return dashboard
