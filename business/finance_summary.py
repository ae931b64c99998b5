"""收支汇总 —— 按月统计与最近记录。

在已加载的收支记录上做月度汇总，供仪表盘和收支页面使用：
- 月度统计：收入合计、支出合计、净利润、记录条数
- 最近记录：按日期倒序取前 N 条
- 金额格式化：千分位分隔，不带货币符号

月份匹配按日期字符串前 7 位（YYYY-MM）比较，不做日历解析，
日期格式错误的记录只是匹配不上，不会导致整个统计失败。
"""
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .coercion import field, to_amount


INCOME = "income"
EXPENSE = "expense"


@dataclass(frozen=True)
class MonthlyStats:
    """月度收支统计。"""
    total_income: float = 0.0
    total_expense: float = 0.0
    net_profit: float = 0.0
    total_records: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """转换为前端使用的驼峰字段。"""
        return {
            "totalIncome": self.total_income,
            "totalExpense": self.total_expense,
            "netProfit": self.net_profit,
            "totalRecords": self.total_records,
        }


def month_key_of(value: Any) -> str:
    """取日期值的 YYYY-MM 前缀；date 对象先转 ISO 字符串。"""
    if value is None:
        return ""
    if isinstance(value, date):
        value = value.isoformat()
    return str(value)[:7]


def monthly_stats(records: Optional[Iterable[Any]],
                  month_key: str) -> MonthlyStats:
    """统计指定月份的收支。

    Args:
        records: 全部收支记录（None 视为空）。
        month_key: 月份，格式 ``YYYY-MM``。

    Returns:
        MonthlyStats。空输入返回全 0。
    """
    income = 0.0
    expense = 0.0
    count = 0
    for record in records or ():
        if month_key_of(field(record, "date")) != month_key:
            continue
        count += 1
        record_type = field(record, "type")
        if record_type == INCOME:
            income += to_amount(field(record, "amount"),
                                f"finance {field(record, 'id')}")
        elif record_type == EXPENSE:
            expense += to_amount(field(record, "amount"),
                                 f"finance {field(record, 'id')}")

    return MonthlyStats(
        total_income=income,
        total_expense=expense,
        net_profit=income - expense,
        total_records=count,
    )


def current_month_stats(records: Optional[Iterable[Any]],
                        today: Optional[date] = None) -> MonthlyStats:
    """统计当月收支（仪表盘使用）。"""
    today = today or date.today()
    return monthly_stats(records, today.strftime("%Y-%m"))


def monthly_breakdown(records: Optional[Iterable[Any]]
                      ) -> List[Dict[str, Any]]:
    """按月份分组统计，月份倒序。

    Returns:
        ``[{"month": "2024-03", "totalIncome": ..., ...}, ...]``
    """
    records = list(records or ())
    months = {
        month_key_of(field(r, "date"))
        for r in records
        if len(month_key_of(field(r, "date"))) == 7
    }
    result = []
    for month in sorted(months, reverse=True):
        stats = monthly_stats(records, month)
        result.append({"month": month, **stats.to_dict()})
    return result


def _date_text(record: Any) -> str:
    value = field(record, "date")
    if isinstance(value, date):
        return value.isoformat()
    return "" if value is None else str(value)


def recent_records(records: Optional[Iterable[Any]],
                   limit: int = 5) -> List[Any]:
    """取最近的 N 条收支记录。

    按日期倒序，同一日期保持原有相对顺序（稳定排序）；没有日期的记录排在最后。

    Args:
        records: 全部收支记录（None 视为空）。
        limit: 返回条数。

    Returns:
        记录列表（原对象，不复制）。
    """
    if limit <= 0:
        return []
    ordered = sorted(records or (), key=_date_text, reverse=True)
    # reverse=True 对相等元素仍保持原顺序，空日期自然排在最后
    return ordered[:limit]


def format_amount(value: Any) -> str:
    """金额千分位格式化，不带货币符号（单位由调用方追加）。

    Example::

        format_amount(1234567)    # "1,234,567"
        format_amount(1234.5)     # "1,234.5"
        format_amount("abc")      # "0"
    """
    amount = round(to_amount(value), 2)
    if amount == int(amount):
        return f"{int(amount):,}"
    return f"{amount:,.2f}".rstrip("0").rstrip(".")
