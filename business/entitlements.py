"""次卡余量统计（顾客剩余可用次数）。

顾客购买次卡商品获得次数，每次预约消耗一次。本模块在已加载的
记录集合上计算每个商品的剩余次数，不做任何 I/O，也不缓存结果。

计算规则：
    剩余次数 = 购买数量合计 × 商品单位次数 − 该商品的预约次数

- 找不到对应商品的购买记录（商品已删除）直接跳过，无法展示名称
- 单位次数缺失时默认为 1
- remaining_sessions 只返回剩余次数大于 0 的商品；
  需要看到用完/超用情况时使用 entitlement_ledger
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional

from .coercion import field, to_count, to_unit_count


@dataclass(frozen=True)
class EntitlementBalance:
    """单个商品的次数台账。

    Attributes:
        product_id: 商品ID。
        product_name: 商品名称。
        purchased: 购买数量合计。
        unit_count: 每个购买单位包含的次数。
        granted: 获得的总次数（purchased × unit_count）。
        consumed: 已预约消耗的次数。
        remaining: 剩余次数，可能为 0 或负数。
    """
    product_id: str
    product_name: str
    purchased: int
    unit_count: int
    granted: int
    consumed: int
    remaining: int

    @property
    def overused(self) -> bool:
        """预约次数是否超过了购买获得的次数。"""
        return self.remaining < 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["overused"] = self.overused
        return data


def _key(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _purchased_by_product(customer_id: str,
                          purchases: Optional[Iterable[Any]]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for purchase in purchases or ():
        if _key(field(purchase, "customer_id")) != customer_id:
            continue
        product_id = _key(field(purchase, "product_id"))
        if product_id is None:
            continue
        quantity = to_count(field(purchase, "quantity", 0), "purchase.quantity")
        totals[product_id] = totals.get(product_id, 0) + quantity
    return totals


def _consumed_by_product(customer_id: str,
                         appointments: Optional[Iterable[Any]],
                         excluded_statuses: Iterable[str]) -> Dict[str, int]:
    excluded = set(excluded_statuses)
    counts: Dict[str, int] = {}
    for appointment in appointments or ():
        if _key(field(appointment, "customer_id")) != customer_id:
            continue
        if excluded and field(appointment, "status") in excluded:
            continue
        product_id = _key(field(appointment, "product_id"))
        if product_id is None:
            continue
        counts[product_id] = counts.get(product_id, 0) + 1
    return counts


def _index_products(products: Optional[Iterable[Any]]) -> Dict[str, Any]:
    return {
        _key(field(p, "id")): p
        for p in products or ()
        if field(p, "id") is not None
    }


def entitlement_ledger(customer_id: Any,
                       purchases: Optional[Iterable[Any]],
                       appointments: Optional[Iterable[Any]],
                       products: Optional[Iterable[Any]],
                       excluded_statuses: Iterable[str] = ()
                       ) -> List[EntitlementBalance]:
    """计算顾客每个已购商品的完整次数台账（含用完和超用）。

    Args:
        customer_id: 顾客ID。
        purchases: 全部购买记录（None 视为空）。
        appointments: 全部预约记录（None 视为空）。
        products: 全部商品记录（None 视为空）。
        excluded_statuses: 不计入消耗的预约状态，默认所有预约都消耗次数。

    Returns:
        台账列表，按商品在 purchases 中首次出现的顺序排列（store.list 返回的
        购买记录按购买日期倒序，即最新购买的商品在前）。购买数量为 0 或商品
        已不存在的条目被跳过。
    """
    customer_key = _key(customer_id)
    purchased = _purchased_by_product(customer_key, purchases)
    consumed = _consumed_by_product(customer_key, appointments, excluded_statuses)
    product_index = _index_products(products)

    ledger: List[EntitlementBalance] = []
    for product_id, quantity in purchased.items():
        if quantity == 0:
            continue
        product = product_index.get(product_id)
        if product is None:
            continue
        unit_count = to_unit_count(field(product, "unit_count"),
                                   f"product {product_id}")
        granted = quantity * unit_count
        used = consumed.get(product_id, 0)
        ledger.append(EntitlementBalance(
            product_id=product_id,
            product_name=str(field(product, "name", "")),
            purchased=quantity,
            unit_count=unit_count,
            granted=granted,
            consumed=used,
            remaining=granted - used,
        ))
    return ledger


def remaining_sessions(customer_id: Any,
                       purchases: Optional[Iterable[Any]],
                       appointments: Optional[Iterable[Any]],
                       products: Optional[Iterable[Any]],
                       excluded_statuses: Iterable[str] = ()
                       ) -> Dict[str, int]:
    """计算顾客每个商品的剩余次数，只保留剩余次数大于 0 的商品。

    Returns:
        商品ID → 剩余次数。没有购买记录的顾客返回空字典。
    """
    ledger = entitlement_ledger(
        customer_id, purchases, appointments, products, excluded_statuses
    )
    return {
        entry.product_id: entry.remaining
        for entry in ledger
        if entry.remaining > 0
    }


def format_remaining_sessions(remaining: Dict[str, int],
                              products: Optional[Iterable[Any]],
                              unit: str = "sessions",
                              separator: str = ", ") -> str:
    """把剩余次数渲染为 ``"<商品名>: <n> sessions"`` 的拼接字符串。"""
    product_index = _index_products(products)
    parts = []
    for product_id, count in remaining.items():
        product = product_index.get(_key(product_id))
        if product is None:
            continue
        parts.append(f"{field(product, 'name', '')}: {count} {unit}")
    return separator.join(parts)
