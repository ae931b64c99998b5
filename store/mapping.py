"""字段名映射 —— 内部模型与外部存储命名之间的双向转换。

内部记录统一使用 snake_case 字段（``birth_date``、``unit_count``）。
外部有两套命名：

- 驼峰命名（camelCase）：本地 JSON/CSV 文件与 HTTP API 使用，
  如 ``birthDate``、``customerId``，商品单位次数为 ``count``
- 托管表命名：列名为 snake_case，但商品单位次数列为 ``count``

所有映射在此静态声明，转换函数不做任何字符串推导。
"""
from typing import Any, Dict, Iterable, Tuple


CUSTOMERS = "customers"
PRODUCTS = "products"
PURCHASES = "purchases"
APPOINTMENTS = "appointments"
FINANCE = "finance"

RECORD_KINDS: Tuple[str, ...] = (
    CUSTOMERS, PRODUCTS, PURCHASES, APPOINTMENTS, FINANCE
)


class FieldMap:
    """单个实体的字段映射表。

    Attributes:
        kind: 记录类型（customers/products/...）。
        pairs: ``(内部字段, 外部字段)`` 元组序列，顺序即外部列顺序。
    """

    def __init__(self, kind: str, pairs: Iterable[Tuple[str, str]]) -> None:
        self.kind = kind
        self.pairs: Tuple[Tuple[str, str], ...] = tuple(pairs)
        self._to_external: Dict[str, str] = dict(self.pairs)
        self._to_internal: Dict[str, str] = {
            external: internal for internal, external in self.pairs
        }

    @property
    def internal_fields(self) -> Tuple[str, ...]:
        return tuple(internal for internal, _ in self.pairs)

    @property
    def external_fields(self) -> Tuple[str, ...]:
        return tuple(external for _, external in self.pairs)

    def to_storage(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """内部记录 → 外部命名。未声明的字段被丢弃。"""
        return {
            self._to_external[key]: value
            for key, value in record.items()
            if key in self._to_external
        }

    def from_storage(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """外部行 → 内部记录。未声明的字段被丢弃。"""
        return {
            self._to_internal[key]: value
            for key, value in row.items()
            if key in self._to_internal
        }

    def storage_name(self, internal_field: str) -> str:
        """查询内部字段对应的外部字段名。"""
        return self._to_external[internal_field]


CAMEL_MAPS: Dict[str, FieldMap] = {
    CUSTOMERS: FieldMap(CUSTOMERS, (
        ("id", "id"),
        ("name", "name"),
        ("phone", "phone"),
        ("birth_date", "birthDate"),
        ("skin_type", "skinType"),
        ("memo", "memo"),
        ("point", "point"),
        ("created_at", "createdAt"),
        ("updated_at", "updatedAt"),
    )),
    PRODUCTS: FieldMap(PRODUCTS, (
        ("id", "id"),
        ("name", "name"),
        ("price", "price"),
        ("type", "type"),
        ("unit_count", "count"),
        ("status", "status"),
        ("description", "description"),
        ("created_at", "createdAt"),
        ("updated_at", "updatedAt"),
    )),
    PURCHASES: FieldMap(PURCHASES, (
        ("id", "id"),
        ("customer_id", "customerId"),
        ("product_id", "productId"),
        ("quantity", "quantity"),
        ("purchase_date", "purchaseDate"),
        ("total_price", "totalPrice"),
        ("created_at", "createdAt"),
        ("updated_at", "updatedAt"),
    )),
    APPOINTMENTS: FieldMap(APPOINTMENTS, (
        ("id", "id"),
        ("customer_id", "customerId"),
        ("product_id", "productId"),
        ("datetime", "datetime"),
        ("memo", "memo"),
        ("status", "status"),
        ("created_at", "createdAt"),
        ("updated_at", "updatedAt"),
    )),
    FINANCE: FieldMap(FINANCE, (
        ("id", "id"),
        ("date", "date"),
        ("type", "type"),
        ("title", "title"),
        ("amount", "amount"),
        ("memo", "memo"),
        ("created_at", "createdAt"),
        ("updated_at", "updatedAt"),
    )),
}


TABLE_MAPS: Dict[str, FieldMap] = {
    CUSTOMERS: FieldMap(CUSTOMERS, (
        ("id", "id"),
        ("name", "name"),
        ("phone", "phone"),
        ("birth_date", "birth_date"),
        ("skin_type", "skin_type"),
        ("memo", "memo"),
        ("point", "point"),
        ("created_at", "created_at"),
        ("updated_at", "updated_at"),
    )),
    PRODUCTS: FieldMap(PRODUCTS, (
        ("id", "id"),
        ("name", "name"),
        ("price", "price"),
        ("type", "type"),
        ("unit_count", "count"),
        ("status", "status"),
        ("description", "description"),
        ("created_at", "created_at"),
        ("updated_at", "updated_at"),
    )),
    PURCHASES: FieldMap(PURCHASES, (
        ("id", "id"),
        ("customer_id", "customer_id"),
        ("product_id", "product_id"),
        ("quantity", "quantity"),
        ("purchase_date", "purchase_date"),
        ("total_price", "total_price"),
        ("created_at", "created_at"),
        ("updated_at", "updated_at"),
    )),
    APPOINTMENTS: FieldMap(APPOINTMENTS, (
        ("id", "id"),
        ("customer_id", "customer_id"),
        ("product_id", "product_id"),
        ("datetime", "datetime"),
        ("memo", "memo"),
        ("status", "status"),
        ("created_at", "created_at"),
        ("updated_at", "updated_at"),
    )),
    FINANCE: FieldMap(FINANCE, (
        ("id", "id"),
        ("date", "date"),
        ("type", "type"),
        ("title", "title"),
        ("amount", "amount"),
        ("memo", "memo"),
        ("created_at", "created_at"),
        ("updated_at", "updated_at"),
    )),
}


def to_storage(kind: str, record: Dict[str, Any],
               maps: Dict[str, FieldMap] = CAMEL_MAPS) -> Dict[str, Any]:
    """内部记录转换为外部命名（默认驼峰）。"""
    return maps[kind].to_storage(record)


def from_storage(kind: str, row: Dict[str, Any],
                 maps: Dict[str, FieldMap] = CAMEL_MAPS) -> Dict[str, Any]:
    """外部行转换为内部记录（默认驼峰）。"""
    return maps[kind].from_storage(row)
