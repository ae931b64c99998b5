"""数值/字段容错读取。

记录来自托管表、本地文件或 CSV，字段可能缺失或不是合法数字。
汇总计算统一通过这里读取，坏数据降级为默认值并记录警告，不抛异常。
"""
import math
from typing import Any, Optional

from loguru import logger


def field(record: Any, name: str, default: Any = None) -> Any:
    """读取记录字段，兼容字典与对象（如 ORM 行）。

    Args:
        record: 字典或带属性的对象。
        name: 字段名。
        default: 字段缺失时的返回值。

    Returns:
        字段值；缺失或为 None 时返回 default。
    """
    if record is None:
        return default
    if isinstance(record, dict):
        value = record.get(name, default)
    else:
        value = getattr(record, name, default)
    return default if value is None else value


def _parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_amount(value: Any, context: str = "amount") -> float:
    """把金额/数量转换为数字，非法值按 0 处理并记录警告。

    Args:
        value: 原始值（数字、数字字符串、None 等）。
        context: 日志中用于定位的字段描述。

    Returns:
        浮点数；None/空串返回 0（不告警），非法值返回 0（告警）。
    """
    if value is None or value == "":
        return 0.0
    number = _parse_number(value)
    if number is None:
        logger.warning(f"非法数值 {value!r}（{context}），按 0 处理")
        return 0.0
    return number


def to_count(value: Any, context: str = "quantity") -> int:
    """把数量字段转换为整数，非法值按 0 处理。"""
    return int(to_amount(value, context))


def to_unit_count(value: Any, context: str = "unit_count") -> int:
    """读取商品的单位次数，缺失或为 0 时默认 1，非法值或负值按 1 处理并告警。"""
    if value is None or value == "":
        return 1
    number = _parse_number(value)
    if number is None or number < 0:
        logger.warning(f"非法单位次数 {value!r}（{context}），按 1 处理")
        return 1
    return int(number) or 1
