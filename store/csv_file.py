"""CSV 文件存储后端。

每种记录类型对应 data_dir 下的一个逗号分隔文件（如 ``finance.csv``），
首行为驼峰命名的表头。收支文件的列顺序为
``id,date,type,title,amount,memo``，与早期的收支 CSV 服务保持兼容。

读取时数值列（price/amount/point/count/quantity/totalPrice）转换为数字，
无法解析的值按 0 处理并记录警告；空字符串视为缺失。
每次写入都会重写整个文件。
"""
import csv
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from loguru import logger

from business.coercion import to_amount
from .base import RecordStore, RecordStoreError
from .mapping import (
    CAMEL_MAPS, CUSTOMERS, PRODUCTS, PURCHASES, APPOINTMENTS, FINANCE
)


CSV_COLUMNS: Dict[str, Tuple[str, ...]] = {
    CUSTOMERS: ("id", "name", "phone", "birthDate", "skinType", "memo",
                "point", "createdAt", "updatedAt"),
    PRODUCTS: ("id", "name", "price", "type", "count", "status",
               "description"),
    PURCHASES: ("id", "customerId", "productId", "quantity", "purchaseDate",
                "totalPrice"),
    APPOINTMENTS: ("id", "customerId", "productId", "datetime", "memo",
                   "status"),
    FINANCE: ("id", "date", "type", "title", "amount", "memo"),
}

NUMERIC_COLUMNS = ("price", "amount", "point", "count", "quantity", "totalPrice")


def _parse_numeric(value: str, column: str) -> Union[int, float]:
    number = to_amount(value, f"csv column {column}")
    return int(number) if number == int(number) else number


class CsvFileStore(RecordStore):
    """CSV 文件记录存储。

    Attributes:
        data_dir: 数据目录，不存在时自动创建。
    """

    backend_name = "csv"

    def __init__(self, data_dir: Union[str, Path]) -> None:
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, kind: str) -> Path:
        return self.data_dir / f"{kind}.csv"

    def initialize(self) -> None:
        """为尚不存在的文件写入表头（幂等操作）。"""
        for kind in CSV_COLUMNS:
            path = self.path_for(kind)
            if not path.exists():
                self._write(kind, [])
                logger.info(f"CSV 文件初始化: {path}")

    def _read(self, kind: str) -> List[Dict[str, Any]]:
        path = self.path_for(kind)
        if not path.exists():
            return []
        field_map = CAMEL_MAPS[kind]
        records = []
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                for row in csv.DictReader(f, skipinitialspace=True):
                    if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
                        continue
                    records.append(field_map.from_storage(self._decode_row(row)))
        except (OSError, csv.Error) as e:
            logger.error(f"读取 CSV 文件失败 ({path}): {e}")
            raise RecordStoreError(f"Failed to read {path}: {e}") from e
        return records

    @staticmethod
    def _decode_row(row: Dict[str, Any]) -> Dict[str, Any]:
        decoded: Dict[str, Any] = {}
        for column, value in row.items():
            if column is None or not isinstance(value, str):
                continue
            column = column.strip()
            value = value.strip()
            if value == "":
                decoded[column] = None
            elif column in NUMERIC_COLUMNS:
                decoded[column] = _parse_numeric(value, column)
            else:
                decoded[column] = value
        return decoded

    def _write(self, kind: str, records: List[Dict[str, Any]]) -> None:
        path = self.path_for(kind)
        field_map = CAMEL_MAPS[kind]
        columns = CSV_COLUMNS[kind]
        tmp_path = path.with_suffix(".csv.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=columns,
                                        extrasaction="ignore",
                                        lineterminator="\n")
                writer.writeheader()
                for record in records:
                    row = field_map.to_storage(record)
                    writer.writerow({
                        c: "" if row.get(c) is None else row.get(c)
                        for c in columns
                    })
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"写入 CSV 文件失败 ({path}): {e}")
            raise RecordStoreError(f"Failed to write {path}: {e}") from e

    def _fetch_all(self, kind: str) -> List[Dict[str, Any]]:
        return self._read(kind)

    def _stored_view(self, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        # 只保留 CSV 中实际存在的列，保证返回值与再次读取的一致
        columns = set(CSV_COLUMNS[kind])
        field_map = CAMEL_MAPS[kind]
        return {
            key: value for key, value in record.items()
            if field_map.storage_name(key) in columns
        }

    def _insert(self, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        records = self._read(kind)
        records.append(record)
        self._write(kind, records)
        return self._stored_view(kind, record)

    def _update(self, kind: str, record_id: str,
                changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        records = self._read(kind)
        for record in records:
            if str(record.get("id")) == record_id:
                record.update(changes)
                self._write(kind, records)
                return self._stored_view(kind, record)
        return None

    def _delete(self, kind: str, record_id: str) -> bool:
        records = self._read(kind)
        remaining = [r for r in records if str(r.get("id")) != record_id]
        if len(remaining) == len(records):
            return False
        self._write(kind, remaining)
        return True

    def check_connection(self) -> Dict[str, Any]:
        if os.access(self.data_dir, os.W_OK):
            return {"connected": True, "backend": self.backend_name}
        return {
            "connected": False,
            "backend": self.backend_name,
            "error": f"Data directory is not writable: {self.data_dir}",
        }
