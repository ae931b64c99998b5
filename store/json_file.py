"""本地 JSON 文件存储后端。

每种记录类型对应 data_dir 下的一个 JSON 数组文件（如 ``customers.json``），
字段使用驼峰命名，与浏览器端本地存储的数据格式一致，可以直接互相导入。
写入时先写临时文件再替换，避免中途失败留下半截文件。
"""
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from .base import RecordStore, RecordStoreError
from .mapping import CAMEL_MAPS


class JsonFileStore(RecordStore):
    """JSON 文件记录存储。

    Attributes:
        data_dir: 数据目录，不存在时自动创建。
    """

    backend_name = "json"

    def __init__(self, data_dir: Union[str, Path]) -> None:
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, kind: str) -> Path:
        return self.data_dir / f"{kind}.json"

    def _read(self, kind: str) -> List[Dict[str, Any]]:
        path = self.path_for(kind)
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                rows = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"读取 JSON 文件失败 ({path}): {e}")
            raise RecordStoreError(f"Failed to read {path}: {e}") from e
        if not isinstance(rows, list):
            raise RecordStoreError(f"{path} does not contain a JSON array")
        field_map = CAMEL_MAPS[kind]
        return [field_map.from_storage(row) for row in rows if isinstance(row, dict)]

    def _write(self, kind: str, records: List[Dict[str, Any]]) -> None:
        path = self.path_for(kind)
        field_map = CAMEL_MAPS[kind]
        rows = [field_map.to_storage(r) for r in records]
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(rows, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"写入 JSON 文件失败 ({path}): {e}")
            raise RecordStoreError(f"Failed to write {path}: {e}") from e

    def _fetch_all(self, kind: str) -> List[Dict[str, Any]]:
        return self._read(kind)

    def _insert(self, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        records = self._read(kind)
        records.append(record)
        self._write(kind, records)
        return dict(record)

    def _update(self, kind: str, record_id: str,
                changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        records = self._read(kind)
        for record in records:
            if str(record.get("id")) == record_id:
                record.update(changes)
                self._write(kind, records)
                return dict(record)
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
