"""内存存储后端，进程退出即丢失，主要用于测试和演示。"""
from typing import Any, Dict, List, Optional

from .base import RecordStore
from .mapping import RECORD_KINDS


class MemoryStore(RecordStore):
    """基于字典的内存记录存储。

    读出的记录都是副本，调用方修改返回值不会影响存储内容。

    Example::

        store = MemoryStore()
        customer = store.create("customers", {"name": "Kim", "phone": "010"})
        store.update("customers", customer["id"], {"point": 100})
    """

    backend_name = "memory"

    def __init__(self, initial: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> None:
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {
            kind: {} for kind in RECORD_KINDS
        }
        for kind, records in (initial or {}).items():
            self._check_kind(kind)
            for record in records:
                self._tables[kind][str(record["id"])] = dict(record)

    def _fetch_all(self, kind: str) -> List[Dict[str, Any]]:
        return [dict(r) for r in self._tables[kind].values()]

    def get(self, kind: str, record_id: str) -> Optional[Dict[str, Any]]:
        self._check_kind(kind)
        record = self._tables[kind].get(str(record_id))
        return dict(record) if record is not None else None

    def _insert(self, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        self._tables[kind][record["id"]] = dict(record)
        return dict(record)

    def _update(self, kind: str, record_id: str,
                changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        record = self._tables[kind].get(record_id)
        if record is None:
            return None
        record.update(changes)
        return dict(record)

    def _delete(self, kind: str, record_id: str) -> bool:
        return self._tables[kind].pop(record_id, None) is not None

    def check_connection(self) -> Dict[str, Any]:
        return {"connected": True, "backend": self.backend_name}
