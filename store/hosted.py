"""托管表存储后端（PostgREST 风格的 REST 接口，如 Supabase）。

表名与记录类型一致，列名为 snake_case（商品单位次数列为 ``count``），
见 mapping.TABLE_MAPS。所有请求带 ``apikey`` 与 ``Authorization`` 头，
过滤条件使用 ``列=eq.值`` 语法。
"""
from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from .base import RecordStore, RecordStoreError, SORT_FIELDS
from .mapping import TABLE_MAPS, CUSTOMERS, PURCHASES, APPOINTMENTS


def _ilike_value(keyword: str) -> str:
    """关键词 → 带双引号的 ilike 过滤值。

    LIKE 通配符 ``%`` ``_`` 按字面匹配；双引号内的逗号、括号不再被当作
    过滤语法。
    """
    literal = (keyword.replace("\\", "\\\\")
               .replace("%", "\\%").replace("_", "\\_"))
    quoted = literal.replace("\\", "\\\\").replace('"', '\\"')
    return f'"*{quoted}*"'


class HostedTableStore(RecordStore):
    """托管表记录存储。

    Attributes:
        base_url: 服务地址，如 ``https://xyz.supabase.co``。
        api_key: 访问密钥。
        timeout: 单次请求超时秒数。
        session: HTTP 会话，测试中可注入假对象。
    """

    backend_name = "hosted"

    def __init__(self, base_url: str, api_key: str,
                 timeout: float = 30.0,
                 session: Optional[requests.Session] = None) -> None:
        if not base_url or not api_key:
            raise RecordStoreError("Missing hosted store url or key")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    # ================================================================
    # HTTP 基础
    # ================================================================

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _rest_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _request(self, method: str, table: str,
                 params: Optional[Dict[str, str]] = None,
                 json: Any = None,
                 prefer: Optional[str] = None) -> Any:
        """发送请求并解析 JSON 响应。

        Raises:
            RecordStoreError: 网络错误或非 2xx 响应。
        """
        try:
            response = self.session.request(
                method,
                self._rest_url(table),
                headers=self._headers(prefer),
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"[hosted] {method} {table} 请求失败: {e}")
            raise RecordStoreError(f"{method} {table} failed: {e}") from e

        if response.status_code >= 300:
            logger.error(
                f"[hosted] {method} {table} 返回 {response.status_code}: "
                f"{response.text}"
            )
            raise RecordStoreError(
                f"{method} {table} failed: {response.status_code} {response.text}"
            )
        if response.status_code == 204 or not response.text:
            return []
        return response.json()

    def _select(self, kind: str,
                filters: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        field_map = TABLE_MAPS[kind]
        params = {
            "select": "*",
            "order": f"{field_map.storage_name(SORT_FIELDS[kind])}.desc",
        }
        params.update(filters or {})
        rows = self._request("GET", kind, params=params)
        return [field_map.from_storage(row) for row in rows]

    # ================================================================
    # RecordStore 原语
    # ================================================================

    def _fetch_all(self, kind: str) -> List[Dict[str, Any]]:
        return self._select(kind)

    def get(self, kind: str, record_id: str) -> Optional[Dict[str, Any]]:
        self._check_kind(kind)
        rows = self._select(kind, {"id": f"eq.{record_id}"})
        return rows[0] if rows else None

    def _insert(self, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        field_map = TABLE_MAPS[kind]
        rows = self._request(
            "POST", kind, json=[field_map.to_storage(record)],
            prefer="return=representation",
        )
        if not rows:
            return dict(record)
        return field_map.from_storage(rows[0])

    def _update(self, kind: str, record_id: str,
                changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        field_map = TABLE_MAPS[kind]
        rows = self._request(
            "PATCH", kind, params={"id": f"eq.{record_id}"},
            json=field_map.to_storage(changes),
            prefer="return=representation",
        )
        if not rows:
            return None
        return field_map.from_storage(rows[0])

    def _delete(self, kind: str, record_id: str) -> bool:
        rows = self._request(
            "DELETE", kind, params={"id": f"eq.{record_id}"},
            prefer="return=representation",
        )
        return bool(rows)

    # ================================================================
    # 服务端过滤
    # ================================================================

    def search_customers(self, query: str) -> List[Dict[str, Any]]:
        keyword = (query or "").strip()
        if not keyword:
            return self.list(CUSTOMERS)
        value = _ilike_value(keyword)
        return self._select(CUSTOMERS, {
            "or": f"(name.ilike.{value},phone.ilike.{value})"
        })

    def list_by_customer(self, kind: str,
                         customer_id: str) -> List[Dict[str, Any]]:
        if kind not in (PURCHASES, APPOINTMENTS):
            return super().list_by_customer(kind, customer_id)
        return self._select(kind, {"customer_id": f"eq.{customer_id}"})

    def check_connection(self) -> Dict[str, Any]:
        try:
            self._request(
                "GET", CUSTOMERS, params={"select": "id", "limit": "1"}
            )
        except RecordStoreError as e:
            return {"connected": False, "backend": self.backend_name,
                    "error": str(e)}
        return {"connected": True, "backend": self.backend_name}

    def close(self) -> None:
        self.session.close()
