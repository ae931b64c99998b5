"""Web 服务 - 门店记录管理 HTTP API

基于 FastAPI 提供门店后台接口，所有 JSON 字段使用驼峰命名
（``customerId``、``birthDate``、商品单位次数为 ``count``）。

路由：
- GET/POST        /api/finance               → 收支流水（兼容早期 CSV 收支服务）
- PUT/DELETE      /api/finance/{id}
- GET             /api/finance/stats?month=  → 月度收支统计
- GET             /api/finance/monthly       → 按月汇总
- GET             /api/finance/recent?limit= → 最近收支
- GET/POST        /api/customers?q=          → 顾客（q 按姓名/电话搜索）
- GET/PUT/DELETE  /api/customers/{id}
- GET             /api/customers/{id}/entitlements → 剩余次数
- 同上            /api/products、/api/purchases、/api/appointments
                  （购买与预约支持 ?customerId= 过滤）
- GET             /api/dashboard             → 仪表盘数据
- GET             /api/status                → 存储连接状态
- GET             /health                    → 健康检查

使用方式：
    ```python
    server = WebServer(store=create_store(), port=3001)
    await server.startup()
    ```
"""
import asyncio
import threading
from datetime import date
from typing import Any, Dict, List, Optional

from loguru import logger

from business.dashboard import load_dashboard
from business.entitlements import (
    EntitlementBalance, entitlement_ledger, format_remaining_sessions,
    remaining_sessions,
)
from business.finance_summary import (
    current_month_stats, monthly_breakdown, monthly_stats, recent_records
)
from config.business_config import (
    APPOINTMENT_STATUSES, FINANCE_TYPES, PRODUCT_STATUSES, PRODUCT_TYPES,
    SKIN_TYPES, business_config,
)
from store.base import (
    DuplicateRecordError, RecordNotFoundError, RecordStore, RecordStoreError,
)
from store.mapping import (
    CAMEL_MAPS, CUSTOMERS, PRODUCTS, PURCHASES, APPOINTMENTS, FINANCE
)


# 新建时必填的字段（驼峰命名）
REQUIRED_FIELDS: Dict[str, tuple] = {
    CUSTOMERS: ("name",),
    PRODUCTS: ("name", "price"),
    PURCHASES: ("customerId", "productId"),
    APPOINTMENTS: ("customerId", "productId", "datetime"),
    FINANCE: ("date", "type", "title", "amount"),
}

# 取值受限的字段
ALLOWED_VALUES: Dict[str, Dict[str, tuple]] = {
    CUSTOMERS: {"skinType": SKIN_TYPES},
    PRODUCTS: {"type": PRODUCT_TYPES, "status": PRODUCT_STATUSES},
    PURCHASES: {},
    APPOINTMENTS: {"status": APPOINTMENT_STATUSES},
    FINANCE: {"type": FINANCE_TYPES},
}


class RequestError(Exception):
    """请求参数错误（返回 400）。"""


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_payload(kind: str, data: Dict[str, Any],
                     partial: bool = False) -> None:
    """检查请求体的必填字段和枚举取值。

    Args:
        kind: 记录类型。
        data: 驼峰命名的请求体。
        partial: 是否为部分更新（更新时不检查必填字段）。

    Raises:
        RequestError: 缺少必填字段或取值非法。
    """
    if not partial:
        missing = [name for name in REQUIRED_FIELDS[kind]
                   if _missing(data.get(name))]
        if missing:
            raise RequestError(f"Missing required fields: {', '.join(missing)}")
    for name, allowed in ALLOWED_VALUES[kind].items():
        value = data.get(name)
        if value is not None and value not in allowed:
            raise RequestError(
                f"Invalid {name}: {value} (choose from {', '.join(allowed)})"
            )


def to_json(kind: str, record: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """内部记录 → 驼峰 JSON。"""
    if record is None:
        return None
    return CAMEL_MAPS[kind].to_storage(record)


def to_json_list(kind: str, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [CAMEL_MAPS[kind].to_storage(r) for r in records]


def ledger_json(entry: EntitlementBalance) -> Dict[str, Any]:
    return {
        "productId": entry.product_id,
        "productName": entry.product_name,
        "purchased": entry.purchased,
        "unitCount": entry.unit_count,
        "granted": entry.granted,
        "consumed": entry.consumed,
        "remaining": entry.remaining,
        "overused": entry.overused,
    }


class WebServer:
    """门店记录管理 Web 服务

    Attributes:
        store: 记录存储后端。
        host: 监听地址。
        port: 监听端口。
        app: FastAPI 应用（构造时创建，测试可直接用 TestClient 访问）。
    """

    def __init__(
        self,
        store: RecordStore,
        host: str = "0.0.0.0",
        port: int = 3001,
    ):
        self.store = store
        self.host = host
        self.port = port
        self.running = False
        self.app = self._create_app()
        self._server_thread: Optional[threading.Thread] = None
        self._server = None  # uvicorn.Server 实例
        self._server_loop = None  # 服务器事件循环

    def _create_app(self):
        """创建 FastAPI 应用"""
        from fastapi import FastAPI, Request
        from fastapi.responses import JSONResponse

        app = FastAPI(
            title="门店记录管理",
            description="顾客、商品、购买、预约与收支记录 API",
            version="1.0.0",
        )
        store = self.store

        # ==================== 异常处理 ====================

        @app.exception_handler(RequestError)
        async def request_error_handler(request: Request, exc: RequestError):
            return JSONResponse(status_code=400, content={"error": str(exc)})

        @app.exception_handler(RecordNotFoundError)
        async def not_found_handler(request: Request, exc: RecordNotFoundError):
            return JSONResponse(status_code=404, content={"error": str(exc)})

        @app.exception_handler(DuplicateRecordError)
        async def duplicate_handler(request: Request, exc: DuplicateRecordError):
            return JSONResponse(status_code=409, content={"error": str(exc)})

        @app.exception_handler(RecordStoreError)
        async def store_error_handler(request: Request, exc: RecordStoreError):
            logger.error(f"{request.method} {request.url.path} 存储出错: {exc}")
            return JSONResponse(status_code=500, content={"error": str(exc)})

        # ==================== 系统 ====================

        @app.get("/health")
        async def health():
            """健康检查"""
            return {"status": "ok", "backend": store.backend_name}

        @app.get("/api/status")
        async def status():
            """存储连接状态"""
            return store.check_connection()

        # ==================== 收支统计（须在 /api/finance/{id} 之前注册） ====================

        @app.get("/api/finance/stats")
        async def finance_stats(month: Optional[str] = None):
            """月度收支统计，默认当月"""
            records = store.list(FINANCE)
            if month:
                stats = monthly_stats(records, month)
            else:
                month = date.today().strftime("%Y-%m")
                stats = current_month_stats(records)
            return {"month": month, **stats.to_dict()}

        @app.get("/api/finance/monthly")
        async def finance_monthly():
            """按月汇总（月份倒序）"""
            return monthly_breakdown(store.list(FINANCE))

        @app.get("/api/finance/recent")
        async def finance_recent(limit: int = 5):
            """最近的收支记录"""
            return to_json_list(FINANCE, recent_records(store.list(FINANCE), limit))

        # ==================== 顾客剩余次数 ====================

        @app.get("/api/customers/{customer_id}/entitlements")
        async def customer_entitlements(customer_id: str,
                                        excludeStatuses: Optional[str] = None):
            """顾客的剩余次数、展示文本和完整台账"""
            if store.get(CUSTOMERS, customer_id) is None:
                raise RecordNotFoundError(CUSTOMERS, customer_id)
            excluded = tuple(
                s.strip() for s in (excludeStatuses or "").split(",") if s.strip()
            )
            purchases = store.list_by_customer(PURCHASES, customer_id)
            appointments = store.list_by_customer(APPOINTMENTS, customer_id)
            products = store.list(PRODUCTS)

            remaining = remaining_sessions(
                customer_id, purchases, appointments, products, excluded
            )
            ledger = entitlement_ledger(
                customer_id, purchases, appointments, products, excluded
            )
            return {
                "customerId": customer_id,
                "remaining": remaining,
                "text": format_remaining_sessions(
                    remaining, products, unit=business_config.get_session_unit()
                ),
                "ledger": [ledger_json(entry) for entry in ledger],
            }

        # ==================== 记录 CRUD ====================

        for kind in (FINANCE, CUSTOMERS, PRODUCTS, PURCHASES, APPOINTMENTS):
            self._register_crud(app, kind)

        # ==================== 仪表盘 ====================

        @app.get("/api/dashboard")
        async def dashboard():
            """仪表盘概览数据"""
            data = load_dashboard(store)
            return {
                "customerCount": data["customer_count"],
                "todayAppointments": to_json_list(
                    APPOINTMENTS, data["today_appointments"]
                ),
                "activeProducts": to_json_list(PRODUCTS, data["active_products"]),
                "monthStats": data["month_stats"],
                "recentFinance": to_json_list(FINANCE, data["recent_finance"]),
                "currencyUnit": business_config.get_shop_profile().get("currency_unit"),
            }

        return app

    def _register_crud(self, app, kind: str) -> None:
        """为一种记录类型注册列表/详情/新建/更新/删除路由"""
        from fastapi import Request

        store = self.store
        field_map = CAMEL_MAPS[kind]
        base = f"/api/{kind}"

        async def list_records(request: Request):
            query = request.query_params
            if kind == CUSTOMERS and query.get("q"):
                records = store.search_customers(query["q"])
            elif kind in (PURCHASES, APPOINTMENTS) and query.get("customerId"):
                records = store.list_by_customer(kind, query["customerId"])
            elif kind == FINANCE and query.get("month"):
                records = store.list_finance_by_month(query["month"])
            else:
                records = store.list(kind)
            return to_json_list(kind, records)

        async def get_record(record_id: str):
            record = store.get(kind, record_id)
            if record is None:
                raise RecordNotFoundError(kind, record_id)
            return to_json(kind, record)

        async def create_record(data: dict):
            validate_payload(kind, data)
            record = store.create(kind, field_map.from_storage(data))
            return {"success": True, "data": to_json(kind, record)}

        async def update_record(record_id: str, data: dict):
            validate_payload(kind, data, partial=True)
            record = store.update(kind, record_id, field_map.from_storage(data))
            return {"success": True, "data": to_json(kind, record)}

        async def delete_record(record_id: str):
            store.delete(kind, record_id)
            return {"success": True, "id": record_id}

        app.add_api_route(base, list_records, methods=["GET"],
                          name=f"list_{kind}")
        app.add_api_route(base, create_record, methods=["POST"],
                          name=f"create_{kind}")
        app.add_api_route(f"{base}/{{record_id}}", get_record, methods=["GET"],
                          name=f"get_{kind}")
        app.add_api_route(f"{base}/{{record_id}}", update_record,
                          methods=["PUT"], name=f"update_{kind}")
        app.add_api_route(f"{base}/{{record_id}}", delete_record,
                          methods=["DELETE"], name=f"delete_{kind}")

    async def startup(self):
        """启动 Web 服务器"""
        import uvicorn

        self.running = True

        def run_server():
            """在独立线程中运行 uvicorn 服务器"""
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            self._server_loop = loop

            config = uvicorn.Config(
                self.app,
                host=self.host,
                port=self.port,
                log_level="warning",
                loop="asyncio",
            )
            self._server = uvicorn.Server(config)
            # 信号由 app.py 统一处理
            self._server.install_signal_handlers = lambda: None

            try:
                loop.run_until_complete(self._server.serve())
            except Exception as e:
                logger.error(f"服务器运行出错: {e}")
            finally:
                pending = asyncio.all_tasks(loop)
                for task in pending:
                    task.cancel()
                if pending:
                    loop.run_until_complete(
                        asyncio.gather(*pending, return_exceptions=True)
                    )
                loop.run_until_complete(loop.shutdown_asyncgens())
                loop.close()

        self._server_thread = threading.Thread(target=run_server, daemon=True)
        self._server_thread.start()

        # 等待服务器启动
        max_wait = 5
        waited = 0
        while self._server is None and waited < max_wait:
            await asyncio.sleep(0.1)
            waited += 0.1

        logger.info(f"Web 服务已启动: http://{self.host}:{self.port}")

    async def shutdown(self):
        """停止 Web 服务器，确保端口被释放"""
        self.running = False

        if self._server is not None:
            try:
                logger.info("正在停止 Web 服务器...")
                self._server.should_exit = True

                # 等待服务器线程自然退出（最多 3 秒）
                if self._server_thread and self._server_thread.is_alive():
                    self._server_thread.join(timeout=3.0)

                if self._server_thread and self._server_thread.is_alive():
                    logger.warning("服务器未在 3 秒内优雅停止，强制退出...")
                    self._server.force_exit = True
                    if self._server_loop and self._server_loop.is_running():
                        self._server_loop.call_soon_threadsafe(
                            self._server_loop.stop
                        )
                    self._server_thread.join(timeout=2.0)
                    if self._server_thread.is_alive():
                        logger.warning("服务器线程未能停止，将随主进程退出")
            finally:
                self._server = None
                self._server_loop = None
                self._server_thread = None

        logger.info("Web 服务已停止")
