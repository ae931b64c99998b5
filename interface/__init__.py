"""对外接口模块

当前提供 HTTP 接口：
- WebServer: 基于 FastAPI 的门店记录管理 API（interface.web.server）

使用示例：
    ```python
    from interface import WebServer
    from store import create_store

    server = WebServer(store=create_store(), port=3001)
    await server.startup()
    ```
"""
from interface.web.server import WebServer

__all__ = ["WebServer"]
