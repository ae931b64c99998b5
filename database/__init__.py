"""数据库模块 —— SQLAlchemy 表存储。

对外入口为 DatabaseManager，子模块：
- connection: 引擎与会话
- models: ORM 模型
- base_crud: 通用增删改查
- entity_repos / business_repos: 领域仓库
"""
from .manager import DatabaseManager

__all__ = ["DatabaseManager"]
