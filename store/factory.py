"""存储后端工厂：按配置创建 RecordStore。"""
from typing import Optional

from loguru import logger

from config.settings import Settings, settings as default_settings
from .base import RecordStore


BACKENDS = ("sql", "hosted", "json", "csv", "memory")


def create_store(settings: Optional[Settings] = None,
                 backend: Optional[str] = None) -> RecordStore:
    """根据配置创建记录存储后端。

    Args:
        settings: 配置对象，为 None 时使用全局配置。
        backend: 后端名称，覆盖 ``settings.store_backend``。

    Returns:
        RecordStore 实例。

    Raises:
        ValueError: 未知的后端名称。
    """
    settings = settings or default_settings
    name = (backend or settings.store_backend).strip().lower()

    if name == "sql":
        from .sql import SqlStore
        store: RecordStore = SqlStore(database_url=settings.database_url)
    elif name == "hosted":
        from .hosted import HostedTableStore
        store = HostedTableStore(
            settings.supabase_url, settings.supabase_key,
            timeout=settings.supabase_timeout,
        )
    elif name == "json":
        from .json_file import JsonFileStore
        store = JsonFileStore(settings.data_dir)
    elif name == "csv":
        from .csv_file import CsvFileStore
        store = CsvFileStore(settings.data_dir)
    elif name == "memory":
        from .memory import MemoryStore
        store = MemoryStore()
    else:
        raise ValueError(
            f"Unknown store backend: {name} (choose from {', '.join(BACKENDS)})"
        )

    logger.info(f"记录存储后端: {store.backend_name}")
    return store
