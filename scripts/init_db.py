"""初始化记录存储（建表 / 写入 CSV 表头）并写入默认商品目录"""
import argparse
import sys
import os

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.business_config import business_config
from store import create_store
from store.csv_file import CsvFileStore
from store.mapping import PRODUCTS
from loguru import logger


def seed_products(store) -> int:
    """写入默认商品目录，已存在同名商品的跳过。

    Returns:
        新写入的商品数量。
    """
    existing = {p.get("name") for p in store.list(PRODUCTS)}
    created = 0
    for product in business_config.get_default_products():
        if product["name"] in existing:
            continue
        store.create(PRODUCTS, product)
        created += 1
        logger.info(f"Created product: {product['name']}")
    return created


def init_store(backend=None):
    """初始化存储和种子数据"""
    logger.info("Initializing record store...")

    # SQL 后端在创建时自动建表
    store = create_store(backend=backend)
    if isinstance(store, CsvFileStore):
        store.initialize()

    try:
        logger.info("Inserting seed data...")
        created = seed_products(store)
        logger.info(f"Record store initialization completed! ({created} products added)")
    finally:
        store.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="初始化记录存储")
    parser.add_argument("--backend", default=None,
                        help="存储后端 (sql/hosted/json/csv/memory)")
    args = parser.parse_args()
    init_store(args.backend)
