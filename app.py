#!/usr/bin/env python3
"""门店记录管理 - Web 服务入口

启动 HTTP API 服务，提供顾客、商品、购买、预约、收支记录的管理接口，
以及剩余次数、月度收支和仪表盘统计。

使用方式：
    python app.py

    # 指定端口
    python app.py --port 3001

    # 指定存储后端
    python app.py --backend csv --data-dir data
    python app.py --backend sql --db sqlite:///data/shop.db

环境变量（在 .env 文件中配置，运行 python scripts/setup_env.py 生成）：
    STORE_BACKEND     存储后端 sql/hosted/json/csv/memory（默认 sql）
    DATABASE_URL      数据库连接地址
    DATA_DIR          本地 JSON/CSV 数据目录
    SUPABASE_URL      托管表服务地址
    SUPABASE_KEY      托管表访问密钥
    WEB_PORT          Web 端口（默认 3001）
    LOG_LEVEL         日志级别（默认 INFO）
"""
import argparse
import asyncio
import signal
import sys

from loguru import logger


def setup_logging(level: str) -> None:
    """按配置的级别重新设置 loguru 的控制台输出"""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


async def _cleanup(web, store):
    """统一资源清理函数。

    确保 Web 服务器和存储连接被正确关闭，释放端口和文件句柄。
    """
    logger.info("正在清理资源...")

    # 1. 停止 Web 服务器（释放端口）
    if web is not None:
        try:
            await web.shutdown()
        except Exception as e:
            logger.warning(f"停止 Web 服务器时出错: {e}")

    # 2. 关闭存储连接
    if store is not None:
        try:
            store.close()
        except Exception as e:
            logger.warning(f"关闭存储连接时出错: {e}")

    logger.info("服务已停止")


async def main():
    from config.settings import settings

    parser = argparse.ArgumentParser(description="门店记录管理 Web 服务")
    parser.add_argument("--host", default=settings.web_host,
                        help=f"监听地址 (默认: {settings.web_host})")
    parser.add_argument("--port", type=int, default=settings.web_port,
                        help=f"监听端口 (默认: {settings.web_port})")
    parser.add_argument("--backend", default=None,
                        help="存储后端 sql/hosted/json/csv/memory (默认读取 STORE_BACKEND)")
    parser.add_argument("--db", default=None,
                        help="数据库连接 URL（sql 后端）")
    parser.add_argument("--data-dir", default=None,
                        help="数据目录（json/csv 后端）")
    args = parser.parse_args()

    setup_logging(settings.log_level)

    # 命令行参数覆盖 .env 配置
    overrides = {}
    if args.db:
        overrides["database_url"] = args.db
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    config = settings.model_copy(update=overrides)

    # 用于 finally 清理的引用
    web = None
    store = None

    try:
        from store import create_store
        store = create_store(config, backend=args.backend)

        status = store.check_connection()
        if status["connected"]:
            logger.info(f"存储已连接: {store.backend_name}")
        else:
            logger.warning(f"存储连接失败: {status.get('error')}")

        from interface.web.server import WebServer

        web = WebServer(store=store, host=args.host, port=args.port)
        await web.startup()

        print()
        print("=" * 60)
        print("  门店记录管理服务已启动!")
        print(f"  访问地址: http://localhost:{args.port}")
        print(f"  存储后端: {store.backend_name}")
        print("=" * 60)
        print("  按 Ctrl+C 停止服务")
        print()

        # 使用 asyncio 的信号处理，保证事件循环能被唤醒
        loop = asyncio.get_running_loop()
        shutdown_event = asyncio.Event()
        _shutdown_requested = False

        def signal_handler(signum):
            """处理退出信号"""
            nonlocal _shutdown_requested
            if _shutdown_requested:
                # 第二次收到信号，强制退出
                logger.warning("再次收到退出信号，强制退出...")
                for task in asyncio.all_tasks(loop):
                    task.cancel()
                return
            _shutdown_requested = True
            logger.info(f"收到信号 {signum}，正在关闭服务...")
            shutdown_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler, sig)

        # 保持运行，直到收到退出信号
        await shutdown_event.wait()

    except asyncio.CancelledError:
        logger.info("任务被取消，正在清理...")
    except KeyboardInterrupt:
        logger.info("收到键盘中断信号")
    finally:
        await _cleanup(web, store)


def run():
    """命令行入口"""
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        print("\n已停止。")


if __name__ == "__main__":
    run()
