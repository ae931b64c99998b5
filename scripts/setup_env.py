#!/usr/bin/env python3
"""交互式生成 .env 配置文件

使用方式：
    python scripts/setup_env.py

按提示选择存储后端并填写对应配置，生成 .env 文件。
"""
import os

# 项目根目录
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_FILE = os.path.join(PROJECT_ROOT, ".env")

BACKENDS = ("sql", "hosted", "json", "csv", "memory")

# 配置项定义：(env_key, 描述, 默认值, 所属后端；None 表示所有后端都需要)
CONFIG_ITEMS = [
    # === 记录存储 ===
    ("DATABASE_URL", "数据库连接地址", "sqlite:///data/shop.db", "sql"),
    ("DATA_DIR", "本地数据目录（JSON/CSV 文件）", "data", "json"),
    ("DATA_DIR", "本地数据目录（JSON/CSV 文件）", "data", "csv"),
    ("SUPABASE_URL", "托管表服务地址（如 https://xyz.supabase.co）", "", "hosted"),
    ("SUPABASE_KEY", "托管表访问密钥", "", "hosted"),

    # === Web 服务 ===
    ("WEB_HOST", "Web 监听地址", "0.0.0.0", None),
    ("WEB_PORT", "Web 监听端口", "3001", None),

    # === 日志 ===
    ("LOG_LEVEL", "日志级别", "INFO", None),
]


def ask(key: str, desc: str, default: str) -> str:
    """提示输入，空输入使用默认值；没有默认值时必须填写。"""
    default_hint = f" (默认: {default})" if default else ""
    print(f"📝 {desc}")
    while True:
        value = input(f"  {key}={default_hint}: ").strip() or default
        if value:
            return value
        print(f"  ❌ {key} 是必填项，请输入值。")


def main():
    print()
    print("=" * 60)
    print("  门店记录管理 配置向导")
    print("  生成 .env 配置文件")
    print("=" * 60)
    print()

    if os.path.exists(ENV_FILE):
        print(f"⚠️  检测到已有 .env 文件: {ENV_FILE}")
        choice = input("是否覆盖？(y/N): ").strip().lower()
        if choice != "y":
            print("已取消。")
            return
        print()

    backend = ""
    while backend not in BACKENDS:
        backend = ask("STORE_BACKEND", f"存储后端（{'/'.join(BACKENDS)}）", "sql")

    env_lines = [
        "# 门店记录管理 配置文件",
        "# 由 scripts/setup_env.py 自动生成",
        "",
        f"STORE_BACKEND={backend}",
    ]
    for key, desc, default, owner in CONFIG_ITEMS:
        if owner not in (None, backend):
            continue
        env_lines.append(f"{key}={ask(key, desc, default)}")
        print()

    with open(ENV_FILE, "w", encoding="utf-8") as f:
        f.write("\n".join(env_lines) + "\n")

    print("=" * 60)
    print(f"  ✅ 配置文件已生成: {ENV_FILE}")
    print()
    print("  初始化数据：")
    print("    python scripts/init_db.py")
    print("  启动服务：")
    print("    python app.py")
    print("=" * 60)


if __name__ == "__main__":
    main()
