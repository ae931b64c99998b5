"""业务计算模块

- entitlements: 次卡剩余次数
- finance_summary: 月度收支统计
- dashboard: 仪表盘汇总
- coercion: 数值容错读取
"""
