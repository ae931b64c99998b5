"""SQLAlchemy ORM 模型定义。

本模块定义了门店 CRM 的全部数据表：
- 顾客、商品（单次服务 / 次卡）等基础实体
- 购买记录、预约记录等业务记录
- 收支流水

日期与预约时间以 ISO 字符串保存，月份统计按字符串前缀匹配，
格式不规范的日期只会匹配不上，不会在写入时报错。
ID 为字符串（UUID），与托管表和本地文件中的记录ID保持一致。
"""
from typing import Optional
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, DECIMAL, Index
)
from sqlalchemy.orm import declarative_base
from datetime import datetime

# SQLAlchemy declarative base，所有模型都继承自此类
# 设置 __allow_unmapped__ = True 以兼容 SQLAlchemy 2.0 的类型注解要求
Base = declarative_base()

Base.__allow_unmapped__ = True

# Appointment 有名为 datetime 的列，类体内无法再引用 datetime 类
_now = datetime.now


class Customer(Base):
    """顾客表模型。

    Attributes:
        id: 主键，UUID 字符串。
        name: 顾客姓名，必填，最大长度50字符。
        phone: 联系电话，可选，最大长度20字符。
        birth_date: 生日，YYYY-MM-DD，可选。
        skin_type: 肤质，可选值：dry/oily/combination/sensitive/normal。
        memo: 备注，可选。
        point: 积分，非负整数，默认0。
        created_at: 创建时间。
        updated_at: 更新时间。
    """
    __tablename__ = "customers"

    id: str = Column(String(36), primary_key=True)
    name: str = Column(String(50), nullable=False)
    phone: Optional[str] = Column(String(20))
    birth_date: Optional[str] = Column(String(10))
    skin_type: Optional[str] = Column(String(20))
    memo: Optional[str] = Column(Text)
    point: int = Column(Integer, default=0)
    created_at: datetime = Column(DateTime, default=datetime.now)
    updated_at: datetime = Column(DateTime, default=datetime.now)


class Product(Base):
    """商品表模型（单次服务或次卡）。

    Attributes:
        id: 主键，UUID 字符串。
        name: 商品名称，必填。
        price: 单价，DECIMAL(12,2)。
        type: 商品类型：voucher（次卡）/ single（单次）。
        unit_count: 每购买一个单位获得的次数，默认1（如10次卡为10）。
        status: active / inactive。
        description: 描述，可选。
    """
    __tablename__ = "products"

    id: str = Column(String(36), primary_key=True)
    name: str = Column(String(100), nullable=False)
    price: float = Column(DECIMAL(12, 2), default=0)
    type: str = Column(String(20), default="single")
    unit_count: int = Column(Integer, default=1)
    status: str = Column(String(20), default="active")
    description: Optional[str] = Column(Text)
    created_at: datetime = Column(DateTime, default=datetime.now)
    updated_at: datetime = Column(DateTime, default=datetime.now)


class Purchase(Base):
    """购买记录表模型。

    customer_id / product_id 不设外键约束：删除顾客或商品不会级联删除
    购买记录，统计时按“未知”处理。

    Attributes:
        id: 主键，UUID 字符串。
        customer_id: 顾客ID。
        product_id: 商品ID。
        quantity: 购买数量（单位数），默认1。
        purchase_date: 购买日期，YYYY-MM-DD。
        total_price: 总价，可选（缺省时按单价×数量计算）。
    """
    __tablename__ = "purchases"

    id: str = Column(String(36), primary_key=True)
    customer_id: str = Column(String(36), nullable=False)
    product_id: str = Column(String(36), nullable=False)
    quantity: int = Column(Integer, default=1)
    purchase_date: Optional[str] = Column(String(10))
    total_price: Optional[float] = Column(DECIMAL(12, 2))
    created_at: datetime = Column(DateTime, default=datetime.now)
    updated_at: datetime = Column(DateTime, default=datetime.now)

    __table_args__ = (
        Index("ix_purchases_customer_id", "customer_id"),
    )


class Appointment(Base):
    """预约记录表模型。

    Attributes:
        id: 主键，UUID 字符串。
        customer_id: 顾客ID。
        product_id: 使用的商品ID（每次预约消耗一次）。
        datetime: 预约时间，ISO 格式字符串。
        memo: 备注，可选。
        status: scheduled / completed / cancelled / no-show。
    """
    __tablename__ = "appointments"

    id: str = Column(String(36), primary_key=True)
    customer_id: str = Column(String(36), nullable=False)
    product_id: str = Column(String(36), nullable=False)
    datetime: str = Column(String(32), nullable=False)
    memo: Optional[str] = Column(Text)
    status: str = Column(String(20), default="scheduled")
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now)

    __table_args__ = (
        Index("ix_appointments_customer_id", "customer_id"),
    )


class FinanceRecord(Base):
    """收支流水表模型。

    金额只保存绝对值，方向由 type 决定。

    Attributes:
        id: 主键，UUID 字符串。
        date: 日期，YYYY-MM-DD。
        type: income（收入）/ expense（支出）。
        title: 标题。
        amount: 金额，DECIMAL(12,2)，非负。
        memo: 备注，可选。
    """
    __tablename__ = "finance"

    id: str = Column(String(36), primary_key=True)
    date: str = Column(String(10), nullable=False)
    type: str = Column(String(10), nullable=False)
    title: str = Column(String(200), nullable=False)
    amount: float = Column(DECIMAL(12, 2), default=0)
    memo: Optional[str] = Column(Text)
    created_at: datetime = Column(DateTime, default=datetime.now)
    updated_at: datetime = Column(DateTime, default=datetime.now)

    __table_args__ = (
        Index("ix_finance_date", "date"),
    )
