"""通用 CRUD 基类。

为各实体仓库提供按模型类操作的通用增删改查能力。
所有方法都支持传入外部会话（由调用方控制提交），
未传入时自动创建会话并在方法内提交。
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.orm import Session

from .connection import DatabaseConnection
from .models import Base


class BaseCRUD:
    """通用 CRUD 基类。

    Attributes:
        conn: 数据库连接管理器。
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        self.conn = conn

    def _get_session(self) -> Session:
        return self.conn.get_session()

    def create(self, model: Type[Base], session: Optional[Session] = None,
               **fields: Any) -> Base:
        """新建一条记录。

        Args:
            model: ORM 模型类。
            session: 外部会话（可选）。
            **fields: 字段值，未知字段被忽略。

        Returns:
            新建的 ORM 对象。
        """
        columns = model.__table__.columns.keys()
        obj = model(**{k: v for k, v in fields.items() if k in columns})

        if session:
            session.add(obj)
            session.flush()
            session.refresh(obj)
            return obj

        with self._get_session() as sess:
            sess.add(obj)
            sess.commit()
            sess.refresh(obj)
            return obj

    def get_by_id(self, model: Type[Base], record_id: Any,
                  session: Optional[Session] = None) -> Optional[Base]:
        """按主键获取记录，不存在返回 None。"""
        if session:
            return session.get(model, record_id)

        with self._get_session() as sess:
            return sess.get(model, record_id)

    def get_all(self, model: Type[Base],
                filters: Optional[Dict[str, Any]] = None,
                order_by: Optional[str] = None,
                descending: bool = True,
                session: Optional[Session] = None) -> List[Base]:
        """获取记录列表。

        Args:
            model: ORM 模型类。
            filters: 等值过滤条件，如 ``{"customer_id": "..."}``。
            order_by: 排序字段名（可选）。
            descending: 是否倒序，默认 True。
            session: 外部会话（可选）。

        Returns:
            ORM 对象列表。
        """
        def _query(sess):
            query = sess.query(model)
            if filters:
                query = query.filter_by(**filters)
            if order_by:
                column = getattr(model, order_by)
                query = query.order_by(
                    column.desc() if descending else column.asc()
                )
            return query.all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def update_by_id(self, model: Type[Base], record_id: Any,
                     session: Optional[Session] = None,
                     **fields: Any) -> Optional[Base]:
        """按主键更新记录。

        Returns:
            更新后的 ORM 对象，不存在返回 None。
        """
        columns = model.__table__.columns.keys()

        def _do(sess):
            obj = sess.get(model, record_id)
            if obj is None:
                return None
            for key, value in fields.items():
                if key in columns and key != "id":
                    setattr(obj, key, value)
            sess.flush()
            sess.refresh(obj)
            return obj

        if session:
            return _do(session)

        with self._get_session() as sess:
            obj = _do(sess)
            if obj is not None:
                sess.commit()
                sess.refresh(obj)
            return obj

    def delete_by_id(self, model: Type[Base], record_id: Any,
                     session: Optional[Session] = None) -> bool:
        """按主键删除记录。

        Returns:
            是否删除成功。
        """
        def _do(sess):
            obj = sess.get(model, record_id)
            if obj is None:
                return False
            sess.delete(obj)
            sess.flush()
            return True

        if session:
            return _do(session)

        with self._get_session() as sess:
            deleted = _do(sess)
            if deleted:
                sess.commit()
            return deleted

    @staticmethod
    def to_dict(obj: Optional[Base]) -> Optional[Dict[str, Any]]:
        """ORM 对象转换为普通字典。

        DECIMAL 转为 float（整数值转为 int），日期时间转为 ISO 字符串。
        """
        if obj is None:
            return None
        data: Dict[str, Any] = {}
        for column in obj.__table__.columns:
            value = getattr(obj, column.key)
            if isinstance(value, Decimal):
                value = int(value) if value == value.to_integral_value() else float(value)
            elif isinstance(value, datetime):
                value = value.isoformat(timespec="seconds")
            elif isinstance(value, date):
                value = value.isoformat()
            data[column.key] = value
        return data
