"""
Base Repository Module - Provides common database operations for all repositories.
"""

import types
from abc import ABC
from typing import TypeVar, Generic, Type, List, Optional, Any, Dict, Sequence

from sqlalchemy.orm import Session

T = TypeVar('T')


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository implementing common CRUD operations."""

    def __init__(self, db_session: Session, model_class: Type[T]):
        if isinstance(db_session, types.GeneratorType):
            db_session = next(db_session)
        self.db: Session = db_session
        self.model_class = model_class

    def add(self, obj: T) -> T:
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
            return obj
        except Exception as e:
            self.db.rollback()
            raise e

    def add_all(self, objs: List[T]) -> int:
        try:
            self.db.add_all(objs)
            self.db.commit()
            return len(objs)
        except Exception as e:
            self.db.rollback()
            raise e

    def update(self, obj: T) -> T:
        try:
            self.db.commit()
            self.db.refresh(obj)
            return obj
        except Exception as e:
            self.db.rollback()
            raise e

    def delete(self, obj: T) -> None:
        try:
            self.db.delete(obj)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            raise e

    def get_by_id(self, id: Any) -> Optional[T]:
        return self.db.query(self.model_class).filter_by(id=id).first()

    def count(self, **filters) -> int:
        return self.db.query(self.model_class).filter_by(**filters).count()

    def get_paginated(
        self,
        filters: Dict[str, Any] = None,
        limit: int = 10,
        offset: int = 0,
        order_by: Sequence[Any] = ()
    ) -> Dict[str, Any]:
        query = self.db.query(self.model_class)

        if filters:
            query = query.filter_by(**filters)

        if order_by:
            query = query.order_by(*order_by)

        total_count = query.count()
        results = query.offset(offset).limit(limit).all()

        return {
            "data": results,
            "pagination": {
                "total": total_count,
                "limit": limit,
                "offset": offset,
                "has_more": offset + limit < total_count
            }
        }

    def commit(self) -> None:
        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            raise e

    def rollback(self) -> None:
        self.db.rollback()
