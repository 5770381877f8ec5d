# app/core/crud_base.py

"""
공통 CRUD(Create, Read, Update, Delete) 작업을 위한 비동기 기본 클래스 모듈입니다.
"""

import logging
from typing import Generic, List, Optional, Type, TypeVar, Any, Dict, Union
from datetime import date, timedelta

from sqlalchemy import DateTime
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from pydantic import BaseModel

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    모든 CRUD 작업에 대한 기본 클래스를 정의합니다.
    """
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """ID를 기준으로 단일 레코드를 조회합니다."""
        return await db.get(self.model, id)

    async def get_multi(
        self, db: AsyncSession, *, skip: int = 0, limit: int = 100, **kwargs: Any
    ) -> List[ModelType]:
        """
        여러 레코드를 id 오름차순으로 조회합니다. 값이 None이 아닌 키워드 인자는 동등 조건 필터로 사용됩니다.
        """
        query = select(self.model)

        for field, value in kwargs.items():
            if value is not None and hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)

        query = query.order_by(self.model.id).offset(skip).limit(limit)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_by_attribute(
        self, db: AsyncSession, *, attribute: str, value: Any
    ) -> Optional[ModelType]:
        statement = select(self.model).where(getattr(self.model, attribute) == value)
        response = await db.execute(statement)
        return response.scalars().first()

    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,  # 다중 속성 필터: {"attribute_name": "value"}
        date_range_field: Optional[str] = None,    # 기간 검색을 적용할 날짜 필드 이름
        start_date: Optional[date] = None,         # 기간 검색 시작일 (포함)
        end_date: Optional[date] = None,           # 기간 검색 종료일 (포함)
        order_by_field: Optional[str] = None,
        order_desc: bool = True,
        skip: int = 0,
        limit: Optional[int] = 100
    ) -> List[ModelType]:
        """
        다중 속성 및 기간 검색 기능을 포함한 다중 조회.
        limit=None이면 조건을 만족하는 모든 레코드를 반환합니다.
        """
        query = select(self.model)
        conditions = []

        # 1. 다중 속성 필터링
        if filters:
            for attribute, value in filters.items():
                if hasattr(self.model, attribute):
                    conditions.append(getattr(self.model, attribute) == value)
                else:
                    logger.warning("Model %s has no attribute '%s'", self.model.__name__, attribute)

        # 2. 기간 검색 필터링
        if date_range_field and hasattr(self.model, date_range_field):
            date_field = getattr(self.model, date_range_field)
            if start_date is not None:
                conditions.append(date_field >= start_date)
            if end_date is not None:
                # end_date 당일까지 포함
                if not isinstance(date_field.type, DateTime):
                    conditions.append(date_field <= end_date)
                elif end_date < date.max:
                    conditions.append(date_field < end_date + timedelta(days=1))
        elif date_range_field:
            logger.warning("Model %s has no attribute '%s' for date range filtering.", self.model.__name__, date_range_field)

        if conditions:
            query = query.where(*conditions)

        # 3. 정렬
        if order_by_field and hasattr(self.model, order_by_field):
            column = getattr(self.model, order_by_field)
            query = query.order_by(column.desc() if order_desc else column)
        else:
            query = query.order_by(self.model.id.desc() if order_desc else self.model.id)

        # 4. 페이징
        query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await db.execute(query)
        return result.scalars().all()

    async def create(self, db: AsyncSession, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        """새로운 레코드를 생성합니다."""
        db_obj = self.model.model_validate(obj_in)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        """
        기존 레코드를 부분 업데이트합니다. 전달된 필드만 병합됩니다.
        """
        update_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_obj, key, value)

        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, *, id: Any) -> Optional[ModelType]:
        """ID를 기준으로 레코드를 삭제합니다."""
        db_obj = await db.get(self.model, id)
        if db_obj:
            await db.delete(db_obj)
            await db.commit()
        return db_obj
