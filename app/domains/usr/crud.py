# app/domains/usr/crud.py

"""
'usr' 도메인의 CRUD 작업을 담당하는 모듈입니다.

비밀번호는 항상 이 모듈에서 해싱되며, 평문 비밀번호는 저장되지 않습니다.
"""

import logging
from typing import Any, Dict, Optional, Union

from fastapi import HTTPException, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import store_guard
from app.core.security import get_password_hash, verify_password
from . import models as usr_models
from . import schemas as usr_schemas

logger = logging.getLogger(__name__)


# =============================================================================
# 1. usr.users 테이블 CRUD
# =============================================================================
class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.User)

    async def get_by_login_id(self, db: AsyncSession, *, login_id: str) -> Optional[usr_models.User]:
        return await self.get_by_attribute(db, attribute="login_id", value=login_id)

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[usr_models.User]:
        return await self.get_by_attribute(db, attribute="email", value=email)

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.UserCreate) -> usr_models.User:
        """로그인 ID와 이메일 중복을 검사한 뒤 비밀번호를 해싱하여 사용자를 생성합니다."""
        if await self.get_by_login_id(db, login_id=obj_in.login_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Login ID already registered")
        if obj_in.email and await self.get_by_email(db, email=obj_in.email):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

        db_user = usr_models.User(
            **obj_in.model_dump(exclude={"password"}),
            password_hash=get_password_hash(obj_in.password),
        )
        async with store_guard("create user"):
            db.add(db_user)
            await db.commit()
            await db.refresh(db_user)
        logger.info("User '%s' created with role %s", db_user.login_id, db_user.role.name)
        return db_user

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: usr_models.User,
        obj_in: Union[usr_schemas.UserUpdate, Dict[str, Any]],
    ) -> usr_models.User:
        """
        전달된 필드만 수정합니다. password가 포함되면 해시로 바꿔 저장합니다.
        """
        update_data = dict(obj_in) if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        password = update_data.pop("password", None)
        if password:
            update_data["password_hash"] = get_password_hash(password)
            logger.warning("Password reset for user '%s'", db_obj.login_id)
        if update_data.get("is_active") is False and db_obj.is_active:
            logger.info("User '%s' deactivated", db_obj.login_id)

        async with store_guard("update user"):
            return await super().update(db, db_obj=db_obj, obj_in=update_data)

    async def authenticate(self, db: AsyncSession, *, login_id: str, password: str) -> Optional[usr_models.User]:
        """로그인 ID와 비밀번호가 맞으면 사용자를, 아니면 None을 반환합니다."""
        db_user = await self.get_by_login_id(db, login_id=login_id)
        if db_user is None or not verify_password(password, db_user.password_hash):
            logger.info("Failed login attempt for '%s'", login_id)
            return None
        return db_user


user = CRUDUser()
