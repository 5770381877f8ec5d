# app/domains/rnt/crud.py

"""
'rnt' 도메인의 CRUD 작업을 담당하는 모듈입니다.
"""

import logging
from typing import Any, Dict, List

from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import store_guard
from app.domains.rnt import models as rnt_models
from app.domains.rnt import schemas as rnt_schemas

logger = logging.getLogger(__name__)


class RentalCRUD(
    CRUDBase[
        rnt_models.Rental,
        rnt_schemas.RentalCreate,
        rnt_schemas.RentalUpdate,
    ]
):
    async def get_all(self, db: AsyncSession) -> List[rnt_models.Rental]:
        return await self.get_filtered(db, order_by_field="ho", order_desc=False, limit=None)

    async def create_many(self, db: AsyncSession, *, rows: List[Dict[str, Any]]) -> int:
        """가져온 임대 계약을 한 번에 생성합니다. 기존 계약과 병합하지 않습니다."""
        db_objs = [self.model.model_validate(rnt_schemas.RentalCreate(**row)) for row in rows]
        async with store_guard("import rentals"):
            db.add_all(db_objs)
            await db.commit()
        logger.info("Imported %d rental contract(s)", len(db_objs))
        return len(db_objs)


rental = RentalCRUD(rnt_models.Rental)
