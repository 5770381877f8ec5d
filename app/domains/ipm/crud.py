# app/domains/ipm/crud.py

"""
'ipm' 도메인의 CRUD 작업을 담당하는 모듈입니다.

- 대역 생성/수정 시 주소 형식, 시작 <= 끝, 최대 크기를 검증합니다.
- 대역 삭제는 상세 정보로 전파되지 않습니다.
- 상세 정보는 (range_id, ip_address) 기준으로 upsert하며 status는 항상 다시 파생합니다.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy import or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.crud_base import CRUDBase
from app.core.exceptions import InvalidRange, RecordNotFound, store_guard
from app.domains.ipm import addressing
from app.domains.ipm import models as ipm_models
from app.domains.ipm import schemas as ipm_schemas
from app.utils import spreadsheet

logger = logging.getLogger(__name__)

DETAIL_TEXT_LIMITS = spreadsheet.max_lengths(ipm_schemas.IpDetailUpsert)

UNKNOWN_RANGE_TITLE = "Unknown Range"


# =============================================================================
# 1. ipm.ip_ranges CRUD
# =============================================================================
class IpRangeCRUD(
    CRUDBase[
        ipm_models.IpRange,
        ipm_schemas.IpRangeCreate,
        ipm_schemas.IpRangeUpdate,
    ]
):
    @staticmethod
    def _validated(data: Dict[str, Any]) -> Dict[str, Any]:
        data["start_ip"] = addressing.normalize_ip(data["start_ip"])
        data["end_ip"] = addressing.normalize_ip(data["end_ip"])
        addressing.validate_range(data["start_ip"], data["end_ip"], settings.IP_RANGE_MAX_SIZE)
        for key in ("gateway", "subnet_mask"):
            if data.get(key):
                data[key] = addressing.normalize_ip(data[key])
        return data

    async def create(
        self, db: AsyncSession, *, obj_in: Union[ipm_schemas.IpRangeCreate, Dict[str, Any]]
    ) -> ipm_models.IpRange:
        data = dict(obj_in) if isinstance(obj_in, dict) else obj_in.model_dump()
        return await super().create(db, obj_in=self._validated(data))

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ipm_models.IpRange,
        obj_in: Union[ipm_schemas.IpRangeUpdate, Dict[str, Any]],
    ) -> ipm_models.IpRange:
        update_data = dict(obj_in) if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        # 시작/끝 주소는 비울 수 없음
        for key in ("start_ip", "end_ip"):
            if update_data.get(key) is None:
                update_data.pop(key, None)

        addresses = {
            key: update_data.get(key, getattr(db_obj, key))
            for key in ("start_ip", "end_ip", "gateway", "subnet_mask")
        }
        self._validated(addresses)
        for key in addresses:
            if key in update_data:
                update_data[key] = addresses[key]
        return await super().update(db, db_obj=db_obj, obj_in=update_data)

    async def get_all(self, db: AsyncSession) -> List[ipm_models.IpRange]:
        """모든 대역을 저장 순서(id 오름차순)로 반환합니다. 겹치는 대역의 우선순위가 됩니다."""
        return await self.get_filtered(db, order_desc=False, limit=None)


# =============================================================================
# 2. ipm.ip_details CRUD
# =============================================================================
class IpDetailCRUD(
    CRUDBase[
        ipm_models.IpDetail,
        ipm_schemas.IpDetailUpsert,
        ipm_schemas.IpDetailUpsert,
    ]
):
    async def get_by_range(self, db: AsyncSession, *, range_id: int) -> List[ipm_models.IpDetail]:
        return await self.get_filtered(db, filters={"range_id": range_id}, order_desc=False, limit=None)

    async def get_by_key(
        self, db: AsyncSession, *, range_id: int, ip_address: str
    ) -> Optional[ipm_models.IpDetail]:
        query = select(self.model).where(
            self.model.range_id == range_id,
            self.model.ip_address == ip_address,
        )
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    def _apply(
        db_obj: ipm_models.IpDetail,
        *,
        department: Optional[str],
        user: Optional[str],
        usage: Optional[str],
        status: Optional[addressing.IpStatus] = None,
    ) -> ipm_models.IpDetail:
        db_obj.department = department or ""
        db_obj.user = user or ""
        db_obj.usage = usage or ""
        db_obj.status = status or addressing.derive_status(department, user, usage)
        return db_obj

    async def upsert(self, db: AsyncSession, *, obj_in: ipm_schemas.IpDetailUpsert) -> ipm_models.IpDetail:
        """
        대역 안의 주소에 대한 상세 정보를 생성하거나 수정합니다.
        """
        ip_range = await db.get(ipm_models.IpRange, obj_in.range_id)
        if ip_range is None:
            raise RecordNotFound(f"IP 대역을 찾을 수 없습니다 (id={obj_in.range_id}).")
        ip_address = addressing.normalize_ip(obj_in.ip_address)
        if not addressing.contains(ip_range.start_ip, ip_range.end_ip, ip_address):
            raise InvalidRange(f"{ip_address}는 '{ip_range.title}' 대역({ip_range.start_ip}~{ip_range.end_ip})에 속하지 않습니다.")

        db_obj = await self.get_by_key(db, range_id=ip_range.id, ip_address=ip_address)
        if db_obj is None:
            db_obj = ipm_models.IpDetail(range_id=ip_range.id, ip_address=ip_address)
        self._apply(db_obj, department=obj_in.department, user=obj_in.user, usage=obj_in.usage)

        async with store_guard("save ip detail"):
            db.add(db_obj)
            await db.commit()
            await db.refresh(db_obj)
        return db_obj

    async def bulk_assign_from_import(
        self, db: AsyncSession, *, rows: List[Dict[str, Any]]
    ) -> Tuple[int, int]:
        """
        가져온 행을 주소를 포함하는 첫 번째 대역에 배정합니다. 상태는 항상 사용중으로 저장됩니다.
        어느 대역에도 속하지 않는 행은 건너뜁니다. 길이 제한을 넘는 텍스트는 잘라냅니다.
        (적용 수, 건너뛴 수)를 반환합니다.
        """
        ranges = await ip_range.get_all(db)
        assignments, skipped = addressing.plan_bulk_assignment(rows, ranges)

        range_ids = {a.range_id for a in assignments}
        existing: Dict[Tuple[int, str], ipm_models.IpDetail] = {}
        if range_ids:
            result = await db.execute(select(self.model).where(self.model.range_id.in_(range_ids)))
            existing = {(d.range_id, d.ip_address): d for d in result.scalars().all()}

        for assignment in assignments:
            key = (assignment.range_id, assignment.ip_address)
            db_obj = existing.get(key)
            if db_obj is None:
                db_obj = ipm_models.IpDetail(range_id=assignment.range_id, ip_address=assignment.ip_address)
                existing[key] = db_obj
            text = spreadsheet.clip_text(
                {"department": assignment.department, "user": assignment.user, "usage": assignment.usage},
                DETAIL_TEXT_LIMITS,
            )
            self._apply(
                db_obj,
                department=text["department"],
                user=text["user"],
                usage=text["usage"],
                status=addressing.IpStatus.IN_USE,
            )
            db.add(db_obj)

        async with store_guard("bulk import ip details"):
            await db.commit()
        logger.info("IP bulk import: applied=%d skipped=%d", len(assignments), skipped)
        return len(assignments), skipped

    async def search(self, db: AsyncSession, *, q: str, limit: int = 200) -> List[Dict[str, Any]]:
        """
        주소, 사용자, 부서에 검색어가 포함된 상세 정보를 소속 대역 이름과 함께 반환합니다.
        """
        pattern = f"%{q.strip()}%"
        query = (
            select(self.model)
            .where(or_(
                self.model.ip_address.ilike(pattern),
                self.model.user.ilike(pattern),
                self.model.department.ilike(pattern),
            ))
            .order_by(self.model.id)
            .limit(limit)
        )
        result = await db.execute(query)
        details = result.scalars().all()

        titles = {r.id: r.title for r in await ip_range.get_all(db)}
        return [
            {
                **ipm_schemas.IpDetailResponse.model_validate(d).model_dump(),
                "range_title": titles.get(d.range_id, UNKNOWN_RANGE_TITLE),
            }
            for d in details
        ]


ip_range = IpRangeCRUD(ipm_models.IpRange)
ip_detail = IpDetailCRUD(ipm_models.IpDetail)
