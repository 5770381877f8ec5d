# app/domains/ipm/routers.py

from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.config import settings
from app.domains.ipm import addressing
from app.domains.ipm import crud as ipm_crud, schemas as ipm_schemas
from app.domains.usr.models import User as UsrUser
from app.utils import spreadsheet

router = APIRouter(
    tags=["IP Management (IP 관리)"],
    responses={404: {"description": "Not found"}},
)

# 가져오기 헤더 별칭 (우선순위 순)
IMPORT_COLUMNS = [
    spreadsheet.ColumnSpec("ip_address", ("IP주소", "IP", "Title")),
    spreadsheet.ColumnSpec("department", ("사용부서", "부서", "Department")),
    spreadsheet.ColumnSpec("user", ("사용자", "UserName")),
    spreadsheet.ColumnSpec("usage", ("용도", "Usage")),
]


# =============================================================================
# 1. ipm.ip_ranges 엔드포인트
# =============================================================================
@router.post(
    "/ip_ranges",
    response_model=ipm_schemas.IpRangeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_ip_range(
    range_create: ipm_schemas.IpRangeCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """새 IP 대역을 등록합니다. 다른 대역과 겹쳐도 됩니다."""
    return await ipm_crud.ip_range.create(db=db, obj_in=range_create)


@router.get("/ip_ranges", response_model=List[ipm_schemas.IpRangeResponse])
async def read_ip_ranges(
    device: Optional[str] = Query(None, description="장비 구분 필터"),
    skip: int = 0, limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await ipm_crud.ip_range.get_multi(db, skip=skip, limit=limit, device=device)


@router.get("/ip_ranges/{range_id}", response_model=ipm_schemas.IpRangeResponse)
async def read_ip_range(
    range_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_range = await ipm_crud.ip_range.get(db, id=range_id)
    if db_range is None:
        raise HTTPException(status_code=404, detail="IP range not found.")
    return db_range


@router.get("/ip_ranges/{range_id}/addresses", response_model=List[ipm_schemas.IpDisplayRow])
async def read_ip_range_addresses(
    range_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """
    대역의 모든 주소를 한 행씩 반환합니다.
    상세 정보가 있는 주소는 그 값을, 없는 주소는 빈 값과 '사용가능' 상태를 가집니다.
    """
    db_range = await ipm_crud.ip_range.get(db, id=range_id)
    if db_range is None:
        raise HTTPException(status_code=404, detail="IP range not found.")
    details = await ipm_crud.ip_detail.get_by_range(db, range_id=range_id)
    return addressing.resolve_display_rows(db_range, details, settings.IP_RANGE_MAX_SIZE)


@router.put("/ip_ranges/{range_id}", response_model=ipm_schemas.IpRangeResponse)
async def update_ip_range(
    range_id: int,
    range_update: ipm_schemas.IpRangeUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    db_range = await ipm_crud.ip_range.get(db, id=range_id)
    if db_range is None:
        raise HTTPException(status_code=404, detail="IP range not found.")
    return await ipm_crud.ip_range.update(db=db, db_obj=db_range, obj_in=range_update)


@router.delete("/ip_ranges/{range_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ip_range(
    range_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """대역만 삭제합니다. 소속 상세 정보는 그대로 남습니다."""
    if await ipm_crud.ip_range.delete(db, id=range_id) is None:
        raise HTTPException(status_code=404, detail="IP range not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 2. ipm.ip_details 엔드포인트
# =============================================================================
@router.get("/ip_details", response_model=List[ipm_schemas.IpDetailResponse])
async def read_ip_details(
    range_id: int = Query(..., description="대역 ID"),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await ipm_crud.ip_detail.get_by_range(db, range_id=range_id)


@router.get("/ip_details/search", response_model=List[ipm_schemas.IpSearchResult])
async def search_ip_details(
    q: str = Query(..., min_length=1, description="IP/사용자/부서 검색어"),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await ipm_crud.ip_detail.search(db, q=q)


@router.put("/ip_details", response_model=ipm_schemas.IpDetailResponse)
async def upsert_ip_detail(
    detail_in: ipm_schemas.IpDetailUpsert,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """
    (range_id, ip_address)의 할당 정보를 저장합니다. 이미 있으면 수정합니다.
    상태는 부서/사용자/용도 값으로 다시 계산됩니다.
    """
    return await ipm_crud.ip_detail.upsert(db, obj_in=detail_in)


@router.post("/ip_details/import", response_model=ipm_schemas.IpImportResult)
async def import_ip_details(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """
    엑셀/CSV 파일의 주소 할당 정보를 일괄 등록합니다.
    어느 대역에도 속하지 않는 주소는 건너뛰고 그 수를 반환합니다.
    """
    raw = await file.read()
    df = spreadsheet.read_table(raw, file.filename)
    rows = spreadsheet.map_rows(df, IMPORT_COLUMNS)
    applied, skipped = await ipm_crud.ip_detail.bulk_assign_from_import(db, rows=rows)
    return {"applied": applied, "skipped": skipped}


@router.delete("/ip_details/{detail_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ip_detail(
    detail_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    if await ipm_crud.ip_detail.delete(db, id=detail_id) is None:
        raise HTTPException(status_code=404, detail="IP detail not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
