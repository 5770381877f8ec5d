# app/domains/rnt/routers.py

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.domains.rnt import crud as rnt_crud, excel as rnt_excel, schemas as rnt_schemas
from app.domains.usr.models import User as UsrUser
from app.utils import spreadsheet

router = APIRouter(
    tags=["Rental Management (임대 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 엑셀 가져오기 / 내보내기
# =============================================================================
@router.post("/rentals/import", response_model=rnt_schemas.RentalImportResult)
async def import_rentals(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """
    임대현황 엑셀(세 번째 줄이 헤더)을 읽어 행마다 임대 계약을 생성합니다.
    금액 컬럼의 천 단위 구분자는 무시하고, 읽을 수 없는 값은 0으로 저장합니다.
    """
    raw = await file.read()
    df = spreadsheet.read_table(raw, file.filename, header_row=rnt_excel.HEADER_ROW)
    rows = rnt_excel.rows_to_rentals(spreadsheet.map_rows(df, rnt_excel.IMPORT_COLUMNS))
    created = await rnt_crud.rental.create_many(db, rows=rows)
    return {"created": created}


@router.get("/rentals/export")
async def export_rentals(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    rentals = await rnt_crud.rental.get_all(db)
    content = spreadsheet.write_workbook(
        rnt_excel.export_rows(rentals),
        sheet_name=rnt_excel.SHEET_NAME,
        columns=rnt_excel.EXPORT_COLUMNS,
    )
    filename = f"{rnt_excel.SHEET_NAME}_{date.today():%Y%m%d}.xlsx"
    return Response(
        content=content,
        media_type=spreadsheet.XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": spreadsheet.content_disposition(filename)},
    )


# =============================================================================
# 2. rnt.rentals 엔드포인트
# =============================================================================
@router.post(
    "/rentals",
    response_model=rnt_schemas.RentalResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_rental(
    rental_create: rnt_schemas.RentalCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    return await rnt_crud.rental.create(db=db, obj_in=rental_create)


@router.get("/rentals", response_model=List[rnt_schemas.RentalResponse])
async def read_rentals(
    skip: int = 0, limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await rnt_crud.rental.get_multi(db, skip=skip, limit=limit)


@router.get("/rentals/{rental_id}", response_model=rnt_schemas.RentalResponse)
async def read_rental(
    rental_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_rental = await rnt_crud.rental.get(db, id=rental_id)
    if db_rental is None:
        raise HTTPException(status_code=404, detail="Rental not found.")
    return db_rental


@router.put("/rentals/{rental_id}", response_model=rnt_schemas.RentalResponse)
async def update_rental(
    rental_id: int,
    rental_update: rnt_schemas.RentalUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """전달된 필드만 수정합니다."""
    db_rental = await rnt_crud.rental.get(db, id=rental_id)
    if db_rental is None:
        raise HTTPException(status_code=404, detail="Rental not found.")
    return await rnt_crud.rental.update(db=db, db_obj=db_rental, obj_in=rental_update)


@router.delete("/rentals/{rental_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rental(
    rental_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    if await rnt_crud.rental.delete(db, id=rental_id) is None:
        raise HTTPException(status_code=404, detail="Rental not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
