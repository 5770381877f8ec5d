# app/domains/inv/routers.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.domains.inv import crud as inv_crud, schemas as inv_schemas, services as inv_services
from app.domains.inv import models as inv_models, tasks as inv_tasks
from app.domains.usr.models import User as UsrUser
from app.services.notification import EmailProvider
from app.utils import spreadsheet

router = APIRouter(
    tags=["Inventory Management (재고 관리)"],
    responses={404: {"description": "Not found"}},
)

TRANSACTION_EXPORT_COLUMNS = ["일자", "구분", "품목명", "창고", "수량", "대상", "비고"]


# =============================================================================
# 1. inv.product_groups 엔드포인트
# =============================================================================
@router.post(
    "/product_groups",
    response_model=inv_schemas.ProductGroupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_product_group(
    group_create: inv_schemas.ProductGroupCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """새로운 제품군을 생성합니다. 관리자 권한이 필요합니다."""
    if await inv_crud.product_group.get_by_name(db, name=group_create.name):
        raise HTTPException(status_code=400, detail="Product group with this name already exists.")
    return await inv_crud.product_group.create(db=db, obj_in=group_create)


@router.get("/product_groups", response_model=List[inv_schemas.ProductGroupResponse])
async def read_product_groups(
    skip: int = 0, limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await inv_crud.product_group.get_multi(db, skip=skip, limit=limit)


@router.put("/product_groups/{group_id}", response_model=inv_schemas.ProductGroupResponse)
async def update_product_group(
    group_id: int,
    group_update: inv_schemas.ProductGroupUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    db_group = await inv_crud.product_group.get(db, id=group_id)
    if db_group is None:
        raise HTTPException(status_code=404, detail="Product group not found.")
    if group_update.name and group_update.name != db_group.name:
        if await inv_crud.product_group.get_by_name(db, name=group_update.name):
            raise HTTPException(status_code=400, detail="Product group with this name already exists.")
    return await inv_crud.product_group.update(db=db, db_obj=db_group, obj_in=group_update)


@router.delete("/product_groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product_group(
    group_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    if await inv_crud.product_group.delete(db, id=group_id) is None:
        raise HTTPException(status_code=404, detail="Product group not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 2. inv.warehouses 엔드포인트
# =============================================================================
@router.post(
    "/warehouses",
    response_model=inv_schemas.WarehouseResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_warehouse(
    warehouse_create: inv_schemas.WarehouseCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """새로운 창고를 등록합니다. 관리자 권한이 필요합니다."""
    if await inv_crud.warehouse.get_by_name(db, name=warehouse_create.name):
        raise HTTPException(status_code=400, detail="Warehouse with this name already exists.")
    return await inv_crud.warehouse.create(db=db, obj_in=warehouse_create)


@router.get("/warehouses", response_model=List[inv_schemas.WarehouseResponse])
async def read_warehouses(
    skip: int = 0, limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await inv_crud.warehouse.get_multi(db, skip=skip, limit=limit)


@router.put("/warehouses/{warehouse_id}", response_model=inv_schemas.WarehouseResponse)
async def update_warehouse(
    warehouse_id: int,
    warehouse_update: inv_schemas.WarehouseUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    db_warehouse = await inv_crud.warehouse.get(db, id=warehouse_id)
    if db_warehouse is None:
        raise HTTPException(status_code=404, detail="Warehouse not found.")
    if warehouse_update.name and warehouse_update.name != db_warehouse.name:
        if await inv_crud.warehouse.get_by_name(db, name=warehouse_update.name):
            raise HTTPException(status_code=400, detail="Warehouse with this name already exists.")
    return await inv_crud.warehouse.update(db=db, db_obj=db_warehouse, obj_in=warehouse_update)


@router.delete("/warehouses/{warehouse_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_warehouse(
    warehouse_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    if await inv_crud.warehouse.delete(db, id=warehouse_id) is None:
        raise HTTPException(status_code=404, detail="Warehouse not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 3. inv.customers 엔드포인트
# =============================================================================
@router.post(
    "/customers",
    response_model=inv_schemas.CustomerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_customer(
    customer_create: inv_schemas.CustomerCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    return await inv_crud.customer.create(db=db, obj_in=customer_create)


@router.get("/customers", response_model=List[inv_schemas.CustomerResponse])
async def read_customers(
    q: Optional[str] = Query(None, description="거래처명/더존 코드 검색어"),
    skip: int = 0, limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    if q:
        return await inv_crud.customer.search(db, q=q, skip=skip, limit=limit)
    return await inv_crud.customer.get_multi(db, skip=skip, limit=limit)


@router.put("/customers/{customer_id}", response_model=inv_schemas.CustomerResponse)
async def update_customer(
    customer_id: int,
    customer_update: inv_schemas.CustomerUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    db_customer = await inv_crud.customer.get(db, id=customer_id)
    if db_customer is None:
        raise HTTPException(status_code=404, detail="Customer not found.")
    return await inv_crud.customer.update(db=db, db_obj=db_customer, obj_in=customer_update)


@router.delete("/customers/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    if await inv_crud.customer.delete(db, id=customer_id) is None:
        raise HTTPException(status_code=404, detail="Customer not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 4. inv.items 엔드포인트
# =============================================================================
@router.post(
    "/items",
    response_model=inv_schemas.ItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_item(
    item_create: inv_schemas.ItemCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """새 품목을 등록합니다. 초기 수량은 '초기 재고' 입고 거래로 기록됩니다."""
    return await inv_crud.item.create(db=db, obj_in=item_create)


@router.get("/items", response_model=List[inv_schemas.ItemResponse])
async def read_items(
    warehouse: Optional[str] = Query(None, description="창고명 필터"),
    skip: int = 0, limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await inv_crud.item.get_multi(db, skip=skip, limit=limit, warehouse=warehouse)


@router.post("/items/reconcile", response_model=inv_schemas.ReconcileResponse)
async def reconcile_items(
    db: AsyncSession = Depends(deps.get_db_session),
    arq_redis_pool=Depends(deps.get_arq_pool),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """
    전체 품목의 저장 수량과 원장 합계를 비교합니다. (읽기 전용)
    ARQ 워커가 있으면 작업을 위임하고, 없으면 즉시 실행하여 불일치 목록을 반환합니다.
    """
    if arq_redis_pool:
        await arq_redis_pool.enqueue_job("audit_stock_ledger_task")
        return {"enqueued": True, "drifts": []}
    result = await inv_tasks.audit_stock_ledger_task({"db": db})
    return {"enqueued": False, "drifts": result["drifts"]}


@router.get("/items/{item_id}", response_model=inv_schemas.ItemResponse)
async def read_item(
    item_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_item = await inv_crud.item.get(db, id=item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Item not found.")
    return db_item


@router.get("/items/{item_id}/stock", response_model=inv_schemas.StockCheckResponse)
async def read_item_stock(
    item_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """저장된 수량과 거래 재계산 수량을 함께 반환합니다."""
    db_item = await inv_crud.item.get(db, id=item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Item not found.")
    return await inv_crud.transaction.check_stock(db, item=db_item)


@router.put("/items/{item_id}", response_model=inv_schemas.ItemResponse)
async def update_item(
    item_id: int,
    item_update: inv_schemas.ItemUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """품목 정보를 수정합니다. quantity 변경은 관리자 재고 보정입니다."""
    db_item = await inv_crud.item.get(db, id=item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Item not found.")
    return await inv_crud.item.update(db=db, db_obj=db_item, obj_in=item_update)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    await inv_crud.item.remove(db, id=item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 5. inv.transactions 엔드포인트 (생성/조회만 가능)
# =============================================================================
@router.post(
    "/transactions",
    response_model=inv_schemas.TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    transaction_create: inv_schemas.TransactionCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """입고/출고 거래를 기록합니다. 출고는 현재 재고를 넘을 수 없습니다."""
    db_item = await inv_crud.item.get(db, id=transaction_create.item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Item not found.")
    if transaction_create.type == inv_models.TransactionType.OUT:
        inv_crud.ensure_sufficient_stock(db_item, transaction_create.quantity)

    return await inv_crud.transaction.record_transaction(
        db,
        item_id=transaction_create.item_id,
        type=transaction_create.type,
        quantity=transaction_create.quantity,
        transaction_date=transaction_create.transaction_date,
        warehouse=transaction_create.warehouse,
        target=transaction_create.target,
        remarks=transaction_create.remarks,
    )


def _check_period(start_date: Optional[date], end_date: Optional[date]) -> None:
    if (start_date is None) != (end_date is None):
        raise HTTPException(status_code=400, detail="start_date and end_date must be given together.")


@router.get("/transactions", response_model=List[inv_schemas.TransactionResponse])
async def read_transactions(
    start_date: Optional[date] = Query(None, description="시작일 (포함)"),
    end_date: Optional[date] = Query(None, description="종료일 (포함)"),
    item_id: Optional[int] = Query(None, description="품목 ID 필터"),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """기간 내 거래를 저장 순서대로 조회합니다. 기간 미지정 시 전체를 반환합니다."""
    _check_period(start_date, end_date)
    return await inv_crud.transaction.query_in_range(
        db, start_date=start_date, end_date=end_date, item_id=item_id
    )


@router.get("/transactions/export")
async def export_transactions(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """기간 내 거래를 엑셀 파일로 내려받습니다."""
    _check_period(start_date, end_date)
    transactions = await inv_crud.transaction.query_in_range(db, start_date=start_date, end_date=end_date)
    rows = [
        {
            "일자": tx.transaction_date.isoformat(),
            "구분": "입고" if tx.type == inv_models.TransactionType.IN else "출고",
            "품목명": tx.item_name,
            "창고": tx.warehouse or "",
            "수량": tx.quantity,
            "대상": tx.target or "",
            "비고": tx.remarks or "",
        }
        for tx in transactions
    ]
    content = spreadsheet.write_workbook(rows, sheet_name="입출고내역", columns=TRANSACTION_EXPORT_COLUMNS)
    filename = f"입출고내역_{date.today():%Y%m%d}.xlsx"
    return Response(
        content=content,
        media_type=spreadsheet.XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": spreadsheet.content_disposition(filename)},
    )


@router.get("/transactions/{transaction_id}", response_model=inv_schemas.TransactionResponse)
async def read_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_tx = await inv_crud.transaction.get(db, transaction_id)
    if db_tx is None:
        raise HTTPException(status_code=404, detail="Transaction not found.")
    return db_tx


# =============================================================================
# 6. 출고 신청 엔드포인트
# =============================================================================
@router.post(
    "/outbound_requests",
    response_model=List[inv_schemas.TransactionResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_outbound_request(
    request_in: inv_schemas.OutboundRequestCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    notifier: EmailProvider = Depends(deps.get_notifier),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """
    창고 담당자에게 출고 신청 메일을 보낸 뒤 품목별 출고 거래를 기록합니다.
    메일 발송에 실패하면 거래는 기록되지 않습니다.
    """
    return await inv_services.request_outbound(
        db, request=request_in, requester=current_user, notifier=notifier
    )
