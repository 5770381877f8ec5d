# app/domains/inv/crud.py

"""
'inv' 도메인의 CRUD 및 재고 원장 로직을 담당하는 모듈입니다.

재고 원장 규칙:
- 거래(Transaction)는 생성만 가능하며 수정/삭제하지 않습니다.
- Item.quantity는 입고 합계 - 출고 합계를 캐시한 값이며, 거래 기록 시 두 단계로 갱신됩니다.
  (a) 거래 레코드 저장 (b) 품목을 다시 읽어 수량을 더하거나 빼서 저장
  (b)가 실패해도 (a)는 되돌리지 않으며, 차이는 recompute_stock / find_drifts로 확인합니다.
- 출고 시 재고 부족 검사는 호출자(라우터/서비스)가 ensure_sufficient_stock으로 먼저 수행합니다.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

from fastapi import HTTPException, status
from sqlalchemy import case, func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.crud_base import CRUDBase
from app.core.exceptions import (
    DomainError, InsufficientStock, RecordNotFound, StoreUnavailable, store_guard,
)
from app.domains.inv import models as inv_models
from app.domains.inv import schemas as inv_schemas

logger = logging.getLogger(__name__)


def ensure_sufficient_stock(item: inv_models.Item, quantity: int) -> None:
    """출고 전 호출자 측 재고 검사. 부족하면 아무것도 변경하기 전에 InsufficientStock."""
    if item.quantity < quantity:
        raise InsufficientStock(
            f"재고가 부족합니다. '{item.name}' 요청: {quantity}, 현재: {item.quantity}"
        )


def signed_quantity(tx_type: inv_models.TransactionType, quantity: int) -> int:
    return quantity if tx_type == inv_models.TransactionType.IN else -quantity


# =============================================================================
# 1. 기준 정보 CRUD
# =============================================================================
class ProductGroupCRUD(
    CRUDBase[
        inv_models.ProductGroup,
        inv_schemas.ProductGroupCreate,
        inv_schemas.ProductGroupUpdate,
    ]
):
    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[inv_models.ProductGroup]:
        return await self.get_by_attribute(db, attribute="name", value=name)


class WarehouseCRUD(
    CRUDBase[
        inv_models.Warehouse,
        inv_schemas.WarehouseCreate,
        inv_schemas.WarehouseUpdate,
    ]
):
    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[inv_models.Warehouse]:
        return await self.get_by_attribute(db, attribute="name", value=name)


class CustomerCRUD(
    CRUDBase[
        inv_models.Customer,
        inv_schemas.CustomerCreate,
        inv_schemas.CustomerUpdate,
    ]
):
    async def search(
        self, db: AsyncSession, *, q: str, skip: int = 0, limit: int = 100
    ) -> List[inv_models.Customer]:
        """거래처명 또는 더존 코드에 검색어가 포함된 거래처를 찾습니다."""
        pattern = f"%{q}%"
        query = (
            select(inv_models.Customer)
            .where(or_(
                inv_models.Customer.name.ilike(pattern),
                inv_models.Customer.douzone_number.ilike(pattern),
            ))
            .order_by(inv_models.Customer.id)
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(query)
        return result.scalars().all()


# =============================================================================
# 2. 품목 CRUD
# =============================================================================
class ItemCRUD(
    CRUDBase[
        inv_models.Item,
        inv_schemas.ItemCreate,
        inv_schemas.ItemUpdate,
    ]
):
    async def create(
        self, db: AsyncSession, *, obj_in: Union[inv_schemas.ItemCreate, Dict[str, Any]]
    ) -> inv_models.Item:
        """
        품목을 생성합니다. 초기 수량은 '초기 재고' 입고 거래로 기록하여 원장과 일치시킵니다.
        """
        data = dict(obj_in) if isinstance(obj_in, dict) else obj_in.model_dump()
        if not data.get("warehouse"):
            data["warehouse"] = settings.DEFAULT_WAREHOUSE
        opening_quantity = data.pop("quantity", 0) or 0

        db_obj = await super().create(db, obj_in={**data, "quantity": 0})
        if opening_quantity > 0:
            await transaction.record_transaction(
                db,
                item_id=db_obj.id,
                type=inv_models.TransactionType.IN,
                quantity=opening_quantity,
                warehouse=db_obj.warehouse,
                remarks="초기 재고",
            )
            await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: inv_models.Item,
        obj_in: Union[inv_schemas.ItemUpdate, Dict[str, Any]],
    ) -> inv_models.Item:
        """
        품목을 부분 수정합니다. quantity 변경은 관리자 보정이며 원장과 달라질 수 있습니다.
        """
        update_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        new_quantity = update_data.get("quantity")
        if new_quantity is not None and new_quantity != db_obj.quantity:
            logger.warning(
                "Manual stock correction for item %s ('%s'): %s -> %s",
                db_obj.id, db_obj.name, db_obj.quantity, new_quantity,
            )
        return await super().update(db, db_obj=db_obj, obj_in=update_data)

    async def remove(self, db: AsyncSession, *, id: int) -> inv_models.Item:
        """
        품목을 삭제합니다. 거래 이력이 있는 품목은 삭제를 거부합니다.
        """
        item = await self.get(db, id)
        if not item:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")

        result = await db.execute(
            select(inv_models.Transaction.id).where(inv_models.Transaction.item_id == id).limit(1)
        )
        if result.first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete item: transactions exist for this item."
            )
        return await super().delete(db, id=id)


# =============================================================================
# 3. 입출고 원장 (Transaction)
# =============================================================================
class TransactionCRUD:
    """
    거래 기록, 기간 조회, 원장 재계산을 담당합니다. 거래 수정/삭제는 제공하지 않습니다.
    """

    def __init__(self, model=inv_models.Transaction):
        self.model = model
        self._query = CRUDBase(model)

    async def get(self, db: AsyncSession, id: int) -> Optional[inv_models.Transaction]:
        return await db.get(self.model, id)

    async def record_transaction(
        self,
        db: AsyncSession,
        *,
        item_id: int,
        type: inv_models.TransactionType,
        quantity: int,
        transaction_date: Optional[date] = None,
        warehouse: Optional[str] = None,
        target: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> inv_models.Transaction:
        """
        거래를 기록하고 품목 수량을 갱신합니다.
        출고 재고 검사는 호출자의 책임입니다 (ensure_sufficient_stock).
        """
        if quantity <= 0:
            raise DomainError("거래 수량은 0보다 커야 합니다.")

        async with store_guard("load item"):
            item = await db.get(inv_models.Item, item_id)
        if item is None:
            raise RecordNotFound(f"품목을 찾을 수 없습니다 (id={item_id}).")

        transaction = self.model(
            item_id=item.id,
            item_name=item.name,
            type=type,
            warehouse=warehouse or item.warehouse or settings.DEFAULT_WAREHOUSE,
            quantity=quantity,
            transaction_date=transaction_date or date.today(),
            target=target,
            remarks=remarks,
        )

        # (a) 거래 레코드 저장
        async with store_guard("record transaction"):
            db.add(transaction)
            await db.commit()
            await db.refresh(transaction)

        # (b) 품목 수량 갱신. 실패 시 (a)는 남고 불일치가 생깁니다.
        try:
            await self._apply_quantity_change(db, item_id, signed_quantity(type, quantity))
        except (StoreUnavailable, RecordNotFound):
            logger.error(
                "Transaction %s was stored but quantity of item %s was not updated; "
                "run stock reconciliation.",
                transaction.id, item_id,
            )
            raise

        logger.info(
            "Recorded %s transaction %s: item=%s quantity=%s",
            type.value, transaction.id, item_id, quantity,
        )
        return transaction

    async def _apply_quantity_change(self, db: AsyncSession, item_id: int, delta: int) -> inv_models.Item:
        """품목을 다시 읽어 수량에 delta를 더해 저장합니다. (잠금/비교 후 교체 없음)"""
        async with store_guard("update item quantity"):
            item = await db.get(inv_models.Item, item_id, populate_existing=True)
            if item is None:
                raise RecordNotFound(f"품목을 찾을 수 없습니다 (id={item_id}).")
            item.quantity = item.quantity + delta
            db.add(item)
            await db.commit()
            await db.refresh(item)
        return item

    async def query_in_range(
        self,
        db: AsyncSession,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        item_id: Optional[int] = None,
    ) -> List[inv_models.Transaction]:
        """
        거래일이 [start_date, end_date] (양 끝 포함)인 거래를 저장 순서대로 반환합니다.
        """
        async with store_guard("query transactions"):
            return await self._query.get_filtered(
                db,
                filters={"item_id": item_id} if item_id is not None else None,
                date_range_field="transaction_date",
                start_date=start_date,
                end_date=end_date,
                order_desc=False,
                limit=None,
            )

    async def recompute_stock(self, db: AsyncSession, *, item_id: int) -> int:
        """
        해당 품목의 모든 거래를 다시 합산한 수량을 반환합니다. 아무것도 쓰지 않습니다.
        """
        signed = case(
            (self.model.type == inv_models.TransactionType.IN, self.model.quantity),
            else_=-self.model.quantity,
        )
        async with store_guard("recompute stock"):
            result = await db.execute(
                select(func.coalesce(func.sum(signed), 0)).where(self.model.item_id == item_id)
            )
        return int(result.scalar_one())

    async def check_stock(self, db: AsyncSession, *, item: inv_models.Item) -> Dict[str, Any]:
        computed = await self.recompute_stock(db, item_id=item.id)
        return {
            "item_id": item.id,
            "item_name": item.name,
            "stored_quantity": item.quantity,
            "computed_quantity": computed,
            "drift": item.quantity - computed,
        }

    async def find_drifts(self, db: AsyncSession) -> List[Dict[str, Any]]:
        """
        저장된 수량과 원장 합계가 다른 품목 목록을 반환합니다. (읽기 전용)
        """
        signed = case(
            (self.model.type == inv_models.TransactionType.IN, self.model.quantity),
            else_=-self.model.quantity,
        )
        async with store_guard("audit stock ledger"):
            totals_result = await db.execute(
                select(self.model.item_id, func.sum(signed)).group_by(self.model.item_id)
            )
            totals = {item_id: int(total or 0) for item_id, total in totals_result.all()}
            items_result = await db.execute(select(inv_models.Item).order_by(inv_models.Item.id))
            items = items_result.scalars().all()

        drifts = []
        for item in items:
            computed = totals.get(item.id, 0)
            if item.quantity != computed:
                drifts.append({
                    "item_id": item.id,
                    "item_name": item.name,
                    "stored_quantity": item.quantity,
                    "computed_quantity": computed,
                    "drift": item.quantity - computed,
                })
        return drifts


#  각 CRUD 클래스의 인스턴스 생성
product_group = ProductGroupCRUD(inv_models.ProductGroup)
warehouse = WarehouseCRUD(inv_models.Warehouse)
customer = CustomerCRUD(inv_models.Customer)
item = ItemCRUD(inv_models.Item)
transaction = TransactionCRUD(inv_models.Transaction)
