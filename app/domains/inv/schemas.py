# app/domains/inv/schemas.py

"""
'inv' 도메인 (재고 관리)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from app.domains.inv.models import TransactionType


# =============================================================================
# 1. 제품군 (ProductGroup) 스키마
# =============================================================================
class ProductGroupBase(BaseModel):
    name: str = Field(..., max_length=100, description="제품군명")
    description: Optional[str] = Field(None, description="설명")


class ProductGroupCreate(ProductGroupBase):
    pass


class ProductGroupUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class ProductGroupResponse(ProductGroupBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# 2. 창고 (Warehouse) 스키마
# =============================================================================
class WarehouseBase(BaseModel):
    name: str = Field(..., max_length=100, description="창고명")
    location: Optional[str] = Field(None, max_length=255, description="위치")
    manager: Optional[str] = Field(None, max_length=100, description="담당자")
    email: Optional[EmailStr] = Field(None, description="담당자 이메일")
    remarks: Optional[str] = Field(None, description="비고")


class WarehouseCreate(WarehouseBase):
    pass


class WarehouseUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=255)
    manager: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    remarks: Optional[str] = None


class WarehouseResponse(WarehouseBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# 3. 거래처 (Customer) 스키마
# =============================================================================
class CustomerBase(BaseModel):
    douzone_number: Optional[str] = Field(None, max_length=50, description="더존 거래처 코드")
    name: str = Field(..., max_length=100, description="거래처명")
    contact: Optional[str] = Field(None, max_length=50, description="연락처")
    email: Optional[str] = Field(None, max_length=100, description="이메일")
    address: Optional[str] = Field(None, max_length=255, description="주소")
    remarks: Optional[str] = Field(None, description="비고")


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    douzone_number: Optional[str] = Field(None, max_length=50)
    name: Optional[str] = Field(None, max_length=100)
    contact: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    remarks: Optional[str] = None


class CustomerResponse(CustomerBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# 4. 품목 (Item) 스키마
# =============================================================================
class ItemBase(BaseModel):
    name: str = Field(..., max_length=100, description="품목명")
    group: Optional[str] = Field(None, max_length=100, description="제품군명")
    warehouse: Optional[str] = Field(None, max_length=100, description="창고명 (미지정 시 기본 창고)")
    part_number: Optional[str] = Field(None, max_length=100, description="품번")
    price: int = Field(0, ge=0, description="단가")
    remarks: Optional[str] = Field(None, description="비고")


class ItemCreate(ItemBase):
    quantity: int = Field(0, ge=0, description="초기 재고 수량")


class ItemUpdate(BaseModel):
    """
    품목 부분 수정. quantity를 보내면 관리자 재고 보정으로 취급됩니다.
    """
    name: Optional[str] = Field(None, max_length=100)
    group: Optional[str] = Field(None, max_length=100)
    warehouse: Optional[str] = Field(None, max_length=100)
    part_number: Optional[str] = Field(None, max_length=100)
    quantity: Optional[int] = Field(None, ge=0, description="재고 보정 수량")
    price: Optional[int] = Field(None, ge=0)
    remarks: Optional[str] = None


class ItemResponse(ItemBase):
    id: int
    quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StockCheckResponse(BaseModel):
    """저장된 재고와 원장 재계산 값의 비교 결과."""
    item_id: int
    item_name: str
    stored_quantity: int
    computed_quantity: int
    drift: int = Field(..., description="stored_quantity - computed_quantity")


class ReconcileResponse(BaseModel):
    enqueued: bool = Field(..., description="ARQ 워커로 위임되었는지 여부")
    drifts: List[StockCheckResponse] = Field(default_factory=list)


# =============================================================================
# 5. 입출고 거래 (Transaction) 스키마
# =============================================================================
class TransactionCreate(BaseModel):
    item_id: int = Field(..., description="품목 ID")
    type: TransactionType = Field(..., description="IN(입고) / OUT(출고)")
    quantity: int = Field(..., gt=0, description="거래 수량 (양수)")
    transaction_date: Optional[date] = Field(None, description="거래일 (미지정 시 오늘)")
    warehouse: Optional[str] = Field(None, max_length=100, description="창고명 (미지정 시 품목의 창고)")
    target: Optional[str] = Field(None, max_length=100, description="출고처/입고처")
    remarks: Optional[str] = Field(None, description="비고")


class TransactionResponse(BaseModel):
    id: int
    item_id: int
    item_name: str
    type: TransactionType
    warehouse: Optional[str] = None
    quantity: int
    transaction_date: date
    target: Optional[str] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# 6. 출고 신청 (Outbound request) 스키마
# =============================================================================
class OutboundLine(BaseModel):
    item_id: int = Field(..., description="품목 ID")
    quantity: int = Field(..., gt=0, description="출고 수량")


class OutboundRequestCreate(BaseModel):
    warehouse: str = Field(..., description="출고 창고명")
    customer_id: int = Field(..., description="출고처(거래처) ID")
    items: List[OutboundLine] = Field(..., min_length=1, description="출고 품목 목록")
    remarks: Optional[str] = Field(None, description="요청 사항")
