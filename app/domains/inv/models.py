# app/domains/inv/models.py

"""
'inv' 도메인 (PostgreSQL 'inv' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- 기준 정보: 제품군(product_groups), 창고(warehouses), 거래처(customers)
- 품목(items): quantity는 해당 품목의 입고 합계 - 출고 합계를 캐시한 값
- 입출고 거래(transactions): 생성 후 변경/삭제하지 않는 원장 레코드
"""

from typing import Optional
from datetime import datetime, date, UTC
from enum import Enum
from sqlmodel import Field, SQLModel, Column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


class TransactionType(str, Enum):
    IN = "IN"    # 입고
    OUT = "OUT"  # 출고


# =============================================================================
# 1. inv.product_groups 테이블 모델
# =============================================================================
class ProductGroupBase(SQLModel):
    name: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="제품군명")
    description: Optional[str] = Field(default=None, description="설명")


class ProductGroup(ProductGroupBase, table=True):
    __tablename__ = "product_groups"
    __table_args__ = {'schema': 'inv'}

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


# =============================================================================
# 2. inv.warehouses 테이블 모델
# =============================================================================
class WarehouseBase(SQLModel):
    name: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="창고명")
    location: Optional[str] = Field(default=None, max_length=255, description="위치")
    manager: Optional[str] = Field(default=None, max_length=100, description="담당자")
    email: Optional[str] = Field(default=None, max_length=100, description="담당자 이메일 (출고 신청 수신)")
    remarks: Optional[str] = Field(default=None, description="비고")


class Warehouse(WarehouseBase, table=True):
    __tablename__ = "warehouses"
    __table_args__ = {'schema': 'inv'}

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


# =============================================================================
# 3. inv.customers 테이블 모델
# =============================================================================
class CustomerBase(SQLModel):
    douzone_number: Optional[str] = Field(default=None, max_length=50, index=True, description="더존 거래처 코드")
    name: str = Field(max_length=100, description="거래처명")
    contact: Optional[str] = Field(default=None, max_length=50, description="연락처")
    email: Optional[str] = Field(default=None, max_length=100, description="이메일")
    address: Optional[str] = Field(default=None, max_length=255, description="주소")
    remarks: Optional[str] = Field(default=None, description="비고")


class Customer(CustomerBase, table=True):
    __tablename__ = "customers"
    __table_args__ = {'schema': 'inv'}

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


# =============================================================================
# 4. inv.items 테이블 모델
# =============================================================================
class ItemBase(SQLModel):
    name: str = Field(max_length=100, index=True, description="품목명")
    group: Optional[str] = Field(default=None, max_length=100, description="제품군명")
    warehouse: Optional[str] = Field(default=None, max_length=100, index=True, description="보관 창고명")
    part_number: Optional[str] = Field(default=None, max_length=100, description="품번")
    quantity: int = Field(default=0, description="현재 재고 수량 (원장 합계 캐시)")
    price: int = Field(default=0, description="단가")
    remarks: Optional[str] = Field(default=None, description="비고")


class Item(ItemBase, table=True):
    __tablename__ = "items"
    __table_args__ = {'schema': 'inv'}

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


# =============================================================================
# 5. inv.transactions 테이블 모델
# =============================================================================
class TransactionBase(SQLModel):
    item_id: int = Field(foreign_key="inv.items.id", index=True, description="품목 ID")
    item_name: str = Field(max_length=100, description="거래 시점의 품목명 (비정규화 사본)")
    type: TransactionType = Field(description="IN(입고) / OUT(출고)")
    warehouse: Optional[str] = Field(default=None, max_length=100, description="창고명")
    quantity: int = Field(gt=0, description="거래 수량 (항상 양수)")
    transaction_date: date = Field(index=True, description="거래일")
    target: Optional[str] = Field(default=None, max_length=100, description="출고처/입고처")
    remarks: Optional[str] = Field(default=None, description="비고")


class Transaction(TransactionBase, table=True):
    __tablename__ = "transactions"
    __table_args__ = {'schema': 'inv'}

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
