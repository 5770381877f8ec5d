# app/domains/rnt/models.py

"""
'rnt' 도메인 (PostgreSQL 'rnt' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- rentals: 호실별 임대 계약 현황. 금액은 원 단위 정수입니다.
"""

from typing import Optional
from datetime import datetime, date, UTC
from sqlmodel import Field, SQLModel, Column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 1. rnt.rentals 테이블 모델
# =============================================================================
class RentalBase(SQLModel):
    type: Optional[str] = Field(default=None, max_length=50, description="구분 (직원, 일반인 등)")
    ho: str = Field(max_length=50, index=True, description="호실")
    area: Optional[str] = Field(default=None, max_length=50, description="임대면적")
    tenant_name: Optional[str] = Field(default=None, max_length=100, description="상호/성명")
    contact: Optional[str] = Field(default=None, max_length=50, description="연락처")
    email: Optional[str] = Field(default=None, max_length=100, description="이메일")
    rental_type: Optional[str] = Field(default=None, max_length=20, description="임대형태 (월세, 전세, 반전세)")
    deposit: int = Field(default=0, description="보증금")
    monthly_rent: int = Field(default=0, description="월임대료")
    maintenance_fee: int = Field(default=0, description="월관리비")
    parking_fee: int = Field(default=0, description="주차비")
    payment_date: Optional[str] = Field(default=None, max_length=50, description="입금날짜 (자유 형식)")
    contract_start_date: Optional[date] = Field(default=None, description="계약 시작일")
    contract_end_date: Optional[date] = Field(default=None, description="계약 종료일")
    remarks: Optional[str] = Field(default=None, description="비고")


class Rental(RentalBase, table=True):
    __tablename__ = "rentals"
    __table_args__ = {'schema': 'rnt'}

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
