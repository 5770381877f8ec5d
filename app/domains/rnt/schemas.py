# app/domains/rnt/schemas.py

"""
'rnt' 도메인 (임대 관리)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class RentalBase(BaseModel):
    type: Optional[str] = Field(None, max_length=50, description="구분")
    ho: str = Field(..., max_length=50, description="호실")
    area: Optional[str] = Field(None, max_length=50, description="임대면적")
    tenant_name: Optional[str] = Field(None, max_length=100, description="상호/성명")
    contact: Optional[str] = Field(None, max_length=50, description="연락처")
    email: Optional[str] = Field(None, max_length=100, description="이메일")
    rental_type: Optional[str] = Field(None, max_length=20, description="임대형태 (월세, 전세, 반전세)")
    deposit: int = Field(0, ge=0, description="보증금")
    monthly_rent: int = Field(0, ge=0, description="월임대료")
    maintenance_fee: int = Field(0, ge=0, description="월관리비")
    parking_fee: int = Field(0, ge=0, description="주차비")
    payment_date: Optional[str] = Field(None, max_length=50, description="입금날짜")
    contract_start_date: Optional[date] = Field(None, description="계약 시작일")
    contract_end_date: Optional[date] = Field(None, description="계약 종료일")
    remarks: Optional[str] = Field(None, description="비고")


class RentalCreate(RentalBase):
    pass


class RentalUpdate(BaseModel):
    type: Optional[str] = Field(None, max_length=50)
    ho: Optional[str] = Field(None, max_length=50)
    area: Optional[str] = Field(None, max_length=50)
    tenant_name: Optional[str] = Field(None, max_length=100)
    contact: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=100)
    rental_type: Optional[str] = Field(None, max_length=20)
    deposit: Optional[int] = Field(None, ge=0)
    monthly_rent: Optional[int] = Field(None, ge=0)
    maintenance_fee: Optional[int] = Field(None, ge=0)
    parking_fee: Optional[int] = Field(None, ge=0)
    payment_date: Optional[str] = Field(None, max_length=50)
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    remarks: Optional[str] = None


class RentalResponse(RentalBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RentalImportResult(BaseModel):
    created: int = Field(..., description="생성된 임대 계약 수")
