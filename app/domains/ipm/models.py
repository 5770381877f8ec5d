# app/domains/ipm/models.py

"""
'ipm' 도메인 (PostgreSQL 'ipm' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- ip_ranges: 관리 대상 IP 대역. 대역끼리 겹칠 수 있습니다.
- ip_details: 대역 안의 개별 주소 할당 정보. 상세 정보가 없는 주소는 사용가능으로 간주합니다.
  대역을 삭제해도 상세 정보는 삭제하지 않습니다. (range_id에 FK를 두지 않음)
"""

from typing import Optional
from datetime import datetime, UTC
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from app.domains.ipm.addressing import IpStatus


# =============================================================================
# 1. ipm.ip_ranges 테이블 모델
# =============================================================================
class IpRangeBase(SQLModel):
    title: str = Field(max_length=100, description="대역 이름")
    device: Optional[str] = Field(default=None, max_length=20, index=True, description="장비 구분 (A/B/C)")
    start_ip: str = Field(max_length=15, description="시작 IP")
    end_ip: str = Field(max_length=15, description="끝 IP")
    gateway: Optional[str] = Field(default=None, max_length=15, description="게이트웨이")
    subnet_mask: Optional[str] = Field(default=None, max_length=15, description="서브넷 마스크")
    description: Optional[str] = Field(default=None, description="설명")


class IpRange(IpRangeBase, table=True):
    __tablename__ = "ip_ranges"
    __table_args__ = {'schema': 'ipm'}

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
# 2. ipm.ip_details 테이블 모델
# =============================================================================
class IpDetailBase(SQLModel):
    ip_address: str = Field(max_length=15, index=True, description="IP 주소")
    range_id: int = Field(index=True, description="소속 대역 ID")
    department: Optional[str] = Field(default=None, max_length=100, description="사용 부서")
    user: Optional[str] = Field(default=None, max_length=100, description="사용자")
    usage: Optional[str] = Field(default=None, max_length=255, description="용도")
    status: IpStatus = Field(default=IpStatus.AVAILABLE, description="사용중 / 사용가능 (저장 시 파생)")


class IpDetail(IpDetailBase, table=True):
    __tablename__ = "ip_details"
    __table_args__ = (
        UniqueConstraint("range_id", "ip_address", name="uq_ip_details_range_ip"),
        {'schema': 'ipm'},
    )

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
