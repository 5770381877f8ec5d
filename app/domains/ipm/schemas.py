# app/domains/ipm/schemas.py

"""
'ipm' 도메인 (IP 주소 관리)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.domains.ipm.addressing import IpStatus


# =============================================================================
# 1. IP 대역 (IpRange) 스키마
# =============================================================================
class IpRangeBase(BaseModel):
    title: str = Field(..., max_length=100, description="대역 이름")
    device: Optional[str] = Field(None, max_length=20, description="장비 구분 (A/B/C)")
    start_ip: str = Field(..., description="시작 IP")
    end_ip: str = Field(..., description="끝 IP")
    gateway: Optional[str] = Field(None, description="게이트웨이")
    subnet_mask: Optional[str] = Field(None, description="서브넷 마스크")
    description: Optional[str] = Field(None, description="설명")


class IpRangeCreate(IpRangeBase):
    pass


class IpRangeUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=100)
    device: Optional[str] = Field(None, max_length=20)
    start_ip: Optional[str] = None
    end_ip: Optional[str] = None
    gateway: Optional[str] = None
    subnet_mask: Optional[str] = None
    description: Optional[str] = None


class IpRangeResponse(IpRangeBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# 2. IP 상세 (IpDetail) 스키마
# =============================================================================
class IpDetailUpsert(BaseModel):
    """(range_id, ip_address) 기준 생성 또는 수정. status는 항상 서버에서 파생됩니다."""
    range_id: int = Field(..., description="소속 대역 ID")
    ip_address: str = Field(..., description="IP 주소")
    department: Optional[str] = Field(None, max_length=100, description="사용 부서")
    user: Optional[str] = Field(None, max_length=100, description="사용자")
    usage: Optional[str] = Field(None, max_length=255, description="용도")


class IpDetailResponse(BaseModel):
    id: int
    range_id: int
    ip_address: str
    department: Optional[str] = None
    user: Optional[str] = None
    usage: Optional[str] = None
    status: IpStatus
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class IpSearchResult(IpDetailResponse):
    range_title: str = Field(..., description="소속 대역 이름 (삭제된 대역은 'Unknown Range')")


class IpDisplayRow(BaseModel):
    """대역 화면의 한 행. detail_id가 없으면 상세 정보가 없는 주소입니다."""
    ip_address: str
    range_id: int
    department: str = ""
    user: str = ""
    usage: str = ""
    status: IpStatus
    detail_id: Optional[int] = None

    class Config:
        from_attributes = True


class IpImportResult(BaseModel):
    applied: int = Field(..., description="등록/갱신된 행 수")
    skipped: int = Field(..., description="대역을 찾지 못했거나 주소가 잘못되어 건너뛴 행 수")
