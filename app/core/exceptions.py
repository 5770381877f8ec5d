# app/core/exceptions.py

"""
도메인 오류 정의 모듈입니다.

서비스/CRUD 계층은 HTTP를 모르는 DomainError 계열 예외를 발생시키고,
main.py에 등록된 예외 핸들러가 이를 {"detail": message} 응답으로 변환합니다.
검증 오류는 항상 데이터 변경 전에 발생해야 합니다.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import status
from sqlalchemy.exc import InterfaceError, OperationalError

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """사용자에게 그대로 보여줄 수 있는 메시지를 가진 도메인 오류의 기본 클래스."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidAddress(DomainError):
    """IPv4 점 표기 형식이 아닌 주소."""


class InvalidRange(DomainError):
    """시작 주소가 끝 주소보다 큰 대역, 또는 대역 밖의 주소."""


class RangeTooLarge(InvalidRange):
    """설정된 최대 크기를 넘는 대역."""


class InsufficientStock(DomainError):
    status_code = status.HTTP_409_CONFLICT


class RecordNotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


class StoreUnavailable(DomainError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ParseFailure(DomainError):
    """업로드 파일 전체를 표로 읽을 수 없는 경우. 행 단위 문제는 기본값으로 복구합니다."""


class NotificationFailure(DomainError):
    status_code = status.HTTP_502_BAD_GATEWAY


@asynccontextmanager
async def store_guard(operation: str) -> AsyncIterator[None]:
    """
    데이터베이스 연결/운영 오류를 StoreUnavailable로 변환합니다.
    부분 적용된 작업이 성공으로 보고되지 않도록 호출자까지 전파합니다.
    """
    try:
        yield
    except (OperationalError, InterfaceError, OSError, TimeoutError) as e:
        logger.error("Store unavailable during '%s': %s", operation, e)
        raise StoreUnavailable(f"저장소에 연결할 수 없습니다 ({operation}).") from e
