# app/core/dependencies.py

"""
FastAPI 애플리케이션의 의존성 주입(Dependency Injection)을 정의하는 모듈입니다.

- 데이터베이스 세션 관리 (get_db_session).
- 현재 인증된 사용자 정보 획득 (security.py에서 재노출).
- 수명 주기에서 생성된 협력 객체 획득 (이메일 발송기, ARQ 풀).
"""

from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.database import get_session as get_main_app_session

# flake8: noqa
from app.core.security import (
    create_access_token,
    get_password_hash,
    verify_password,
    oauth2_scheme,
    get_current_user_from_token,
    get_current_active_user,
    get_current_admin_user,
)
from app.services.notification import EmailProvider, build_email_provider


# --- 데이터베이스 세션 의존성 주입 ---
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    app.core.database.get_session을 래핑한 비동기 세션 제너레이터입니다.
    """
    async for session in get_main_app_session():
        yield session


# --- 수명 주기 협력 객체 ---
def get_notifier(request: Request) -> EmailProvider:
    """
    lifespan에서 app.state에 등록한 이메일 발송기를 반환합니다.
    lifespan 없이 앱이 구동된 경우 설정으로 새로 만듭니다.
    """
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        notifier = build_email_provider(settings)
        request.app.state.notifier = notifier
    return notifier


def get_arq_pool(request: Request) -> Optional[object]:
    """ARQ Redis 풀. Redis에 연결하지 못했다면 None (동기 실행으로 대체)."""
    return getattr(request.app.state, "redis", None)
