# app/core/database.py

"""
애플리케이션의 데이터베이스 연결 및 세션 관리를 담당하는 모듈입니다.

- SQLModel의 비동기 엔진을 설정합니다.
- 요청 단위 세션과 ARQ 태스크용 세션 컨텍스트를 제공합니다.
- SQLite URL(로컬 개발/테스트)에서는 도메인 스키마를 기본 스키마로 변환합니다.
"""

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy import text

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings

logger = logging.getLogger(__name__)

# 도메인별 PostgreSQL 스키마 목록 (마이그레이션, 테이블 생성 시 사용)
SCHEMA = ["usr", "inv", "ipm", "rnt"]


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    URL에 맞는 비동기 엔진을 생성합니다.
    SQLite는 스키마를 지원하지 않으므로 schema_translate_map으로 모든 도메인 스키마를 제거합니다.
    """
    if url.startswith("sqlite"):
        kwargs = {
            "echo": echo,
            "execution_options": {"schema_translate_map": {name: None for name in SCHEMA}},
        }
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        return create_async_engine(url, **kwargs)

    return create_async_engine(
        url,
        echo=echo,
        pool_recycle=3600,  # 1시간마다 연결 재활용
        pool_size=10,
        max_overflow=20,
    )


engine: AsyncEngine = build_engine(settings.DATABASE_URL.get_secret_value(), echo=settings.DEBUG_MODE)

# 비동기 세션을 생성하는 '세션 공장'
AsyncSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

metadata = SQLModel.metadata


# =============================================================================
# 데이터베이스 초기화 (개발용, 운영은 Alembic 사용)
# =============================================================================
async def create_db_and_tables(target: AsyncEngine = engine) -> None:
    """
    스키마와 테이블을 생성합니다. 기존 테이블은 삭제하지 않습니다.
    """
    async with target.begin() as conn:
        if target.dialect.name == "postgresql":
            for schema_name in SCHEMA:
                await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema_name}"))
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables are ready (dialect=%s).", target.dialect.name)


# =============================================================================
# 비동기 데이터베이스 세션 의존성 주입
# =============================================================================
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    요청마다 새로운 세션을 생성하고, 요청 처리 후 세션을 닫습니다.
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def get_async_session_context() -> AsyncGenerator[AsyncSession, None]:
    """
    ARQ Task 등 요청 밖에서 사용할 독립적인 세션을 제공하는 컨텍스트 관리자입니다.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
