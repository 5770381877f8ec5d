# app/main.py

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from arq import cron
from arq.connections import create_pool, RedisSettings
from redis.exceptions import RedisError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# 핵심 설정 및 데이터베이스 모듈 임포트
from app.core.config import settings
from app.core.database import engine
from app.core import dependencies as deps
from app.core.exceptions import DomainError, StoreUnavailable, store_guard
from app.services.notification import build_email_provider

from app import API_PREFIX

# 태스크 모듈 임포트
from app.core import tasks as core_tasks
from app.domains.inv import tasks as inv_tasks

# 도메인 라우터 임포트
from app.domains.usr.routers import router as usr_router
from app.domains.inv.routers import router as inv_router
from app.domains.ipm.routers import router as ipm_router
from app.domains.rnt.routers import router as rnt_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# ARQ 워커가 실행할 태스크 함수 목록
worker_functions = [
    core_tasks.health_check_database_task,
    inv_tasks.audit_stock_ledger_task,
]


# ARQ 워커 설정 클래스 (arq app.main.ArqWorkerSettings)
class ArqWorkerSettings:
    redis_settings = RedisSettings(host=settings.REDIS_HOST, port=settings.REDIS_PORT)
    functions = worker_functions
    cron_jobs = [
        # 매일 00:00 데이터베이스 헬스 체크
        cron(core_tasks.health_check_database_task, hour=0, minute=0, timeout=300, keep_result=600),
        # 매일 01:00 재고 원장 점검 (불일치는 로그로만 남김)
        cron(inv_tasks.audit_stock_ledger_task, hour=1, minute=0, timeout=1800, keep_result=3600),
    ]


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    ARQ Redis 풀과 이메일 발송기를 생성하여 app.state에 보관하고, 종료 시 정리합니다.
    Redis에 연결할 수 없으면 백그라운드 작업은 요청 안에서 동기 실행됩니다.
    """
    logger.info("Starting %s (%s)", settings.APP_NAME, settings.APP_ENV)
    try:
        app.state.redis = await create_pool(ArqWorkerSettings.redis_settings)
        logger.info("ARQ Redis pool created.")
    except (RedisError, OSError) as e:
        logger.warning("ARQ Redis pool unavailable, background jobs will run inline: %s", e)
        app.state.redis = None

    app.state.notifier = build_email_provider(settings)

    yield  # 애플리케이션 실행

    logger.info("Shutting down %s", settings.APP_NAME)
    if app.state.redis is not None:
        await app.state.redis.close()
    await app.state.notifier.aclose()
    await engine.dispose()


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# -- 도메인 오류 핸들러 --
# 서비스/CRUD 계층의 DomainError를 {"detail": message} 응답으로 변환합니다.
@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# -- CORS 미들웨어 설정 --
# 프로덕션에서는 allow_origins를 실제 프론트엔드 도메인으로 제한해야 합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- 도메인 라우터 포함 --
app.include_router(usr_router, prefix=f"{API_PREFIX}/usr", tags=["User Management (사용자 관리)"])
app.include_router(inv_router, prefix=f"{API_PREFIX}/inv", tags=["Inventory Management (재고 관리)"])
app.include_router(ipm_router, prefix=f"{API_PREFIX}/ipm", tags=["IP Management (IP 관리)"])
app.include_router(rnt_router, prefix=f"{API_PREFIX}/rnt", tags=["Rental Management (임대 관리)"])


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    return {"message": "Welcome to OAMS API. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(deps.get_db_session)):
    """
    데이터베이스 연결을 테스트하여 서비스의 정상 작동 여부를 확인합니다.
    연결할 수 없으면 503을 반환합니다.
    """
    async with store_guard("health check"):
        result = await session.exec(select(1))
        if result.first() is None:
            raise StoreUnavailable("Database health check failed: No result from test query")
    return {"status": "ok", "database_connection": "successful"}
