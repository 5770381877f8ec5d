# tests/conftest.py

import os
from typing import AsyncGenerator, Awaitable, Callable, List
from contextlib import asynccontextmanager

# 앱 설정은 임포트 시점에 읽히므로 app 임포트 전에 테스트 환경 변수를 지정합니다.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-oams")
os.environ.setdefault("EMAIL_PROVIDER", "none")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from app.main import app as main_app  # noqa: E402
from app.core import dependencies as deps  # noqa: E402
from app.core.database import build_engine, create_db_and_tables, get_session  # noqa: E402
from app.core.exceptions import NotificationFailure  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402
from app.services.notification import EmailProvider, OutboundNotice  # noqa: E402

# create_all이 모든 테이블을 인식하도록 모든 모델을 임포트합니다.
from app.domains.models import *  # noqa: F401, F403, E402
from app.domains.usr import models as usr_models  # noqa: E402
from app.domains.inv import models as inv_models  # noqa: E402


# --- 데이터베이스 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    테스트 함수마다 새로운 인메모리 SQLite 데이터베이스와 세션을 제공합니다.
    도메인 스키마(usr, inv, ipm, rnt)는 schema_translate_map으로 제거됩니다.
    """
    test_engine = build_engine("sqlite+aiosqlite://")
    await create_db_and_tables(target=test_engine)

    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with TestingSessionLocal() as session:
        yield session
    await test_engine.dispose()


# --- 이메일 발송기 대역 ---
class FakeNotifier(EmailProvider):
    """보낸 출고 신청을 기록합니다. fail=True이면 발송 실패를 흉내 냅니다."""

    def __init__(self):
        self.sent: List[OutboundNotice] = []
        self.fail = False

    async def send_outbound(self, notice: OutboundNotice) -> None:
        if self.fail:
            raise NotificationFailure("이메일 발송 실패: 테스트 실패")
        self.sent.append(notice)


@pytest.fixture(scope="function")
def fake_notifier() -> FakeNotifier:
    return FakeNotifier()


# --- 역할별 사용자 픽스처 ---
@pytest_asyncio.fixture(scope="function")
def user_factory(db_session: AsyncSession) -> Callable[..., Awaitable[usr_models.User]]:
    """역할과 속성을 지정하여 테스트 사용자를 생성하는 팩토리 함수를 반환합니다."""
    async def _create_user(
        login_id: str,
        password: str,
        role: usr_models.UserRole,
        is_active: bool = True,
        **kwargs,
    ) -> usr_models.User:
        user = usr_models.User(
            login_id=login_id,
            password_hash=get_password_hash(password),
            email=f"{login_id}@example.com",
            role=role,
            is_active=is_active,
            **kwargs,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _create_user


@pytest_asyncio.fixture(scope="function")
async def test_admin_user(user_factory: Callable) -> usr_models.User:
    """관리자(ADMIN) 사용자를 생성합니다."""
    return await user_factory("sysadm", "sysadmpass123", role=usr_models.UserRole.ADMIN, name="관리자")


@pytest_asyncio.fixture(scope="function")
async def test_user(user_factory: Callable) -> usr_models.User:
    """일반 사용자(GENERAL_USER)를 생성합니다."""
    return await user_factory("testuser", "testpass123", role=usr_models.UserRole.GENERAL_USER, name="홍길동")


# --- 역할별 인증 클라이언트 픽스처 ---
@pytest_asyncio.fixture(scope="function")
def authorized_client_factory(db_session: AsyncSession, fake_notifier: FakeNotifier):
    """
    특정 사용자로 로그인된 AsyncClient를 만드는 비동기 컨텍스트 매니저를 반환합니다.
    get_current_admin_user는 오버라이드하지 않으므로 역할 검사는 그대로 수행됩니다.
    """
    @asynccontextmanager
    async def _create_client_context(user: usr_models.User, password: str) -> AsyncGenerator[AsyncClient, None]:
        def override_get_session():
            yield db_session

        def override_get_current_user():
            return user

        original_overrides = main_app.dependency_overrides.copy()
        try:
            main_app.dependency_overrides.update({
                get_session: override_get_session,
                deps.get_db_session: override_get_session,
                deps.get_current_active_user: override_get_current_user,
                deps.get_notifier: lambda: fake_notifier,
            })

            transport = ASGITransport(app=main_app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                login_data = {"username": user.login_id, "password": password}
                res = await client.post("/api/v1/usr/auth/token", data=login_data)
                if res.status_code != 200:
                    pytest.fail(f"Login failed for {user.login_id}: {res.text}")

                client.headers["Authorization"] = f"Bearer {res.json()['access_token']}"
                yield client
        finally:
            main_app.dependency_overrides.clear()
            main_app.dependency_overrides.update(original_overrides)

    return _create_client_context


@pytest_asyncio.fixture(scope="function")
async def admin_client(authorized_client_factory, test_admin_user: usr_models.User) -> AsyncGenerator[AsyncClient, None]:
    """관리자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_admin_user, "sysadmpass123") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def authorized_client(authorized_client_factory, test_user: usr_models.User) -> AsyncGenerator[AsyncClient, None]:
    """일반 사용자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_user, "testpass123") as client:
        yield client


# --- 비동기 테스트 클라이언트 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    인증되지 않은 사용자를 위한 AsyncClient. 세션만 테스트용으로 주입합니다.
    """
    def override_get_session():
        yield db_session

    original_overrides = main_app.dependency_overrides.copy()
    try:
        main_app.dependency_overrides[get_session] = override_get_session
        main_app.dependency_overrides[deps.get_db_session] = override_get_session
        async with AsyncClient(transport=ASGITransport(app=main_app), base_url="http://test") as async_client:
            yield async_client
    finally:
        main_app.dependency_overrides.clear()
        main_app.dependency_overrides.update(original_overrides)


# --- 도메인별 공통 픽스처 ---
@pytest_asyncio.fixture
async def test_warehouse(db_session: AsyncSession) -> inv_models.Warehouse:
    warehouse = inv_models.Warehouse(name="본사", manager="김창고", email="warehouse@example.com")
    db_session.add(warehouse)
    await db_session.commit()
    await db_session.refresh(warehouse)
    return warehouse


@pytest_asyncio.fixture
async def test_customer(db_session: AsyncSession) -> inv_models.Customer:
    customer = inv_models.Customer(
        douzone_number="D-0001", name="테스트상사", contact="02-123-4567", address="서울시 중구"
    )
    db_session.add(customer)
    await db_session.commit()
    await db_session.refresh(customer)
    return customer
