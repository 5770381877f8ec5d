# app/core/config.py

from typing import Optional
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# 프로젝트의 루트 디렉토리 경로를 계산합니다.
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """
    애플리케이션의 모든 설정을 정의하는 Pydantic BaseSettings 모델입니다.
    환경 변수 및 .env 파일에서 값을 자동으로 로드합니다.
    """

    # --- Pydantic Settings 설정 ---
    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, '.env'),  # 프로젝트 루트의 .env 파일
        env_file_encoding='utf-8',
        extra='ignore',                      # 모델에 없는 변수는 무시
        case_sensitive=True
    )

    # --- 애플리케이션 기본 설정 ---
    APP_NAME: str = "OAMS FastAPI API"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Office Asset Management System (OAMS) API"
    APP_ENV: str = Field("development", description="Application environment (e.g., development, production, testing)")
    DEBUG_MODE: bool = Field(False, description="Enable debug mode for detailed logging and SQL echo")
    LOG_LEVEL: str = Field("INFO", description="Root logging level")

    # --- 데이터베이스 설정 ---
    DATABASE_URL: SecretStr = Field(..., description="Async SQLAlchemy database URL (postgresql+asyncpg://...)")

    # --- JWT (JSON Web Token) 설정 ---
    SECRET_KEY: SecretStr = Field(..., description="Secret key for JWT token signing. Keep this highly secure!")
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing (e.g., HS256)")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30, description="Access token expiration time in minutes")

    # --- ARQ (Redis) 설정 ---
    REDIS_HOST: str = Field("localhost", description="Redis host for the ARQ job queue")
    REDIS_PORT: int = Field(6379, description="Redis port for the ARQ job queue")

    # --- 재고 도메인 설정 ---
    DEFAULT_WAREHOUSE: str = Field("본사", description="창고가 지정되지 않은 품목/거래의 기본 창고명")
    OUTBOUND_MAX_ITEMS: int = Field(3, description="출고 신청 1건에 담을 수 있는 최대 품목 수")

    # --- IP 관리 도메인 설정 ---
    IP_RANGE_MAX_SIZE: int = Field(65536, description="한 번에 펼칠 수 있는 IP 대역의 최대 주소 수")

    # --- 이메일 알림 설정 ---
    EMAIL_PROVIDER: str = Field("none", description="'emailjs' 또는 'none'")
    EMAILJS_API_URL: str = Field("https://api.emailjs.com/api/v1.0/email/send", description="EmailJS REST endpoint")
    EMAILJS_SERVICE_ID: Optional[str] = None
    EMAILJS_TEMPLATE_ID: Optional[str] = None
    EMAILJS_PUBLIC_KEY: Optional[str] = None
    EMAILJS_PRIVATE_KEY: Optional[SecretStr] = None
    EMAIL_TIMEOUT_SECONDS: float = Field(10.0, description="알림 발송 HTTP 타임아웃(초)")


settings = Settings()
