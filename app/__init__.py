# app/__init__.py

"""
OAMS(Office Asset Management System) FastAPI 애플리케이션의 메인 패키지입니다.

재고(품목/입출고 원장), 임대 계약, IP 주소 할당 관리를 하나의 API로 제공합니다.
core 서브패키지는 설정, 데이터베이스, 보안, 오류 정의를 담고
domains 서브패키지는 PostgreSQL 스키마 단위의 업무 도메인을 담습니다.
"""

APP_NAME = "OAMS FastAPI API"
APP_VERSION = "0.1.0"
API_PREFIX = "/api/v1"  # API 라우트의 공통 접두사 (main.py에서 적용)

__version__ = APP_VERSION
__title__ = APP_NAME
__description__ = "Office Asset Management System (OAMS) API backend."
__all__ = []
