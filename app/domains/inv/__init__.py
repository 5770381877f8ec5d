# app/domains/inv/__init__.py

"""
'inv' 도메인 패키지입니다. (PostgreSQL 'inv' 스키마)

기준 정보(제품군, 창고, 거래처), 품목, 입출고 원장, 출고 신청을 담당합니다.

주요 서브모듈:
- `models.py`: 'inv' 스키마 테이블 SQLModel 정의.
- `schemas.py`: 요청/응답 Pydantic 모델.
- `crud.py`: 기준 정보 CRUD와 재고 원장(거래 기록, 기간 조회, 재계산).
- `services.py`: 출고 신청(이메일 발송 후 출고 거래 기록).
- `tasks.py`: 재고 원장 점검 ARQ 태스크.
- `routers.py`: API 엔드포인트.
"""

__title__ = "OAMS Inventory Domain"
__version__ = "0.1.0"
__all__ = []
