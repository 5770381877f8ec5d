# app/domains/ipm/__init__.py

"""
'ipm' 도메인 패키지입니다. (PostgreSQL 'ipm' 스키마)

IP 대역과 대역 안의 개별 주소 할당 정보를 관리하며,
엑셀 파일로부터 주소 할당 정보를 일괄 등록합니다.

주요 서브모듈:
- `addressing.py`: IPv4 변환, 대역 펼치기, 상태 파생 등 순수 함수.
- `crud.py`: 대역/상세 정보 CRUD, 일괄 등록, 검색.
- `routers.py`: API 엔드포인트.
"""

__title__ = "OAMS IP Management Domain"
__version__ = "0.1.0"
__all__ = []
