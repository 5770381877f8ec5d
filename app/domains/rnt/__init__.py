# app/domains/rnt/__init__.py

"""
'rnt' 도메인 패키지입니다. (PostgreSQL 'rnt' 스키마)

호실별 임대 계약 현황을 관리하고, 임대현황 엑셀 파일을 가져오거나 내보냅니다.
"""

__title__ = "OAMS Rental Domain"
__version__ = "0.1.0"
__all__ = []
