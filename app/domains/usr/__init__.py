# app/domains/usr/__init__.py

"""
'usr' 도메인 패키지입니다. (PostgreSQL 'usr' 스키마)

시스템 사용자와 로그인(JWT 발급)을 담당합니다.
"""

__title__ = "OAMS User Domain"
__version__ = "0.1.0"
__all__ = []
