# app/utils/__init__.py

"""
특정 도메인에 속하지 않는 범용 유틸리티 패키지입니다.

- `spreadsheet.py`: CSV/Excel 업로드 파싱, 헤더 별칭 해석, 값 변환, 엑셀 파일 생성.
"""

# flake8: noqa
from . import spreadsheet

__title__ = "OAMS Application Utilities"
__version__ = "0.1.0"
__all__ = ["spreadsheet"]
