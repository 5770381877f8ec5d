# app/services/__init__.py

"""
도메인에 속하지 않는 외부 시스템 연동 서비스 패키지입니다.

- `notification.py`: 출고 신청 시 창고 담당자에게 보내는 이메일 발송기.
"""

__title__ = "OAMS Services"
__version__ = "0.1.0"
__all__ = []
