# tests/__init__.py

"""
OAMS API 테스트 스위트 패키지입니다.

- `conftest.py`: 인메모리 SQLite 세션, 역할별 사용자와 인증 클라이언트, 가짜 이메일 발송기 픽스처.
- `test_main.py`: 루트 / 헬스 체크 / 도메인 오류 응답.
- `test_spreadsheet.py`: 업로드 파일 파싱과 헤더 별칭 매핑.
- `domains/`: 도메인(usr, inv, ipm, rnt)별 통합 테스트.
"""

__title__ = "OAMS API Tests"
__version__ = "0.1.0"
__all__ = []
