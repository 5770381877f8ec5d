# tests/domains/__init__.py

"""
도메인별 테스트 모듈 패키지입니다. 파일 이름의 `_n` 접미사는 HTTP 엔드포인트를 거치는 통합 테스트를 뜻합니다.

- `test_usr_n.py`: 로그인과 사용자 관리.
- `test_inv_n.py`: 기준 정보, 입출고 원장, 재고 점검, 출고 신청.
- `test_ipm_addressing.py`: IPv4 주소 할당 모델 단위 테스트.
- `test_ipm_n.py`: IP 대역/상세 정보, 검색, 일괄 등록.
- `test_rnt_n.py`: 임대 계약 CRUD와 엑셀 가져오기/내보내기.
"""

__title__ = "OAMS Domain Tests"
__version__ = "0.1.0"
__all__ = []
