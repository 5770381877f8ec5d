# app/core/__init__.py

"""
애플리케이션 전반에서 공통으로 사용하는 핵심 구성 요소 패키지입니다.

- `config.py`: 환경 변수 기반 설정 (Pydantic Settings).
- `database.py`: 비동기 엔진과 세션 관리 (SQLModel / AsyncSQLAlchemy).
- `crud_base.py`: 공통 비동기 CRUD 기본 클래스.
- `exceptions.py`: 도메인 오류 정의와 저장소 장애 변환.
- `security.py`: 비밀번호 해싱, JWT, 역할 기반 권한 검사.
- `dependencies.py`: FastAPI 의존성 주입 함수.
- `tasks.py`: ARQ 워커가 실행하는 공통 태스크.
"""

__title__ = "OAMS Core"
__version__ = "0.1.0"
__all__ = []
