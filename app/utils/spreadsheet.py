# app/utils/spreadsheet.py

"""
업로드된 CSV / Excel 파일을 pandas.DataFrame으로 읽고,
헤더 별칭 표를 이용해 도메인 필드로 매핑하는 유틸리티입니다.

* Excel은 openpyxl 엔진, CSV는 UTF-8, 한글 인코딩, chardet 추정 인코딩을 순서대로 시도
* 값은 모두 문자열로 읽음 (dtype=str, keep_default_na=False)
* 헤더는 NFKC 정규화 후 모든 공백을 제거하여 비교 ("임대     형태" == "임대형태")
* 별칭 표는 가져오기 1회당 한 번만 해석하고, 각 값은 지정된 변환 함수로 타입을 맞춤
* 파일 전체를 읽을 수 없는 경우에만 ParseFailure, 행 단위 문제는 기본값으로 대체
"""

import io
import logging
import re
import unicodedata
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Type
from urllib.parse import quote

import chardet
import pandas as pd
from pydantic import BaseModel

from app.core.exceptions import ParseFailure

logger = logging.getLogger(__name__)

ENCODINGS = ["utf-8", "utf-8-sig", "cp949", "euc-kr"]
EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xls")
DATE_FORMATS = ("%Y.%m.%d", "%Y-%m-%d", "%Y/%m/%d", "%Y-%m-%d %H:%M:%S", "%Y%m%d")

_WHITESPACE = re.compile(r"\s+")


# =============================================================================
# 1. 파일 읽기
# =============================================================================
def read_table(raw: bytes, filename: str, header_row: int = 0) -> pd.DataFrame:
    """
    업로드 바이트를 표로 읽습니다. header_row는 헤더가 위치한 0 기반 행 번호입니다.
    """
    if not raw:
        raise ParseFailure("파일이 비어 있습니다.")

    lower_name = (filename or "").lower()
    if lower_name.endswith(EXCEL_SUFFIXES):
        try:
            df = pd.read_excel(io.BytesIO(raw), dtype=str, keep_default_na=False, header=header_row)
        except Exception as e:
            raise ParseFailure(f"엑셀 파일을 읽을 수 없습니다: {e}") from e
    elif lower_name.endswith(".csv"):
        df = _read_csv(raw, header_row)
    else:
        raise ParseFailure("지원하지 않는 파일 형식입니다 (.xlsx, .xls, .csv만 가능).")

    df.columns = [normalize_header(c) for c in df.columns]
    return df


def _read_csv(raw: bytes, header_row: int) -> pd.DataFrame:
    # 시도 순서: utf-8, utf-8-sig, cp949, euc-kr, chardet 추정값
    guessed = (chardet.detect(raw[:4096]).get("encoding") or "").lower()
    for encoding in _unique(ENCODINGS + [guessed]):
        if not encoding:
            continue
        try:
            return pd.read_csv(
                io.BytesIO(raw),
                encoding=encoding,
                dtype=str,
                keep_default_na=False,
                header=header_row,
            )
        except (UnicodeDecodeError, LookupError):
            continue
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise ParseFailure(f"CSV 파일을 읽을 수 없습니다: {e}") from e
    raise ParseFailure("CSV 인코딩을 판별할 수 없습니다.")


def _unique(seq: Iterable[str]) -> List[str]:
    seen = set()
    return [x for x in seq if not (x in seen or seen.add(x))]


# =============================================================================
# 2. 헤더 별칭 해석
# =============================================================================
def normalize_header(name: Any) -> str:
    text = unicodedata.normalize("NFKC", str(name)).replace("\ufeff", "")
    return _WHITESPACE.sub("", text)


@dataclass(frozen=True)
class ColumnSpec:
    """도메인 필드 하나와 그 필드로 인정하는 헤더 별칭(우선순위 순)."""
    field: str
    aliases: Sequence[str]
    convert: Optional[Callable[[Any], Any]] = None  # 기본: to_text


def resolve_columns(columns: Iterable[str], specs: Sequence[ColumnSpec]) -> Dict[str, Optional[str]]:
    """
    각 필드에 대응하는 실제 컬럼명을 찾습니다. 별칭 순서대로 첫 번째로 일치하는 컬럼을 사용합니다.
    """
    by_key = {}
    for column in columns:
        by_key.setdefault(normalize_header(column).casefold(), column)

    resolved: Dict[str, Optional[str]] = {}
    for spec in specs:
        resolved[spec.field] = next(
            (by_key[key] for key in (normalize_header(a).casefold() for a in spec.aliases) if key in by_key),
            None,
        )
    unresolved = [name for name, column in resolved.items() if column is None]
    if unresolved:
        logger.info("Spreadsheet columns not found for fields: %s", ", ".join(unresolved))
    return resolved


def map_rows(df: pd.DataFrame, specs: Sequence[ColumnSpec]) -> List[Dict[str, Any]]:
    """
    DataFrame의 각 행을 {필드: 변환된 값} 딕셔너리로 바꿉니다.
    모든 셀이 비어 있는 행은 건너뜁니다.
    """
    columns = resolve_columns(df.columns, specs)
    rows = []
    for record in df.to_dict(orient="records"):
        if all(to_text(v) == "" for v in record.values()):
            continue
        rows.append({
            spec.field: (spec.convert or to_text)(record.get(columns[spec.field]) if columns[spec.field] else None)
            for spec in specs
        })
    return rows


# =============================================================================
# 3. 값 변환
# =============================================================================
def to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value).strip()


def to_int(value: Any) -> int:
    """'1,000,000' 같은 천 단위 구분 숫자를 정수로. 해석할 수 없으면 0."""
    text = to_text(value).replace(",", "").replace("원", "").strip()
    if not text:
        return 0
    try:
        return int(float(text))
    except ValueError:
        logger.debug("Cannot convert %r to int, falling back to 0", value)
        return 0


def to_date(value: Any) -> Optional[date]:
    """여러 날짜 표기를 date로. 해석할 수 없으면 None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = to_text(value)
    if not text:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    logger.debug("Cannot convert %r to date, falling back to None", value)
    return None


def max_lengths(schema: Type[BaseModel]) -> Dict[str, int]:
    """스키마에서 max_length가 걸린 필드와 그 길이 제한을 모읍니다."""
    limits = {}
    for name, info in schema.model_fields.items():
        for constraint in info.metadata:
            limit = getattr(constraint, "max_length", None)
            if limit is not None:
                limits[name] = limit
    return limits


def clip_text(data: Dict[str, Any], limits: Dict[str, int]) -> Dict[str, Any]:
    """길이 제한을 넘는 문자열 셀은 잘라서 저장합니다. 행을 버리지 않습니다."""
    for name, limit in limits.items():
        value = data.get(name)
        if isinstance(value, str) and len(value) > limit:
            logger.info("Truncating '%s' cell from %d to %d characters", name, len(value), limit)
            data[name] = value[:limit]
    return data


# =============================================================================
# 4. 엑셀 파일 생성
# =============================================================================
def write_workbook(rows: List[Dict[str, Any]], sheet_name: str, columns: Optional[Sequence[str]] = None) -> bytes:
    """행 목록을 단일 시트 xlsx 파일 바이트로 만듭니다."""
    df = pd.DataFrame(rows, columns=list(columns) if columns else None)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    return buffer.getvalue()


XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def content_disposition(filename: str) -> str:
    """한글 파일명을 위한 RFC 5987 Content-Disposition 헤더 값."""
    fallback = filename.encode("ascii", "ignore").decode() or "export.xlsx"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
