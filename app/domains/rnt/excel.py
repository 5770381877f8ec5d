# app/domains/rnt/excel.py

"""
임대현황 엑셀 시트와 Rental 필드 사이의 매핑입니다.

원본 시트는 제목 두 줄 아래(세 번째 줄)에 헤더가 있고,
첫 번째 컬럼(구분)에는 헤더 이름이 없는 경우가 많습니다.
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.domains.rnt import models as rnt_models
from app.domains.rnt import schemas as rnt_schemas
from app.utils import spreadsheet

HEADER_ROW = 2
SHEET_NAME = "임대현황"
DATE_DISPLAY_FORMAT = "%Y.%m.%d"

EXPORT_COLUMNS = [
    "호실", "임대인", "연락처", "e-mail", "임대면적", "계약기간", "구분",
    "입금", "보증금", "월임대료", "관리비", "주차비", "비고",
]


def parse_contract_period(value: Any) -> Tuple[Optional[date], Optional[date]]:
    """'2022.07.06 ~ 2024.07.05' -> (시작일, 종료일). 해석할 수 없는 쪽은 None."""
    text = spreadsheet.to_text(value)
    if not text:
        return None, None
    start, _, end = text.partition("~")
    return spreadsheet.to_date(start.strip()), spreadsheet.to_date(end.strip())


IMPORT_COLUMNS = [
    spreadsheet.ColumnSpec("type", ("구분", "Unnamed:0")),
    spreadsheet.ColumnSpec("ho", ("호수", "호실")),
    spreadsheet.ColumnSpec("area", ("임대면적", "면적")),
    spreadsheet.ColumnSpec("tenant_name", ("사용인/임대인", "상호/성명", "임대인")),
    spreadsheet.ColumnSpec("contact", ("연락처",)),
    spreadsheet.ColumnSpec("email", ("e-mail", "Email", "이메일")),
    spreadsheet.ColumnSpec("rental_type", ("임대형태",)),
    spreadsheet.ColumnSpec("deposit", ("보증금",), spreadsheet.to_int),
    spreadsheet.ColumnSpec("monthly_rent", ("월임대료",), spreadsheet.to_int),
    spreadsheet.ColumnSpec("maintenance_fee", ("월관리비", "관리비"), spreadsheet.to_int),
    spreadsheet.ColumnSpec("parking_fee", ("주차비",), spreadsheet.to_int),
    spreadsheet.ColumnSpec("payment_date", ("입금날짜", "입금")),
    spreadsheet.ColumnSpec("contract_period", ("계약기간",), parse_contract_period),
    spreadsheet.ColumnSpec("remarks", ("비고",)),
]

TEXT_LIMITS = spreadsheet.max_lengths(rnt_schemas.RentalCreate)


def rows_to_rentals(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    map_rows 결과를 Rental 생성용 딕셔너리로 바꿉니다.
    금액은 음수가 될 수 없고, 길이 제한을 넘는 텍스트는 잘라냅니다.
    """
    rentals = []
    for row in rows:
        data = dict(row)
        data["contract_start_date"], data["contract_end_date"] = data.pop("contract_period")
        for key in ("deposit", "monthly_rent", "maintenance_fee", "parking_fee"):
            data[key] = max(data[key], 0)
        spreadsheet.clip_text(data, TEXT_LIMITS)
        rentals.append(data)
    return rentals


def _format_period(rental: rnt_models.Rental) -> str:
    if rental.contract_start_date is None and rental.contract_end_date is None:
        return ""
    start = rental.contract_start_date.strftime(DATE_DISPLAY_FORMAT) if rental.contract_start_date else ""
    end = rental.contract_end_date.strftime(DATE_DISPLAY_FORMAT) if rental.contract_end_date else ""
    return f"{start} ~ {end}"


def export_rows(rentals: Iterable[rnt_models.Rental]) -> List[Dict[str, Any]]:
    return [
        {
            "호실": r.ho,
            "임대인": r.tenant_name or "",
            "연락처": r.contact or "",
            "e-mail": r.email or "",
            "임대면적": r.area or "",
            "계약기간": _format_period(r),
            "구분": r.type or "",
            "입금": r.payment_date or "",
            "보증금": r.deposit,
            "월임대료": r.monthly_rent,
            "관리비": r.maintenance_fee,
            "주차비": r.parking_fee,
            "비고": r.remarks or "",
        }
        for r in rentals
    ]
