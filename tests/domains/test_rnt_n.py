# tests/domains/test_rnt_n.py

"""
'rnt' 도메인 (임대 관리) 관련 API 엔드포인트에 대한 통합 테스트 모듈입니다.
"""

import io
from datetime import date

import pytest
from httpx import AsyncClient
from openpyxl import Workbook, load_workbook

from app.domains.rnt import excel as rnt_excel
from app.utils import spreadsheet

RENTAL_URL = "/api/v1/rnt/rentals"

HEADER = [
    None, "호실", "임대면적", "사용인/임대인", "연락처", "e-mail", " 임대     형태 ",
    " 보증금 ", "월임대료", "월관리비", "주차비", "입금날짜", "계약기간", "비고",
]


def _rental_sheet(*rows) -> bytes:
    """제목 두 줄 아래에 헤더가 있는 원본 형식의 임대현황 시트를 만듭니다."""
    wb = Workbook()
    ws = wb.active
    ws.append(["임대현황"])
    ws.append([None, "기준일: 2024.01.01"])
    ws.append(HEADER)
    for row in rows:
        ws.append(list(row))
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


# =============================================================================
# 1. 임대 계약 CRUD
# =============================================================================
@pytest.mark.asyncio
async def test_create_and_partial_update_rental(admin_client: AsyncClient):
    """(성공) 임대 계약을 만들고, 전달한 필드만 수정합니다."""
    response = await admin_client.post(RENTAL_URL, json={
        "ho": "101호",
        "tenant_name": "홍길동",
        "rental_type": "월세",
        "deposit": 10000000,
        "monthly_rent": 500000,
        "contract_start_date": "2024-01-01",
        "contract_end_date": "2025-12-31",
    })
    assert response.status_code == 201
    rental = response.json()

    updated = await admin_client.put(f"{RENTAL_URL}/{rental['id']}", json={"monthly_rent": 550000})
    assert updated.status_code == 200
    assert updated.json()["monthly_rent"] == 550000
    assert updated.json()["tenant_name"] == "홍길동"
    assert updated.json()["contract_end_date"] == "2025-12-31"


@pytest.mark.asyncio
async def test_create_rental_rejects_negative_amount(admin_client: AsyncClient):
    """(실패) 금액은 음수가 될 수 없습니다."""
    response = await admin_client.post(RENTAL_URL, json={"ho": "102호", "deposit": -1})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_rental_writes_forbidden_for_general_user(authorized_client: AsyncClient):
    """(실패) 일반 사용자는 조회만 할 수 있습니다."""
    assert (await authorized_client.get(RENTAL_URL)).status_code == 200
    assert (await authorized_client.post(RENTAL_URL, json={"ho": "103호"})).status_code == 403


@pytest.mark.asyncio
async def test_delete_rental(admin_client: AsyncClient):
    """(성공/실패) 삭제 후 다시 조회하면 404입니다."""
    rental = (await admin_client.post(RENTAL_URL, json={"ho": "104호"})).json()
    assert (await admin_client.delete(f"{RENTAL_URL}/{rental['id']}")).status_code == 204
    assert (await admin_client.get(f"{RENTAL_URL}/{rental['id']}")).status_code == 404
    assert (await admin_client.delete(f"{RENTAL_URL}/{rental['id']}")).status_code == 404


# =============================================================================
# 2. 엑셀 가져오기 / 내보내기
# =============================================================================
@pytest.mark.asyncio
async def test_import_rentals_maps_aliases_and_coerces_values(admin_client: AsyncClient):
    """
    (성공) 세 번째 줄 헤더, 공백이 섞인 헤더, 이름 없는 첫 컬럼을 인식하고
    금액과 계약기간을 변환합니다. 읽을 수 없는 값은 기본값으로 저장됩니다.
    """
    content = _rental_sheet(
        ["직원", "101호", "33", "홍길동", "010-1234-5678", "hong@example.com", "월세",
         "10,000,000", "500,000", "", "abc", "매월 25일", "2022.07.06 ~ 2024.07.05", "메모"],
        [None] * len(HEADER),
        ["일반인", "102호", "40", "(주)테스트", "", "", "전세",
         "200000000", "0", "30,000", "0", "", "미정", ""],
    )
    response = await admin_client.post(
        f"{RENTAL_URL}/import",
        files={"file": ("rentals.xlsx", content, spreadsheet.XLSX_MEDIA_TYPE)},
    )
    assert response.status_code == 200, response.text
    assert response.json() == {"created": 2}

    rentals = {r["ho"]: r for r in (await admin_client.get(RENTAL_URL)).json()}
    first = rentals["101호"]
    assert first["type"] == "직원"
    assert first["tenant_name"] == "홍길동"
    assert first["rental_type"] == "월세"
    assert first["deposit"] == 10000000
    assert first["monthly_rent"] == 500000
    assert first["maintenance_fee"] == 0
    assert first["parking_fee"] == 0
    assert first["payment_date"] == "매월 25일"
    assert first["contract_start_date"] == "2022-07-06"
    assert first["contract_end_date"] == "2024-07-05"

    second = rentals["102호"]
    assert second["maintenance_fee"] == 30000
    assert second["contract_start_date"] is None
    assert second["contract_end_date"] is None


@pytest.mark.asyncio
async def test_import_rentals_truncates_overlong_text(admin_client: AsyncClient):
    """(성공) 길이 제한을 넘는 셀은 잘라서 저장하고 행을 버리지 않습니다."""
    long_type = "월세(보증금 조정 협의 중, 2025년 재계약 예정)"
    assert len(long_type) > 20
    content = _rental_sheet(
        ["직원", "201호", "20", "홍길동", "", "", long_type,
         "0", "0", "0", "0", "매월 " + "말일 " * 20, "", ""],
    )
    response = await admin_client.post(
        f"{RENTAL_URL}/import",
        files={"file": ("rentals.xlsx", content, spreadsheet.XLSX_MEDIA_TYPE)},
    )
    assert response.status_code == 200, response.text
    assert response.json() == {"created": 1}

    rental = (await admin_client.get(RENTAL_URL)).json()[0]
    assert rental["rental_type"] == long_type[:20]
    assert len(rental["payment_date"]) == 50


@pytest.mark.asyncio
async def test_import_rentals_unreadable_file(admin_client: AsyncClient):
    """(실패) 엑셀로 읽을 수 없는 파일은 400을 반환하고 아무것도 만들지 않습니다."""
    response = await admin_client.post(
        f"{RENTAL_URL}/import",
        files={"file": ("rentals.xlsx", b"not an excel file", spreadsheet.XLSX_MEDIA_TYPE)},
    )
    assert response.status_code == 400
    assert (await admin_client.get(RENTAL_URL)).json() == []


@pytest.mark.asyncio
async def test_export_rentals(admin_client: AsyncClient):
    """(성공) 임대현황 시트를 정해진 컬럼 순서로 내려받습니다."""
    await admin_client.post(RENTAL_URL, json={
        "ho": "201호",
        "tenant_name": "김임차",
        "deposit": 5000000,
        "contract_start_date": "2023-03-01",
        "contract_end_date": "2025-02-28",
    })

    response = await admin_client.get(f"{RENTAL_URL}/export")
    assert response.status_code == 200
    assert f"{date.today():%Y%m%d}.xlsx" in response.headers["content-disposition"]

    wb = load_workbook(io.BytesIO(response.content))
    ws = wb[rnt_excel.SHEET_NAME]
    rows = list(ws.iter_rows(values_only=True))
    assert list(rows[0]) == rnt_excel.EXPORT_COLUMNS
    record = dict(zip(rows[0], rows[1]))
    assert record["호실"] == "201호"
    assert record["임대인"] == "김임차"
    assert record["계약기간"] == "2023.03.01 ~ 2025.02.28"
    assert record["보증금"] == 5000000


def test_parse_contract_period():
    """계약기간 문자열을 시작일과 종료일로 나눕니다."""
    assert rnt_excel.parse_contract_period("2022.07.06 ~ 2024.07.05") == (date(2022, 7, 6), date(2024, 7, 5))
    assert rnt_excel.parse_contract_period("2022-07-06~") == (date(2022, 7, 6), None)
    assert rnt_excel.parse_contract_period("") == (None, None)
    assert rnt_excel.parse_contract_period(None) == (None, None)
