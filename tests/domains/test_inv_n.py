# tests/domains/test_inv_n.py

"""
'inv' 도메인 (재고 관리) 관련 API 엔드포인트 및 재고 원장 로직에 대한 통합 테스트 모듈입니다.
"""

from datetime import date

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import StoreUnavailable
from app.domains.inv import crud as inv_crud
from app.domains.inv import models as inv_models
from app.domains.inv import tasks as inv_tasks


async def _create_item(client: AsyncClient, name: str = "A4 용지", quantity: int = 10, **extra) -> dict:
    response = await client.post("/api/v1/inv/items", json={"name": name, "quantity": quantity, **extra})
    assert response.status_code == 201, response.text
    return response.json()


async def _record(client: AsyncClient, item_id: int, type_: str, quantity: int, **extra):
    return await client.post(
        "/api/v1/inv/transactions",
        json={"item_id": item_id, "type": type_, "quantity": quantity, **extra},
    )


# =============================================================================
# 1. 기준 정보 (제품군, 창고, 거래처)
# =============================================================================
@pytest.mark.asyncio
async def test_create_product_group_and_duplicate(admin_client: AsyncClient):
    """(성공/실패) 제품군을 만들고, 같은 이름은 400을 반환합니다."""
    response = await admin_client.post("/api/v1/inv/product_groups", json={"name": "사무용품"})
    assert response.status_code == 201

    duplicate = await admin_client.post("/api/v1/inv/product_groups", json={"name": "사무용품"})
    assert duplicate.status_code == 400


@pytest.mark.asyncio
async def test_create_warehouse_forbidden_for_general_user(authorized_client: AsyncClient):
    """(실패) 일반 사용자는 창고를 등록할 수 없습니다."""
    response = await authorized_client.post("/api/v1/inv/warehouses", json={"name": "지점"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_search_customers(authorized_client: AsyncClient, test_customer: inv_models.Customer):
    """(성공) 거래처명 또는 더존 코드 일부로 검색합니다."""
    by_name = await authorized_client.get("/api/v1/inv/customers", params={"q": "테스트"})
    assert [c["id"] for c in by_name.json()] == [test_customer.id]

    by_code = await authorized_client.get("/api/v1/inv/customers", params={"q": "d-00"})
    assert [c["id"] for c in by_code.json()] == [test_customer.id]

    nothing = await authorized_client.get("/api/v1/inv/customers", params={"q": "없는회사"})
    assert nothing.json() == []


# =============================================================================
# 2. 품목과 재고 원장
# =============================================================================
@pytest.mark.asyncio
async def test_create_item_records_opening_stock(admin_client: AsyncClient, db_session: AsyncSession):
    """(성공) 초기 수량은 '초기 재고' 입고 거래로 기록되어 원장과 일치합니다."""
    item = await _create_item(admin_client, quantity=10)
    assert item["quantity"] == 10
    assert item["warehouse"] == "본사"

    transactions = await inv_crud.transaction.query_in_range(db_session, item_id=item["id"])
    assert len(transactions) == 1
    assert transactions[0].type == inv_models.TransactionType.IN
    assert transactions[0].remarks == "초기 재고"


@pytest.mark.asyncio
async def test_in_and_out_update_quantity(admin_client: AsyncClient, db_session: AsyncSession):
    """(성공) 재고 10에 입고 5, 출고 3을 기록하면 12가 되고 재계산 값과 같습니다."""
    item = await _create_item(admin_client, quantity=10)

    assert (await _record(admin_client, item["id"], "IN", 5)).status_code == 201
    out = await _record(admin_client, item["id"], "OUT", 3, target="영업팀")
    assert out.status_code == 201
    assert out.json()["item_name"] == "A4 용지"
    assert out.json()["warehouse"] == "본사"

    response = await admin_client.get(f"/api/v1/inv/items/{item['id']}/stock")
    assert response.status_code == 200
    stock = response.json()
    assert stock["stored_quantity"] == 12
    assert stock["computed_quantity"] == 12
    assert stock["drift"] == 0
    assert await inv_crud.transaction.recompute_stock(db_session, item_id=item["id"]) == 12


@pytest.mark.asyncio
async def test_general_user_can_record_transactions(
    admin_client: AsyncClient, authorized_client_factory, test_user,
):
    """(성공) 거래 기록은 활성 사용자 누구나 할 수 있습니다."""
    item = await _create_item(admin_client, quantity=1)
    async with authorized_client_factory(test_user, "testpass123") as user_client:
        response = await _record(user_client, item["id"], "IN", 2)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_out_insufficient_stock(admin_client: AsyncClient):
    """(실패) 재고보다 많은 출고는 409를 반환하고 아무것도 기록하지 않습니다."""
    item = await _create_item(admin_client, quantity=2)

    response = await _record(admin_client, item["id"], "OUT", 3)
    assert response.status_code == 409
    assert "재고가 부족합니다" in response.json()["detail"]

    transactions = await admin_client.get("/api/v1/inv/transactions", params={"item_id": item["id"]})
    assert len(transactions.json()) == 1  # 초기 재고만
    assert (await admin_client.get(f"/api/v1/inv/items/{item['id']}")).json()["quantity"] == 2


@pytest.mark.asyncio
async def test_transaction_for_unknown_item(admin_client: AsyncClient):
    """(실패) 존재하지 않는 품목의 거래는 404를 반환합니다."""
    response = await _record(admin_client, 9999, "IN", 1)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_transaction_quantity_must_be_positive(admin_client: AsyncClient):
    """(실패) 수량 0은 검증 단계에서 거부됩니다."""
    item = await _create_item(admin_client, quantity=1)
    response = await _record(admin_client, item["id"], "IN", 0)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_query_transactions_inclusive_range(admin_client: AsyncClient):
    """(성공) 기간 조회는 시작일과 종료일을 모두 포함하며 저장 순서를 유지합니다."""
    item = await _create_item(admin_client, quantity=0)
    for day in (1, 5, 10, 11):
        await _record(admin_client, item["id"], "IN", day, transaction_date=f"2024-03-{day:02d}")

    response = await admin_client.get(
        "/api/v1/inv/transactions",
        params={"start_date": "2024-03-05", "end_date": "2024-03-10"},
    )
    assert response.status_code == 200
    assert [tx["quantity"] for tx in response.json()] == [5, 10]


@pytest.mark.asyncio
async def test_query_transactions_until_last_representable_date(admin_client: AsyncClient):
    """(성공) 종료일이 9999-12-31이어도 기간 조회와 내보내기가 정상 동작합니다."""
    item = await _create_item(admin_client, quantity=0)
    await _record(admin_client, item["id"], "IN", 7, transaction_date="2024-03-05")
    period = {"start_date": "2020-01-01", "end_date": "9999-12-31"}

    response = await admin_client.get("/api/v1/inv/transactions", params=period)
    assert response.status_code == 200, response.text
    assert [tx["quantity"] for tx in response.json()] == [7]

    export = await admin_client.get("/api/v1/inv/transactions/export", params=period)
    assert export.status_code == 200
    assert export.content[:2] == b"PK"


@pytest.mark.asyncio
async def test_query_transactions_requires_both_dates(authorized_client: AsyncClient):
    """(실패) 기간의 한쪽만 지정하면 400을 반환합니다."""
    response = await authorized_client.get("/api/v1/inv/transactions", params={"start_date": "2024-03-05"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_transactions_have_no_update_or_delete(admin_client: AsyncClient):
    """(실패) 거래는 수정/삭제 엔드포인트가 없습니다."""
    item = await _create_item(admin_client, quantity=1)
    tx_id = (await admin_client.get("/api/v1/inv/transactions")).json()[0]["id"]

    assert (await admin_client.put(f"/api/v1/inv/transactions/{tx_id}", json={"quantity": 5})).status_code == 405
    assert (await admin_client.delete(f"/api/v1/inv/transactions/{tx_id}")).status_code == 405
    assert (await admin_client.get(f"/api/v1/inv/items/{item['id']}")).json()["quantity"] == 1


@pytest.mark.asyncio
async def test_export_transactions(admin_client: AsyncClient):
    """(성공) 거래 내역을 엑셀 파일로 내려받습니다."""
    await _create_item(admin_client, quantity=3)
    response = await admin_client.get("/api/v1/inv/transactions/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "filename*=UTF-8''" in response.headers["content-disposition"]
    assert response.content[:2] == b"PK"


# =============================================================================
# 3. 두 단계 갱신 실패와 재고 점검
# =============================================================================
@pytest.mark.asyncio
async def test_quantity_update_failure_leaves_drift(
    admin_client: AsyncClient, db_session: AsyncSession, monkeypatch,
):
    """
    (실패) 거래 저장 후 수량 갱신이 실패하면 503을 반환하고,
    저장된 거래는 남아 재고 점검에서 불일치로 드러납니다.
    """
    item = await _create_item(admin_client, quantity=10)

    async def broken_apply(db, item_id, delta):
        raise StoreUnavailable("저장소에 연결할 수 없습니다 (update item quantity).")

    monkeypatch.setattr(inv_crud.transaction, "_apply_quantity_change", broken_apply)
    response = await _record(admin_client, item["id"], "IN", 5)
    assert response.status_code == 503
    monkeypatch.undo()

    transactions = await admin_client.get("/api/v1/inv/transactions", params={"item_id": item["id"]})
    assert len(transactions.json()) == 2

    reconcile = await admin_client.post("/api/v1/inv/items/reconcile")
    assert reconcile.status_code == 200
    body = reconcile.json()
    assert body["enqueued"] is False
    assert body["drifts"] == [{
        "item_id": item["id"],
        "item_name": "A4 용지",
        "stored_quantity": 10,
        "computed_quantity": 15,
        "drift": -5,
    }]

    # 관리자 보정으로 원장과 다시 일치
    fixed = await admin_client.put(f"/api/v1/inv/items/{item['id']}", json={"quantity": 15})
    assert fixed.status_code == 200
    assert (await admin_client.post("/api/v1/inv/items/reconcile")).json()["drifts"] == []


@pytest.mark.asyncio
async def test_reconcile_forbidden_for_general_user(authorized_client: AsyncClient):
    """(실패) 재고 점검은 관리자만 실행할 수 있습니다."""
    response = await authorized_client.post("/api/v1/inv/items/reconcile")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_manual_correction_breaks_ledger_until_reconciled(admin_client: AsyncClient):
    """(성공) 관리자 수량 보정은 그대로 저장되며 재계산 값과의 차이로 확인됩니다."""
    item = await _create_item(admin_client, quantity=4)
    response = await admin_client.put(f"/api/v1/inv/items/{item['id']}", json={"quantity": 7})
    assert response.status_code == 200
    assert response.json()["quantity"] == 7

    stock = (await admin_client.get(f"/api/v1/inv/items/{item['id']}/stock")).json()
    assert stock["computed_quantity"] == 4
    assert stock["drift"] == 3


@pytest.mark.asyncio
async def test_audit_task_reports_drift_without_writing(admin_client: AsyncClient, db_session: AsyncSession):
    """(성공) 정기 점검 태스크는 불일치만 보고하고 저장 수량은 바꾸지 않습니다."""
    item = await _create_item(admin_client, quantity=4)
    await admin_client.put(f"/api/v1/inv/items/{item['id']}", json={"quantity": 9})

    result = await inv_tasks.audit_stock_ledger_task({"db": db_session})

    assert result["drift_count"] == 1
    assert result["drifts"][0]["stored_quantity"] == 9
    assert result["drifts"][0]["computed_quantity"] == 4
    assert (await admin_client.get(f"/api/v1/inv/items/{item['id']}")).json()["quantity"] == 9


@pytest.mark.asyncio
async def test_delete_item_with_transactions_refused(admin_client: AsyncClient):
    """(실패) 거래 이력이 있는 품목은 삭제할 수 없고, 없는 품목은 삭제됩니다."""
    with_history = await _create_item(admin_client, name="이력있음", quantity=1)
    without_history = await _create_item(admin_client, name="이력없음", quantity=0)

    assert (await admin_client.delete(f"/api/v1/inv/items/{with_history['id']}")).status_code == 400
    assert (await admin_client.delete(f"/api/v1/inv/items/{without_history['id']}")).status_code == 204


# =============================================================================
# 4. 출고 신청
# =============================================================================
@pytest.mark.asyncio
async def test_outbound_request_success(
    admin_client: AsyncClient,
    fake_notifier,
    test_warehouse: inv_models.Warehouse,
    test_customer: inv_models.Customer,
):
    """(성공) 담당자에게 메일을 보낸 뒤 품목별 출고 거래를 기록합니다."""
    paper = await _create_item(admin_client, name="A4 용지", quantity=10)
    toner = await _create_item(admin_client, name="토너", quantity=3)

    response = await admin_client.post("/api/v1/inv/outbound_requests", json={
        "warehouse": test_warehouse.name,
        "customer_id": test_customer.id,
        "items": [{"item_id": paper["id"], "quantity": 4}, {"item_id": toner["id"], "quantity": 1}],
        "remarks": "긴급",
    })
    assert response.status_code == 201, response.text
    created = response.json()
    assert [tx["type"] for tx in created] == ["OUT", "OUT"]
    assert all(tx["target"] == test_customer.name for tx in created)
    assert all(tx["remarks"] == "[출고신청] 긴급" for tx in created)
    assert all(tx["transaction_date"] == date.today().isoformat() for tx in created)

    assert len(fake_notifier.sent) == 1
    notice = fake_notifier.sent[0]
    assert notice.manager_email == test_warehouse.email
    assert notice.item_list() == "A4 용지 x4, 토너 x1"
    assert notice.requester_name == "관리자"

    assert (await admin_client.get(f"/api/v1/inv/items/{paper['id']}")).json()["quantity"] == 6
    assert (await admin_client.get(f"/api/v1/inv/items/{toner['id']}")).json()["quantity"] == 2


@pytest.mark.asyncio
async def test_outbound_request_notification_failure_records_nothing(
    admin_client: AsyncClient,
    fake_notifier,
    test_warehouse: inv_models.Warehouse,
    test_customer: inv_models.Customer,
):
    """(실패) 메일 발송이 실패하면 502를 반환하고 거래를 기록하지 않습니다."""
    item = await _create_item(admin_client, quantity=10)
    fake_notifier.fail = True

    response = await admin_client.post("/api/v1/inv/outbound_requests", json={
        "warehouse": test_warehouse.name,
        "customer_id": test_customer.id,
        "items": [{"item_id": item["id"], "quantity": 1}],
    })
    assert response.status_code == 502
    assert response.json()["detail"].startswith("이메일 발송 실패")

    transactions = await admin_client.get("/api/v1/inv/transactions", params={"item_id": item["id"]})
    assert len(transactions.json()) == 1
    assert (await admin_client.get(f"/api/v1/inv/items/{item['id']}")).json()["quantity"] == 10


@pytest.mark.asyncio
async def test_outbound_request_checks_combined_stock(
    admin_client: AsyncClient,
    fake_notifier,
    test_warehouse: inv_models.Warehouse,
    test_customer: inv_models.Customer,
):
    """(실패) 같은 품목을 여러 줄로 신청하면 합계로 재고를 검사하고, 메일도 보내지 않습니다."""
    item = await _create_item(admin_client, quantity=5)

    response = await admin_client.post("/api/v1/inv/outbound_requests", json={
        "warehouse": test_warehouse.name,
        "customer_id": test_customer.id,
        "items": [{"item_id": item["id"], "quantity": 3}, {"item_id": item["id"], "quantity": 3}],
    })
    assert response.status_code == 409
    assert fake_notifier.sent == []


@pytest.mark.asyncio
async def test_outbound_request_too_many_items(
    admin_client: AsyncClient,
    test_warehouse: inv_models.Warehouse,
    test_customer: inv_models.Customer,
):
    """(실패) 한 번에 신청할 수 있는 품목 수를 넘으면 400을 반환합니다."""
    item = await _create_item(admin_client, quantity=10)
    response = await admin_client.post("/api/v1/inv/outbound_requests", json={
        "warehouse": test_warehouse.name,
        "customer_id": test_customer.id,
        "items": [{"item_id": item["id"], "quantity": 1}] * 4,
    })
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_outbound_request_warehouse_without_email(
    admin_client: AsyncClient, db_session: AsyncSession, test_customer: inv_models.Customer,
):
    """(실패) 담당자 이메일이 없는 창고로는 출고 신청을 할 수 없습니다."""
    db_session.add(inv_models.Warehouse(name="지점"))
    await db_session.commit()
    item = await _create_item(admin_client, quantity=10, warehouse="지점")

    response = await admin_client.post("/api/v1/inv/outbound_requests", json={
        "warehouse": "지점",
        "customer_id": test_customer.id,
        "items": [{"item_id": item["id"], "quantity": 1}],
    })
    assert response.status_code == 400
