# app/domains/inv/services.py

"""
여러 CRUD와 외부 알림을 조합하는 'inv' 도메인 서비스 모듈입니다.

출고 신청 흐름:
1. 창고(담당자 이메일), 거래처, 품목, 재고를 모두 검증 (변경 전)
2. 창고 담당자에게 출고 신청 이메일 발송. 실패하면 아무것도 기록하지 않음
3. 품목별 출고(OUT) 거래 기록
"""

import logging
from datetime import date
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.exceptions import DomainError, RecordNotFound
from app.domains.inv import crud as inv_crud
from app.domains.inv import models as inv_models
from app.domains.inv import schemas as inv_schemas
from app.domains.usr import models as usr_models
from app.services.notification import EmailProvider, OutboundNotice

logger = logging.getLogger(__name__)

OUTBOUND_REMARK_PREFIX = "[출고신청]"


async def request_outbound(
    db: AsyncSession,
    *,
    request: inv_schemas.OutboundRequestCreate,
    requester: usr_models.User,
    notifier: EmailProvider,
) -> List[inv_models.Transaction]:
    if len(request.items) > settings.OUTBOUND_MAX_ITEMS:
        raise DomainError(f"출고 신청은 최대 {settings.OUTBOUND_MAX_ITEMS}개 품목까지 가능합니다.")

    warehouse = await inv_crud.warehouse.get_by_name(db, name=request.warehouse)
    if warehouse is None:
        raise RecordNotFound(f"창고를 찾을 수 없습니다: {request.warehouse}")
    if not warehouse.email:
        raise DomainError(f"'{warehouse.name}' 창고에 담당자 이메일이 등록되어 있지 않습니다.")

    customer = await inv_crud.customer.get(db, request.customer_id)
    if customer is None:
        raise RecordNotFound(f"출고처를 찾을 수 없습니다 (id={request.customer_id}).")

    lines = []
    requested = {}  # 같은 품목이 여러 줄이면 합계로 재고 검사
    for line in request.items:
        item = await inv_crud.item.get(db, line.item_id)
        if item is None:
            raise RecordNotFound(f"품목을 찾을 수 없습니다 (id={line.item_id}).")
        if (item.warehouse or settings.DEFAULT_WAREHOUSE) != warehouse.name:
            raise DomainError(f"'{item.name}' 품목은 '{warehouse.name}' 창고의 품목이 아닙니다.")
        requested[item.id] = requested.get(item.id, 0) + line.quantity
        inv_crud.ensure_sufficient_stock(item, requested[item.id])
        lines.append((item, line.quantity))

    remarks = request.remarks or ""
    await notifier.send_outbound(OutboundNotice(
        warehouse_name=warehouse.name,
        manager_email=warehouse.email,
        items=[(item.name, quantity) for item, quantity in lines],
        customer_name=customer.name,
        customer_address=customer.address or "",
        customer_contact=customer.contact or "",
        requester_name=requester.name or requester.login_id,
        remarks=remarks,
    ))

    today = date.today()
    transactions = []
    for item, quantity in lines:
        transactions.append(await inv_crud.transaction.record_transaction(
            db,
            item_id=item.id,
            type=inv_models.TransactionType.OUT,
            quantity=quantity,
            transaction_date=today,
            warehouse=warehouse.name,
            target=customer.name,
            remarks=f"{OUTBOUND_REMARK_PREFIX} {remarks}".strip(),
        ))
    logger.info(
        "Outbound request by '%s' from '%s' to '%s': %d line(s)",
        requester.login_id, warehouse.name, customer.name, len(transactions),
    )
    return transactions
