# app/domains/inv/tasks.py

import logging
from typing import Any, Dict

from app.core.database import get_async_session_context
from app.domains.inv import crud as inv_crud

logger = logging.getLogger(__name__)


async def audit_stock_ledger_task(ctx: Dict[str, Any]) -> Dict[str, Any]:
    """
    모든 품목의 저장 수량과 원장 재계산 값을 비교하여 불일치를 로그로 남기는 ARQ 태스크.
    값을 수정하지 않습니다. 보정은 관리자가 품목 수정으로 수행합니다.

    ctx에 "db"가 있으면 그 세션을 사용하고 (동기 실행 경로),
    없으면 독립 세션을 엽니다 (ARQ 워커 경로).
    """
    db = ctx.get("db")
    if db is not None:
        drifts = await inv_crud.transaction.find_drifts(db)
    else:
        async with get_async_session_context() as session:
            drifts = await inv_crud.transaction.find_drifts(session)

    for drift in drifts:
        logger.warning(
            "Stock drift on item %s ('%s'): stored=%s computed=%s",
            drift["item_id"], drift["item_name"], drift["stored_quantity"], drift["computed_quantity"],
        )
    logger.info("Stock ledger audit finished: %d item(s) with drift.", len(drifts))
    return {"status": "success", "drift_count": len(drifts), "drifts": drifts}
