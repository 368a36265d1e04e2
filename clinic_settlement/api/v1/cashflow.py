"""POST /v1/cashflow/projection - Receivables vs. expenses over a period"""

import time
from typing import Any, Dict

from fastapi import APIRouter, Depends

from clinic_settlement.api.dependencies import get_request_id
from clinic_settlement.api.v1.schemas import CashFlowRequest
from clinic_settlement.domain.cashflow import project_cash_flow
from clinic_settlement.infrastructure.observability.logging import log_projection
from clinic_settlement.infrastructure.observability.metrics import record_cashflow_health

router = APIRouter()


@router.post("/cashflow/projection")
def projection(request_body: CashFlowRequest, request_id: str = Depends(get_request_id)) -> Dict[str, Any]:
    """
    Daily receivables and expenses, totals, breakdowns and health indicator.

    Returns:
        Report with period, summary, daily buckets, breakdowns and payment analysis
    """
    start_time = time.time()

    report = project_cash_flow(
        request_body.period_start,
        request_body.period_end,
        installments=[i.to_domain() for i in request_body.installments],
        expenses=[e.to_domain() for e in request_body.expenses],
        splits=[s.to_domain() for s in request_body.splits],
        sales_total=request_body.sales_total,
    )

    duration_ms = (time.time() - start_time) * 1000
    record_cashflow_health(report.health_indicator)
    log_projection(
        request_id,
        report.period_start.isoformat(),
        report.period_end.isoformat(),
        report.health_indicator.value,
        duration_ms,
    )

    return report.to_dict()
