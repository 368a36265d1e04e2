"""Settlement endpoints: net amounts, installment schedules and sale splits"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from clinic_settlement.api.dependencies import get_request_id
from clinic_settlement.api.v1.schemas import (
    NetSettlementRequest,
    NetSettlementResponse,
    SaleSettleRequest,
    SaleSettleResponse,
    ScheduleRequest,
    ScheduleResponse,
    issues_out,
)
from clinic_settlement.domain.fees import compute_net_settlement
from clinic_settlement.domain.installments import generate_installment_schedule, settle_sale
from clinic_settlement.domain.models import Issue
from clinic_settlement.infrastructure.observability.metrics import record_fee_resolution, record_schedule

router = APIRouter()


def reject(issues: List[Issue], request_id: str) -> HTTPException:
    """422 carrying the blocking issues"""
    logging.warning(
        "Settlement rejected",
        extra={"request_id": request_id, "issues": [i.kind.value for i in issues if i.blocking]},
    )
    return HTTPException(
        status_code=422,
        detail={"issues": [i.model_dump(mode="json") for i in issues_out(issues)]},
    )


@router.post("/settlements/net", response_model=NetSettlementResponse)
def net_settlement(request_body: NetSettlementRequest, request_id: str = Depends(get_request_id)):
    """Fee and net amount for one gross amount"""
    settlement = compute_net_settlement(
        request_body.gross_amount,
        request_body.payment_method,
        request_body.installment_count,
        fee_rules=request_body.domain_fee_rules(),
        card_operator=request_body.card_operator,
        card_type=request_body.card_type,
        on_missing_rule=request_body.on_missing_rule,
    )
    record_fee_resolution(settlement)

    if not settlement.ok:
        raise reject(settlement.issues, request_id)
    return NetSettlementResponse.from_domain(settlement)


@router.post("/settlements/schedule", response_model=ScheduleResponse)
def installment_schedule(request_body: ScheduleRequest, request_id: str = Depends(get_request_id)):
    """
    Dated installments for one split.

    First installment is due after the operator's receiving days for card
    payments; the rest follow every 30 days.
    """
    schedule = generate_installment_schedule(
        request_body.gross_amount,
        request_body.installment_count,
        request_body.payment_method,
        fee_rules=request_body.domain_fee_rules(),
        card_operator=request_body.card_operator,
        card_type=request_body.card_type,
        sale_date=request_body.sale_date,
        on_missing_rule=request_body.on_missing_rule,
        remainder_policy=request_body.remainder_policy,
    )
    record_schedule(schedule)

    if not schedule.ok:
        raise reject(schedule.issues, request_id)
    return ScheduleResponse.from_domain(schedule)


@router.post("/sales/settle", response_model=SaleSettleResponse)
def sale_settlement(request_body: SaleSettleRequest, request_id: str = Depends(get_request_id)):
    """
    Validate a sale's payment splits and schedule every split.

    Splits must add up to the sale total within one cent; otherwise nothing
    is scheduled and the request is rejected.
    """
    sale = settle_sale(
        request_body.sale_total,
        [s.to_domain() for s in request_body.splits],
        fee_rules=[r.to_domain() for r in request_body.fee_rules],
        sale_date=request_body.sale_date,
        on_missing_rule=request_body.on_missing_rule,
    )
    for schedule in sale.schedules:
        record_schedule(schedule)

    if not sale.ok:
        raise reject(sale.issues, request_id)

    return SaleSettleResponse(
        sale_total=sale.sale_total,
        gross_total=sale.gross_total,
        fee_total=sale.fee_total,
        net_total=sale.net_total,
        schedules=[ScheduleResponse.from_domain(s) for s in sale.schedules],
        issues=issues_out(sale.issues),
    )
