"""POST /v1/fees/resolve - Card fee rule lookup"""

from fastapi import APIRouter

from clinic_settlement.api.v1.schemas import FeeResolveRequest, FeeResolveResponse, FeeRuleSchema
from clinic_settlement.domain.fees import resolve_fee
from clinic_settlement.infrastructure.observability.metrics import fee_resolution_counter

router = APIRouter()


@router.post("/fees/resolve", response_model=FeeResolveResponse)
def resolve(request_body: FeeResolveRequest):
    """
    Find the active fee rule for an exact operator, card type and installment count.

    Returns resolved=false when no rule matches; a neighbouring installment
    count is never substituted.
    """
    rule = resolve_fee(
        [r.to_domain() for r in request_body.fee_rules],
        request_body.card_operator,
        request_body.card_type,
        request_body.installment_count,
    )
    fee_resolution_counter.labels(outcome="resolved" if rule else "unresolved").inc()

    if rule is None:
        return FeeResolveResponse(resolved=False)
    return FeeResolveResponse(resolved=True, rule=FeeRuleSchema.from_domain(rule))
