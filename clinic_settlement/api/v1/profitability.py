"""POST /v1/profitability - Per-sale variable costs and margin"""

from fastapi import APIRouter, Depends

from clinic_settlement.api.dependencies import get_request_id
from clinic_settlement.api.v1.schemas import ProfitabilityRequest, ProfitabilityResponse, issues_out
from clinic_settlement.api.v1.settlements import reject
from clinic_settlement.domain.profitability import compute_profitability
from clinic_settlement.infrastructure.observability.logging import log_profitability

router = APIRouter()


@router.post("/profitability", response_model=ProfitabilityResponse)
def profitability(request_body: ProfitabilityRequest, request_id: str = Depends(get_request_id)):
    """
    Taxes, card fee and commissions for a sale price, then profit over direct cost.

    Flow:
    1. Apply every tax rule to the price
    2. Resolve the card fee for the payment method and installment count
    3. Apply every commission rule to the price
    4. Net revenue, profit and margin
    """
    result = compute_profitability(
        request_body.price,
        request_body.payment_method,
        request_body.installment_count,
        fee_rules=[r.to_domain() for r in request_body.fee_rules],
        tax_rules=[r.to_domain() for r in request_body.tax_rules],
        commission_rules=[r.to_domain() for r in request_body.commission_rules],
        direct_cost=request_body.direct_cost,
        card_operator=request_body.card_operator,
        card_type=request_body.card_type,
        on_missing_rule=request_body.on_missing_rule,
    )

    if not result.ok:
        raise reject(result.issues, request_id)

    log_profitability(
        request_id,
        request_body.payment_method.value,
        request_body.installment_count,
        str(result.margin_percent),
        len(result.issues),
    )

    return ProfitabilityResponse(
        gross_amount=result.gross_amount,
        fee_percentage=result.fee_percentage,
        fee_amount=result.fee_amount,
        tax_amount=result.tax_amount,
        commission_amount=result.commission_amount,
        total_deductions=result.total_deductions,
        net_revenue=result.net_revenue,
        direct_cost=result.direct_cost,
        profit=result.profit,
        margin_percent=result.margin_percent,
        issues=issues_out(result.issues),
    )
