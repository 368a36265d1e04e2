"""Bidirectional pricing endpoints: markup over cost, discount off list price"""

from fastapi import APIRouter

from clinic_settlement.api.v1.schemas import (
    DiscountRequest,
    DiscountResponse,
    MarkupRequest,
    MarkupResponse,
    issues_out,
)
from clinic_settlement.domain.pricing import (
    discount_from_price,
    markup_from_price,
    price_from_discount,
    price_from_markup,
)

router = APIRouter()


@router.post("/pricing/markup", response_model=MarkupResponse)
def markup(request_body: MarkupRequest):
    """
    Solve either direction of cost <-> price.

    markup_percent given: returns the price.
    price given: returns the markup; null with a DIVISION_BY_ZERO issue when cost is 0.
    """
    if request_body.markup_percent is not None:
        solved = price_from_markup(request_body.cost, request_body.markup_percent)
        return MarkupResponse(
            cost=request_body.cost,
            markup_percent=request_body.markup_percent,
            price=solved.value,
            issues=issues_out([solved.issue] if solved.issue else []),
        )

    solved = markup_from_price(request_body.cost, request_body.price)
    return MarkupResponse(
        cost=request_body.cost,
        markup_percent=solved.value,
        price=request_body.price,
        issues=issues_out([solved.issue] if solved.issue else []),
    )


@router.post("/pricing/discount", response_model=DiscountResponse)
def discount(request_body: DiscountRequest):
    """
    Solve either direction of list price <-> final price.

    Discounts above 100% clamp the final price to 0 and report NEGATIVE_OR_CLAMPED_PRICE.
    """
    if request_body.discount_percent is not None:
        solved = price_from_discount(request_body.list_price, request_body.discount_percent)
        return DiscountResponse(
            list_price=request_body.list_price,
            discount_percent=request_body.discount_percent,
            final_price=solved.value,
            issues=issues_out([solved.issue] if solved.issue else []),
        )

    solved = discount_from_price(request_body.list_price, request_body.final_price)
    return DiscountResponse(
        list_price=request_body.list_price,
        discount_percent=solved.value,
        final_price=request_body.final_price,
        issues=issues_out([solved.issue] if solved.issue else []),
    )
