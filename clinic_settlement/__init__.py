"""Clinic payment settlement and profitability engine"""

from clinic_settlement.domain.cashflow import project_cash_flow
from clinic_settlement.domain.fees import compute_net_settlement, resolve_fee
from clinic_settlement.domain.installments import (
    generate_installment_schedule,
    generate_schedule,
    settle_sale,
    validate_split_sum,
)
from clinic_settlement.domain.pricing import (
    discount_from_price,
    markup_from_price,
    price_from_discount,
    price_from_markup,
)
from clinic_settlement.domain.profitability import (
    compute_profitability,
    direct_cost_for_procedure,
    labor_cost,
    supply_cost,
)

__all__ = [
    "compute_net_settlement",
    "compute_profitability",
    "direct_cost_for_procedure",
    "discount_from_price",
    "generate_installment_schedule",
    "generate_schedule",
    "labor_cost",
    "markup_from_price",
    "price_from_discount",
    "price_from_markup",
    "project_cash_flow",
    "resolve_fee",
    "settle_sale",
    "supply_cost",
    "validate_split_sum",
]
