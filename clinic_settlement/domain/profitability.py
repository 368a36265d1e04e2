"""Per-sale profitability: variable costs, net revenue, profit and margin"""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from clinic_settlement.config import settings
from clinic_settlement.domain.exceptions import InvalidInputError
from clinic_settlement.domain.fees import compute_net_settlement
from clinic_settlement.domain.models import (
    CardType,
    CostCategory,
    FeeRule,
    LaborUsage,
    MissingFeeRulePolicy,
    PaymentMethod,
    ProfitabilityResult,
    SupplyUsage,
    VariableCostRule,
)
from clinic_settlement.utils.money import HUNDRED, ZERO, Number, percent_of, quantize_money, to_decimal


def sum_percentage_rules(
    price: Decimal,
    rules: Sequence[VariableCostRule],
    category: CostCategory,
) -> Decimal:
    """Sum price * pct/100 over rules; rules add up, they never compound"""
    total = ZERO
    for rule in rules:
        if CostCategory(rule.category) != category:
            raise InvalidInputError(f"Expected {category.value} rule, got {rule.category} ({rule.description})")
        percentage = to_decimal(rule.percentage)
        if percentage < 0:
            raise InvalidInputError(f"Cost percentage cannot be negative, got {percentage}")
        total += percent_of(price, percentage)
    return quantize_money(total)


def compute_profitability(
    price: Number,
    payment_method: PaymentMethod,
    installment_count: int,
    fee_rules: Iterable[FeeRule],
    tax_rules: Sequence[VariableCostRule],
    commission_rules: Sequence[VariableCostRule],
    direct_cost: Number,
    card_operator: Optional[str] = None,
    card_type: Optional[CardType] = None,
    on_missing_rule: Optional[MissingFeeRulePolicy] = None,
) -> ProfitabilityResult:
    """
    Compute deductions and margin for one sale price.

    Steps, in order:
    1. Taxes: every TAX rule applied to the price
    2. Card fee: exact fee rule for the card payment (zero for cash/Pix, bank slip)
    3. Commissions: every COMMISSION rule applied to the price
    4. Net revenue = price - taxes - card fee - commissions
    5. Profit = net revenue - direct cost (supplies + labor)
    6. Margin = profit / net revenue * 100, or 0 when net revenue <= 0

    Rule tables are required arguments; an empty table means no such costs.
    """
    gross = to_decimal(price)
    cost = to_decimal(direct_cost)
    if cost < 0:
        raise InvalidInputError(f"Direct cost cannot be negative, got {cost}")

    tax_amount = sum_percentage_rules(gross, tax_rules, CostCategory.TAX)
    settlement = compute_net_settlement(
        gross,
        payment_method,
        installment_count,
        fee_rules=fee_rules,
        card_operator=card_operator,
        card_type=card_type,
        on_missing_rule=on_missing_rule,
    )
    commission_amount = sum_percentage_rules(gross, commission_rules, CostCategory.COMMISSION)

    total_deductions = tax_amount + settlement.fee_amount + commission_amount
    net_revenue = gross - total_deductions
    profit = net_revenue - cost
    margin = quantize_money(profit / net_revenue * HUNDRED) if net_revenue > 0 else ZERO

    return ProfitabilityResult(
        gross_amount=gross,
        fee_percentage=settlement.fee_percentage,
        fee_amount=settlement.fee_amount,
        tax_amount=tax_amount,
        commission_amount=commission_amount,
        total_deductions=total_deductions,
        net_revenue=net_revenue,
        direct_cost=cost,
        profit=profit,
        margin_percent=margin,
        issues=list(settlement.issues),
    )


def supply_cost(supplies: Iterable[SupplyUsage]) -> Decimal:
    """Sum of quantity * cost per unit"""
    return sum((to_decimal(s.quantity) * to_decimal(s.cost_per_unit) for s in supplies), ZERO)


def labor_cost(labor: Iterable[LaborUsage]) -> Decimal:
    """
    Collaborator time priced at their hourly cost.

    hourly cost = (base salary + charges) / monthly hours
    Missing or zero monthly hours fall back to settings (160).
    """
    total = ZERO
    for usage in labor:
        hours = usage.monthly_hours or settings.default_labor_monthly_hours
        hourly = (to_decimal(usage.base_salary) + to_decimal(usage.charges)) / Decimal(hours)
        total += hourly * to_decimal(usage.time_minutes) / 60
    return total


def direct_cost_for_procedure(
    supplies: Iterable[SupplyUsage] = (),
    labor: Iterable[LaborUsage] = (),
    fixed_cost: Number = 0,
) -> Decimal:
    """Direct cost of one procedure: fixed cost + supplies + labor, rounded to cents"""
    return quantize_money(to_decimal(fixed_cost) + supply_cost(supplies) + labor_cost(labor))
