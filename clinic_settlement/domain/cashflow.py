"""Cash flow projection: receivables vs. expenses over a period"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from clinic_settlement.config import settings
from clinic_settlement.domain.exceptions import InvalidInputError
from clinic_settlement.domain.models import (
    CashFlowReport,
    DailyCashFlow,
    Expense,
    HealthIndicator,
    Installment,
    MethodPaymentBreakdown,
    PaymentAnalysis,
    PaymentSplit,
)
from clinic_settlement.utils.date_utils import generate_date_range, in_period
from clinic_settlement.utils.money import HUNDRED, ZERO, Number, percent_of, quantize_money, to_decimal

UNSPECIFIED_METHOD = "UNSPECIFIED"


def expense_amount(expense: Expense, sales_total: Decimal) -> Decimal:
    """Fixed amount, or the percentage of the period's sales for percentage expenses"""
    if expense.percentage is not None:
        return percent_of(sales_total, to_decimal(expense.percentage))
    return to_decimal(expense.amount)


def classify_health(
    net_cash_flow: Decimal,
    total_receivables: Decimal,
    healthy_ratio: Optional[Decimal] = None,
) -> HealthIndicator:
    """
    Three-state health of a period.

    - Healthy: positive net and net keeps more than 30% of receivables
    - Attention: positive net, thinner ratio
    - Critical: net <= 0

    A positive net with no receivables (expenses reversed by refunds) is Healthy.
    """
    if healthy_ratio is None:
        healthy_ratio = settings.healthy_net_ratio
    if net_cash_flow <= 0:
        return HealthIndicator.CRITICAL
    if total_receivables <= 0 or net_cash_flow / total_receivables > healthy_ratio:
        return HealthIndicator.HEALTHY
    return HealthIndicator.ATTENTION


def analyze_payments(splits: Sequence[PaymentSplit]) -> PaymentAnalysis:
    """Single-payment vs. installment totals over the period's sale splits"""
    by_method: Dict[str, MethodPaymentBreakdown] = {}
    cash_total = ZERO
    installment_total = ZERO

    for split in sorted(splits, key=lambda s: s.payment_method.value):
        amount = to_decimal(split.amount)
        breakdown = by_method.setdefault(split.payment_method.value, MethodPaymentBreakdown())
        if split.is_single_payment:
            cash_total += amount
            breakdown.cash = quantize_money(breakdown.cash + amount)
        else:
            installment_total += amount
            breakdown.installment = quantize_money(breakdown.installment + amount)
        breakdown.total = quantize_money(breakdown.total + amount)

    total = cash_total + installment_total
    if total > 0:
        cash_pct = quantize_money(cash_total / total * HUNDRED)
        installment_pct = quantize_money(installment_total / total * HUNDRED)
    else:
        cash_pct = installment_pct = quantize_money(ZERO)

    return PaymentAnalysis(
        total_payments=quantize_money(total),
        cash_amount=quantize_money(cash_total),
        cash_percentage=cash_pct,
        installment_amount=quantize_money(installment_total),
        installment_percentage=installment_pct,
        by_payment_method=by_method,
    )


def project_cash_flow(
    period_start: date,
    period_end: date,
    installments: Sequence[Installment],
    expenses: Sequence[Expense],
    splits: Sequence[PaymentSplit] = (),
    sales_total: Number = 0,
) -> CashFlowReport:
    """
    Bucket receivables and expenses by calendar day over [period_start, period_end].

    Every day of the period gets a bucket, including days with no movement.
    Items dated outside the period are ignored. Percentage expenses are
    resolved against ``sales_total``. The report is rebuilt on every call.
    """
    if period_end < period_start:
        raise InvalidInputError(f"Period end {period_end} is before period start {period_start}")
    sales = to_decimal(sales_total)

    receivables_by_day: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    expenses_by_day: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    receivables_by_method: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    expenses_by_category: Dict[str, Decimal] = defaultdict(lambda: ZERO)

    for inst in installments:
        if not in_period(inst.due_date, period_start, period_end):
            continue
        amount = to_decimal(inst.amount)
        receivables_by_day[inst.due_date] += amount
        method = inst.payment_method.value if inst.payment_method else UNSPECIFIED_METHOD
        receivables_by_method[method] += amount

    for expense in expenses:
        if not in_period(expense.due_date, period_start, period_end):
            continue
        amount = expense_amount(expense, sales)
        expenses_by_day[expense.due_date] += amount
        expenses_by_category[expense.label] += amount

    daily: List[DailyCashFlow] = []
    for day in generate_date_range(period_start, period_end):
        receivables = quantize_money(receivables_by_day[day])
        spent = quantize_money(expenses_by_day[day])
        daily.append(
            DailyCashFlow(
                date=day,
                receivables_total=receivables,
                expenses_total=spent,
                net_total=receivables - spent,
            )
        )

    total_receivables = quantize_money(sum(receivables_by_day.values(), ZERO))
    total_expenses = quantize_money(sum(expenses_by_day.values(), ZERO))
    net_cash_flow = total_receivables - total_expenses

    return CashFlowReport(
        period_start=period_start,
        period_end=period_end,
        daily=daily,
        total_receivables=total_receivables,
        total_expenses=total_expenses,
        net_cash_flow=net_cash_flow,
        expenses_by_category={k: quantize_money(v) for k, v in sorted(expenses_by_category.items())},
        receivables_by_method={k: quantize_money(v) for k, v in sorted(receivables_by_method.items())},
        health_indicator=classify_health(net_cash_flow, total_receivables),
        payment_analysis=analyze_payments(splits),
    )
