"""Installment schedule generation for sale payment splits"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from clinic_settlement.config import settings
from clinic_settlement.domain.exceptions import InvalidInputError
from clinic_settlement.domain.fees import compute_net_settlement
from clinic_settlement.domain.models import (
    CardType,
    FeeRule,
    Installment,
    InstallmentSchedule,
    Issue,
    IssueKind,
    MissingFeeRulePolicy,
    PaymentMethod,
    PaymentSplit,
    RemainderPolicy,
    SaleSettlement,
)
from clinic_settlement.utils.date_utils import add_calendar_days
from clinic_settlement.utils.money import CENT, ZERO, Number, quantize_money, to_decimal


def split_amount(
    amount: Decimal,
    num_installments: int,
    remainder_policy: RemainderPolicy = RemainderPolicy.LAST_INSTALLMENT,
) -> List[Decimal]:
    """
    Divide an amount into equal cent-rounded parts.

    LAST_INSTALLMENT: last part absorbs the cent remainder, so the parts
    always sum to the amount.
        1000.00 / 3 -> [333.33, 333.33, 333.34]
    EQUAL_SPLIT: every part is rounded on its own; the sum may drift.
        100.00 / 7 -> 7 x 14.29 = 100.03
    """
    if remainder_policy == RemainderPolicy.EQUAL_SPLIT:
        part = quantize_money(amount / num_installments)
        return [part] * num_installments

    total_cents = int(quantize_money(amount) / CENT)
    base_cents = total_cents // num_installments
    remainder = total_cents % num_installments

    parts = []
    for i in range(num_installments):
        cents = base_cents + (remainder if i == num_installments - 1 else 0)
        parts.append(Decimal(cents) * CENT)
    return parts


def generate_schedule(
    amount: Number,
    installment_count: int,
    first_due_offset_days: int,
    interval_days: Optional[int] = None,
    start_date: Optional[date] = None,
    remainder_policy: Optional[RemainderPolicy] = None,
) -> List[Installment]:
    """
    Generate dated installments for a split amount.

    Due date of installment i (1-indexed):
        start_date + first_due_offset_days + interval_days * (i - 1)
    Dates are calendar days; weekends and holidays are not skipped.

    Args:
        amount: Split amount to settle, rounded to cents
        installment_count: Number of installments (>= 1)
        first_due_offset_days: Float before the first installment is due
        interval_days: Days between installments (default from settings, 30)
        start_date: Sale date (default: today)
        remainder_policy: Where the cent remainder goes (default from settings)

    Returns:
        Installments ordered by sequence number, all PENDING

    Raises:
        InvalidInputError: negative amount or offset, count < 1, or more
            installments than the amount has cents
    """
    requested = to_decimal(amount)
    if requested < 0:
        raise InvalidInputError(f"Schedule amount cannot be negative, got {requested}")
    if installment_count < 1:
        raise InvalidInputError(f"Installment count must be >= 1, got {installment_count}")
    if first_due_offset_days < 0:
        raise InvalidInputError(f"First due offset cannot be negative, got {first_due_offset_days}")
    total = quantize_money(requested)
    if total == 0:
        return []
    # Every installment must carry at least one cent
    if installment_count > total / CENT:
        raise InvalidInputError(f"Cannot split {total} into {installment_count} installments of at least 0.01")

    if interval_days is None:
        interval_days = settings.installment_interval_days
    if start_date is None:
        start_date = date.today()
    policy = RemainderPolicy(remainder_policy or settings.remainder_policy)

    parts = split_amount(total, installment_count, policy)
    return [
        Installment(
            sequence_number=i + 1,
            amount=part,
            due_date=add_calendar_days(start_date, first_due_offset_days + interval_days * i),
            total_installments=installment_count,
        )
        for i, part in enumerate(parts)
    ]


def first_due_offset_for(payment_method: PaymentMethod, receiving_days: Optional[int]) -> int:
    """Float before the first installment of a payment method is due"""
    if payment_method.is_card:
        return receiving_days if receiving_days is not None else settings.default_receiving_days
    if payment_method == PaymentMethod.BANK_SLIP:
        return settings.bank_slip_first_due_offset_days
    return settings.cash_first_due_offset_days


def generate_installment_schedule(
    amount: Number,
    installment_count: int,
    payment_method: PaymentMethod,
    fee_rules: Iterable[FeeRule] = (),
    card_operator: Optional[str] = None,
    card_type: Optional[CardType] = None,
    sale_date: Optional[date] = None,
    on_missing_rule: Optional[MissingFeeRulePolicy] = None,
    remainder_policy: Optional[RemainderPolicy] = None,
) -> InstallmentSchedule:
    """
    Settle one split: resolve its fee and float, then lay out its installments.

    Installment amounts are gross; each installment also carries its share
    of the net amount after the card fee. A blocking fee issue (REJECT
    policy) yields an empty schedule carrying the issue.
    """
    payment_method = PaymentMethod(payment_method)
    settlement = compute_net_settlement(
        amount,
        payment_method,
        installment_count,
        fee_rules=fee_rules,
        card_operator=card_operator,
        card_type=card_type,
        on_missing_rule=on_missing_rule,
    )
    offset = first_due_offset_for(payment_method, settlement.receiving_days)
    issues = list(settlement.issues)

    if not settlement.ok:
        return InstallmentSchedule(
            payment_method=payment_method,
            amount=settlement.gross_amount,
            installments=[],
            settlement=settlement,
            first_due_offset_days=offset,
            issues=issues,
        )

    policy = RemainderPolicy(remainder_policy or settings.remainder_policy)
    installments = generate_schedule(
        settlement.gross_amount,
        installment_count,
        offset,
        start_date=sale_date,
        remainder_policy=policy,
    )
    net_parts = split_amount(settlement.net_amount, installment_count, policy)
    installments = [
        replace(inst, net_amount=net, payment_method=payment_method)
        for inst, net in zip(installments, net_parts)
    ]

    drift = sum((inst.amount for inst in installments), ZERO) - settlement.gross_amount
    if drift != 0:
        logging.warning(
            "Installment amounts drift from split amount",
            extra={"amount": str(settlement.gross_amount), "drift": str(drift), "policy": policy.value},
        )
        issues.append(
            Issue(
                kind=IssueKind.SCHEDULE_REMAINDER_DRIFT,
                message=f"Installments sum differs from {settlement.gross_amount} by {drift}",
            )
        )

    return InstallmentSchedule(
        payment_method=payment_method,
        amount=settlement.gross_amount,
        installments=installments,
        settlement=settlement,
        first_due_offset_days=offset,
        issues=issues,
    )


def validate_split_sum(
    splits: Sequence[PaymentSplit],
    sale_total: Number,
    tolerance: Optional[Decimal] = None,
) -> Optional[Issue]:
    """Blocking issue when split amounts do not add up to the sale total"""
    total = to_decimal(sale_total)
    if tolerance is None:
        tolerance = settings.split_sum_tolerance
    splits_total = sum((to_decimal(s.amount) for s in splits), ZERO)

    if abs(splits_total - total) > tolerance:
        logging.warning(
            "Payment splits do not match sale total",
            extra={"splits_total": str(splits_total), "sale_total": str(total)},
        )
        return Issue(
            kind=IssueKind.INVALID_SPLIT_SUM,
            message=(
                f"Sum of payments ({quantize_money(splits_total)}) must equal "
                f"the sale total ({quantize_money(total)})"
            ),
            blocking=True,
        )
    return None


def settle_sale(
    sale_total: Number,
    splits: Sequence[PaymentSplit],
    fee_rules: Iterable[FeeRule] = (),
    sale_date: Optional[date] = None,
    on_missing_rule: Optional[MissingFeeRulePolicy] = None,
) -> SaleSettlement:
    """
    Validate a sale's splits and generate one schedule per split.

    The split sum is checked before any schedule is generated; a mismatch
    returns no schedules and is never padded or truncated.
    """
    total = to_decimal(sale_total)
    fee_rules = tuple(fee_rules)

    issue = validate_split_sum(splits, total)
    if issue is not None:
        return SaleSettlement(
            sale_total=total,
            schedules=[],
            gross_total=ZERO,
            fee_total=ZERO,
            net_total=ZERO,
            issues=[issue],
        )

    schedules = [
        generate_installment_schedule(
            split.amount,
            split.installment_count,
            split.payment_method,
            fee_rules=fee_rules,
            card_operator=split.card_operator,
            card_type=split.card_type,
            sale_date=sale_date,
            on_missing_rule=on_missing_rule,
        )
        for split in splits
    ]

    return SaleSettlement(
        sale_total=total,
        schedules=schedules,
        gross_total=sum((s.settlement.gross_amount for s in schedules), ZERO),
        fee_total=sum((s.settlement.fee_amount for s in schedules), ZERO),
        net_total=sum((s.settlement.net_amount for s in schedules), ZERO),
        issues=[i for s in schedules for i in s.issues],
    )
