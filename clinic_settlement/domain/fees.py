"""Card fee resolution and net settlement calculation"""

import logging
from typing import Dict, Iterable, Optional, Tuple

from clinic_settlement.config import settings
from clinic_settlement.domain.exceptions import InvalidInputError
from clinic_settlement.domain.models import (
    CardType,
    FeeRule,
    Issue,
    IssueKind,
    MissingFeeRulePolicy,
    NetSettlement,
    PaymentMethod,
)
from clinic_settlement.utils.money import ZERO, Number, percent_of, quantize_money, to_decimal

FeeRuleKey = Tuple[str, CardType, int]


def index_fee_rules(fee_rules: Iterable[FeeRule]) -> Dict[FeeRuleKey, FeeRule]:
    """
    Index active rules by (operator, card type, installment count).

    Inactive rules are skipped. Two active rules on the same key make the
    table ambiguous and are rejected instead of picking one.
    """
    index: Dict[FeeRuleKey, FeeRule] = {}
    for rule in fee_rules:
        if rule.installment_count < 1:
            raise InvalidInputError(f"Fee rule installment count must be >= 1, got {rule.installment_count}")
        if to_decimal(rule.fee_percentage) < 0:
            raise InvalidInputError(f"Fee percentage cannot be negative, got {rule.fee_percentage}")
        if rule.receiving_days < 0:
            raise InvalidInputError(f"Receiving days cannot be negative, got {rule.receiving_days}")
        if not rule.active:
            continue

        key = (rule.card_operator, CardType(rule.card_type), rule.installment_count)
        if key in index:
            raise InvalidInputError(
                f"Duplicate active fee rule for {rule.card_operator}/{key[1].value}/{rule.installment_count}x"
            )
        index[key] = rule
    return index


def resolve_fee(
    fee_rules: Iterable[FeeRule],
    card_operator: str,
    card_type: CardType,
    installment_count: int,
) -> Optional[FeeRule]:
    """
    Find the active rule for an exact (operator, card type, installment count).

    There is no fallback to a neighbouring installment count: a 5x sale with
    rules only for 1x-4x is unresolved and returns None.
    """
    if installment_count < 1:
        raise InvalidInputError(f"Installment count must be >= 1, got {installment_count}")

    return index_fee_rules(fee_rules).get((card_operator, CardType(card_type), installment_count))


def card_type_for(payment_method: PaymentMethod, card_type: Optional[CardType] = None) -> CardType:
    """Card type of a card payment, defaulting from the payment method"""
    if card_type is not None:
        return CardType(card_type)
    return CardType.DEBIT if payment_method == PaymentMethod.DEBIT_CARD else CardType.CREDIT


def compute_net_settlement(
    gross_amount: Number,
    payment_method: PaymentMethod,
    installment_count: int,
    fee_rules: Iterable[FeeRule] = (),
    card_operator: Optional[str] = None,
    card_type: Optional[CardType] = None,
    on_missing_rule: Optional[MissingFeeRulePolicy] = None,
) -> NetSettlement:
    """
    Compute card fee and net amount for a gross amount.

    Cash/Pix and bank slips carry no fee. Card payments look up the exact
    fee rule; when none matches, ``on_missing_rule`` decides between a zero
    fee with a warning (ZERO) and a blocking issue (REJECT).

    Example:
        Rede CREDIT 3x at 3.2%, gross 1000.00 -> fee 32.00, net 968.00
    """
    # Sub-cent inputs are settled as the cent amount they round to
    gross = quantize_money(to_decimal(gross_amount))
    if gross <= 0:
        raise InvalidInputError(f"Gross amount must be positive, got {gross}")
    if installment_count < 1:
        raise InvalidInputError(f"Installment count must be >= 1, got {installment_count}")

    payment_method = PaymentMethod(payment_method)
    if not payment_method.is_card:
        return NetSettlement(
            gross_amount=gross,
            fee_percentage=ZERO,
            fee_amount=quantize_money(ZERO),
            net_amount=gross,
        )

    policy = MissingFeeRulePolicy(on_missing_rule or settings.on_missing_fee_rule)
    resolved_type = card_type_for(payment_method, card_type)
    rule = None
    if card_operator:
        rule = resolve_fee(fee_rules, card_operator, resolved_type, installment_count)

    if rule is None:
        blocking = policy == MissingFeeRulePolicy.REJECT
        issue = Issue(
            kind=IssueKind.UNRESOLVED_FEE_RULE,
            message=(
                f"No active fee rule for {card_operator or 'unknown operator'} "
                f"{resolved_type.value} {installment_count}x"
            ),
            blocking=blocking,
        )
        logging.warning(
            "Card fee rule not found",
            extra={
                "card_operator": card_operator,
                "card_type": resolved_type.value,
                "installment_count": installment_count,
                "policy": policy.value,
            },
        )
        return NetSettlement(
            gross_amount=gross,
            fee_percentage=ZERO,
            fee_amount=quantize_money(ZERO),
            net_amount=gross,
            issues=[issue],
        )

    # Percentage keeps full precision; only the fee amount is rounded
    fee_percentage = to_decimal(rule.fee_percentage)
    fee_amount = quantize_money(percent_of(gross, fee_percentage))

    return NetSettlement(
        gross_amount=gross,
        fee_percentage=fee_percentage,
        fee_amount=fee_amount,
        net_amount=gross - fee_amount,
        receiving_days=rule.receiving_days,
        fee_rule=rule,
    )


def fee_resolved(settlement: NetSettlement) -> bool:
    return not any(issue.kind == IssueKind.UNRESOLVED_FEE_RULE for issue in settlement.issues)
