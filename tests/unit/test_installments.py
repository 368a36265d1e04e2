"""Unit tests for installment schedule generation and sale settlement"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from clinic_settlement.domain.exceptions import InvalidInputError
from clinic_settlement.domain.installments import (
    generate_installment_schedule,
    generate_schedule,
    settle_sale,
    split_amount,
    validate_split_sum,
)
from clinic_settlement.domain.models import (
    CardType,
    InstallmentStatus,
    IssueKind,
    MissingFeeRulePolicy,
    PaymentMethod,
    PaymentSplit,
    RemainderPolicy,
)


def test_generate_schedule_equal_split(sale_date):
    """Test schedule with evenly divisible amount"""
    installments = generate_schedule(Decimal("400.00"), 4, 30, start_date=sale_date)

    assert len(installments) == 4
    assert all(inst.amount == Decimal("100.00") for inst in installments)
    assert sum(inst.amount for inst in installments) == Decimal("400.00")
    assert [inst.sequence_number for inst in installments] == [1, 2, 3, 4]
    assert all(inst.status == InstallmentStatus.PENDING for inst in installments)


def test_generate_schedule_rounding():
    """Test last installment absorbs remainder"""
    installments = generate_schedule(Decimal("1000.00"), 3, 30)

    assert [inst.amount for inst in installments] == [
        Decimal("333.33"),
        Decimal("333.33"),
        Decimal("333.34"),
    ]
    assert sum(inst.amount for inst in installments) == Decimal("1000.00")


def test_generate_schedule_dates(sale_date):
    """Test first due after float days, then every 30 days"""
    installments = generate_schedule(Decimal("1000.00"), 3, 30, start_date=sale_date)

    assert installments[0].due_date == sale_date + timedelta(days=30)
    assert installments[1].due_date == sale_date + timedelta(days=60)
    assert installments[2].due_date == sale_date + timedelta(days=90)


def test_generate_schedule_no_business_day_adjustment():
    """Test due dates may fall on weekends"""
    friday = date(2024, 3, 1)
    installments = generate_schedule(Decimal("100.00"), 1, 1, start_date=friday)

    assert installments[0].due_date == date(2024, 3, 2)
    assert installments[0].due_date.weekday() == 5  # Saturday


def test_generate_schedule_defaults_to_today():
    installments = generate_schedule(Decimal("50.00"), 1, 0)
    assert installments[0].due_date == date.today()


@pytest.mark.parametrize(
    "amount,count",
    [
        (Decimal("0.01"), 1),
        (Decimal("0.12"), 12),
        (Decimal("100.00"), 7),
        (Decimal("1234.56"), 10),
        (Decimal("99999.99"), 24),
        (Decimal("10.005"), 3),
    ],
)
def test_generate_schedule_sum_invariant(amount, count):
    """Test N installments summing to the amount within a cent"""
    installments = generate_schedule(amount, count, 30)

    assert len(installments) == count
    assert abs(sum(inst.amount for inst in installments) - amount) <= Decimal("0.01")


def test_generate_schedule_zero_amount():
    """Test handling of zero amount"""
    assert generate_schedule(Decimal("0"), 3, 30) == []


def test_generate_schedule_invalid_input():
    with pytest.raises(InvalidInputError):
        generate_schedule(Decimal("100"), 0, 30)
    with pytest.raises(InvalidInputError):
        generate_schedule(Decimal("-1"), 1, 30)
    with pytest.raises(InvalidInputError):
        generate_schedule(Decimal("100"), 1, -1)


def test_generate_schedule_one_cent_per_installment():
    """Test the smallest splittable amount: one cent each"""
    installments = generate_schedule(Decimal("0.05"), 5, 30)
    assert [inst.amount for inst in installments] == [Decimal("0.01")] * 5


def test_generate_schedule_more_installments_than_cents():
    """Test no zero-value installments are produced"""
    with pytest.raises(InvalidInputError):
        generate_schedule(Decimal("0.05"), 10, 30)


def test_generate_installment_schedule_sub_cent_amount(sale_date):
    """Test 100.005 is scheduled as 100.01 with no drift under the default policy"""
    schedule = generate_installment_schedule(Decimal("100.005"), 3, PaymentMethod.CASH_PIX, sale_date=sale_date)

    assert schedule.issues == []
    assert schedule.amount == Decimal("100.01")
    assert [i.amount for i in schedule.installments] == [
        Decimal("33.33"),
        Decimal("33.33"),
        Decimal("33.35"),
    ]
    assert sum(i.amount for i in schedule.installments) == schedule.settlement.gross_amount


def test_split_amount_equal_split_drifts():
    """Test EQUAL_SPLIT keeps the observed per-installment rounding"""
    parts = split_amount(Decimal("100.00"), 7, RemainderPolicy.EQUAL_SPLIT)

    assert parts == [Decimal("14.29")] * 7
    assert sum(parts) == Decimal("100.03")


def test_generate_installment_schedule_credit_card(fee_rules, sale_date):
    """Test card schedule uses the rule's receiving days and carries net amounts"""
    schedule = generate_installment_schedule(
        Decimal("1000.00"),
        3,
        PaymentMethod.CREDIT_CARD,
        fee_rules=fee_rules,
        card_operator="Rede",
        card_type=CardType.CREDIT,
        sale_date=sale_date,
    )

    assert schedule.ok
    assert schedule.first_due_offset_days == 30
    assert schedule.settlement.fee_amount == Decimal("32.00")
    assert [i.amount for i in schedule.installments] == [
        Decimal("333.33"),
        Decimal("333.33"),
        Decimal("333.34"),
    ]
    assert [i.net_amount for i in schedule.installments] == [
        Decimal("322.66"),
        Decimal("322.66"),
        Decimal("322.68"),
    ]
    assert sum(i.net_amount for i in schedule.installments) == Decimal("968.00")
    assert [i.due_date for i in schedule.installments] == [
        date(2024, 3, 31),
        date(2024, 4, 30),
        date(2024, 5, 30),
    ]
    assert all(i.payment_method == PaymentMethod.CREDIT_CARD for i in schedule.installments)
    assert all(i.total_installments == 3 for i in schedule.installments)


def test_generate_installment_schedule_cash_same_day(fee_rules, sale_date):
    schedule = generate_installment_schedule(Decimal("250.00"), 1, PaymentMethod.CASH_PIX, fee_rules=fee_rules, sale_date=sale_date)

    assert schedule.first_due_offset_days == 0
    assert schedule.installments[0].due_date == sale_date
    assert schedule.installments[0].net_amount == Decimal("250.00")


def test_generate_installment_schedule_bank_slip_offset(sale_date):
    schedule = generate_installment_schedule(Decimal("300.00"), 3, PaymentMethod.BANK_SLIP, sale_date=sale_date)

    assert schedule.first_due_offset_days == 2
    assert schedule.installments[0].due_date == sale_date + timedelta(days=2)
    assert schedule.installments[2].due_date == sale_date + timedelta(days=62)


def test_generate_installment_schedule_unresolved_uses_default_float(fee_rules, sale_date):
    """Test unknown operator: zero fee, default 30-day float, warning kept"""
    schedule = generate_installment_schedule(
        Decimal("500.00"),
        5,
        PaymentMethod.CREDIT_CARD,
        fee_rules=fee_rules,
        card_operator="Unknown",
        sale_date=sale_date,
    )

    assert schedule.ok
    assert schedule.first_due_offset_days == 30
    assert schedule.settlement.net_amount == Decimal("500.00")
    assert len(schedule.installments) == 5
    assert [i.kind for i in schedule.issues] == [IssueKind.UNRESOLVED_FEE_RULE]


def test_generate_installment_schedule_rejected(fee_rules, sale_date):
    """Test REJECT policy produces no installments"""
    schedule = generate_installment_schedule(
        Decimal("500.00"),
        5,
        PaymentMethod.CREDIT_CARD,
        fee_rules=fee_rules,
        card_operator="Rede",
        sale_date=sale_date,
        on_missing_rule=MissingFeeRulePolicy.REJECT,
    )

    assert not schedule.ok
    assert schedule.installments == []


def test_generate_installment_schedule_reports_drift(sale_date):
    schedule = generate_installment_schedule(
        Decimal("100.00"),
        7,
        PaymentMethod.BANK_SLIP,
        sale_date=sale_date,
        remainder_policy=RemainderPolicy.EQUAL_SPLIT,
    )

    assert schedule.ok
    assert [i.kind for i in schedule.issues] == [IssueKind.SCHEDULE_REMAINDER_DRIFT]


def test_validate_split_sum_within_tolerance():
    splits = [
        PaymentSplit(PaymentMethod.CASH_PIX, Decimal("400.00")),
        PaymentSplit(PaymentMethod.CREDIT_CARD, Decimal("599.99"), 3, "Rede", CardType.CREDIT),
    ]
    assert validate_split_sum(splits, Decimal("1000.00")) is None


def test_validate_split_sum_mismatch():
    splits = [PaymentSplit(PaymentMethod.CASH_PIX, Decimal("900.00"))]
    issue = validate_split_sum(splits, Decimal("1000.00"))

    assert issue.kind == IssueKind.INVALID_SPLIT_SUM
    assert issue.blocking is True


def test_settle_sale_multiple_splits(fee_rules, sale_date):
    """Test a sale paid part in Pix, part on Rede credit 3x"""
    splits = [
        PaymentSplit(PaymentMethod.CASH_PIX, Decimal("400.00")),
        PaymentSplit(PaymentMethod.CREDIT_CARD, Decimal("600.00"), 3, "Rede", CardType.CREDIT),
    ]
    sale = settle_sale(Decimal("1000.00"), splits, fee_rules, sale_date=sale_date)

    assert sale.ok
    assert len(sale.schedules) == 2
    assert sale.gross_total == Decimal("1000.00")
    assert sale.fee_total == Decimal("19.20")  # 600 * 3.2%
    assert sale.net_total == Decimal("980.80")
    assert len(sale.schedules[1].installments) == 3


def test_settle_sale_invalid_sum_generates_nothing(fee_rules, sale_date):
    """Test mismatch is reported before any schedule is generated"""
    splits = [PaymentSplit(PaymentMethod.CREDIT_CARD, Decimal("600.00"), 3, "Rede", CardType.CREDIT)]
    sale = settle_sale(Decimal("1000.00"), splits, fee_rules, sale_date=sale_date)

    assert not sale.ok
    assert sale.schedules == []
    assert sale.issues[0].kind == IssueKind.INVALID_SPLIT_SUM
