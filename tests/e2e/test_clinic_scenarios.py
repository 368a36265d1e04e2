"""
E2E scenarios for a clinic's sale-to-cash-flow workflow.

Scenario: a facial procedure is costed from supplies and professional time,
priced with a markup, sold part in Pix and part on Rede credit 2x, then the
month's receivables are projected against the clinic's expenses.

Figures used throughout:
- direct cost 100.00 (supplies 37.50, labor 25.00, fixed 37.50)
- price 250.00 (150% markup)
- split: 50.00 Pix + 200.00 Rede credit 2x at 2.9%, 30-day float
"""

import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient

import clinic_settlement
from clinic_settlement.domain.models import (
    CardType,
    Expense,
    HealthIndicator,
    LaborUsage,
    PaymentMethod,
    PaymentSplit,
    SupplyUsage,
)


@pytest.fixture
def splits() -> list[PaymentSplit]:
    return [
        PaymentSplit(PaymentMethod.CASH_PIX, Decimal("50.00")),
        PaymentSplit(PaymentMethod.CREDIT_CARD, Decimal("200.00"), 2, "Rede", CardType.CREDIT),
    ]


@pytest.mark.e2e
def test_procedure_sale_to_cash_flow(fee_rules, tax_rules, commission_rules, splits, sale_date):
    """
    Full flow through the package facade.
    Expected: healthy month, every split scheduled, margin above 49%
    """
    cost = clinic_settlement.direct_cost_for_procedure(
        supplies=[SupplyUsage(Decimal("3"), Decimal("12.50"))],
        labor=[LaborUsage(Decimal("60"), Decimal("3200"), Decimal("800"), 160)],
        fixed_cost=Decimal("37.50"),
    )
    assert cost == Decimal("100.00")

    price = clinic_settlement.price_from_markup(cost, Decimal("150")).value
    assert price == Decimal("250")

    sale = clinic_settlement.settle_sale(price, splits, fee_rules, sale_date=sale_date)
    assert sale.ok
    assert sale.fee_total == Decimal("5.80")
    assert sale.net_total == Decimal("244.20")

    card = sale.schedules[1]
    assert [i.due_date for i in card.installments] == [date(2024, 3, 31), date(2024, 4, 30)]
    assert [i.net_amount for i in card.installments] == [Decimal("97.10"), Decimal("97.10")]

    result = clinic_settlement.compute_profitability(
        price,
        PaymentMethod.CREDIT_CARD,
        2,
        fee_rules=fee_rules,
        tax_rules=tax_rules,
        commission_rules=commission_rules,
        direct_cost=cost,
        card_operator="Rede",
        card_type=CardType.CREDIT,
    )
    assert result.fee_amount == Decimal("7.25")
    assert result.net_revenue == Decimal("197.75")
    assert result.profit == Decimal("97.75")
    assert result.margin_percent == Decimal("49.43")

    receivables = [inst for schedule in sale.schedules for inst in schedule.installments]
    report = clinic_settlement.project_cash_flow(
        date(2024, 3, 1),
        date(2024, 3, 31),
        installments=receivables,
        expenses=[
            Expense(due_date=date(2024, 3, 10), category="Rent", amount=Decimal("60.00")),
            Expense(due_date=date(2024, 3, 20), category="Tax", percentage=Decimal("8")),
        ],
        splits=splits,
        sales_total=price,
    )

    assert len(report.daily) == 31
    assert report.total_receivables == Decimal("150.00")  # April installment falls outside March
    assert report.total_expenses == Decimal("80.00")
    assert report.net_cash_flow == Decimal("70.00")
    assert report.health_indicator == HealthIndicator.HEALTHY
    assert report.receivables_by_method == {
        "CASH_PIX": Decimal("50.00"),
        "CREDIT_CARD": Decimal("100.00"),
    }
    assert report.payment_analysis.cash_percentage == Decimal("20.00")
    assert report.payment_analysis.installment_percentage == Decimal("80.00")


@pytest.mark.e2e
def test_procedure_sale_to_cash_flow_over_http(client: TestClient, fee_rules_payload: list[dict]):
    """
    Same sale through the HTTP adapter; schedules feed the projection as-is.
    Expected: Healthy month with a 70.00 net
    """
    fee_rules = fee_rules_payload + [
        {
            "card_operator": "Rede",
            "card_type": "CREDIT",
            "installment_count": 2,
            "fee_percentage": "2.9",
            "receiving_days": 30,
        }
    ]
    sale_response = client.post(
        "/v1/sales/settle",
        json={
            "sale_total": "250.00",
            "splits": [
                {"payment_method": "CASH_PIX", "amount": "50.00"},
                {
                    "payment_method": "CREDIT_CARD",
                    "amount": "200.00",
                    "installment_count": 2,
                    "card_operator": "Rede",
                    "card_type": "CREDIT",
                },
            ],
            "fee_rules": fee_rules,
            "sale_date": "2024-03-01",
        },
    )
    assert sale_response.status_code == 200
    sale = sale_response.json()
    installments = [inst for schedule in sale["schedules"] for inst in schedule["installments"]]
    assert len(installments) == 3

    projection = client.post(
        "/v1/cashflow/projection",
        json={
            "period_start": "2024-03-01",
            "period_end": "2024-03-31",
            "installments": installments,
            "expenses": [
                {"due_date": "2024-03-10", "category": "Rent", "amount": "60.00"},
                {"due_date": "2024-03-20", "category": "Tax", "percentage": "8"},
            ],
            "splits": [
                {"payment_method": "CASH_PIX", "amount": "50.00"},
                {"payment_method": "CREDIT_CARD", "amount": "200.00", "installment_count": 2},
            ],
            "sales_total": "250.00",
        },
    )

    assert projection.status_code == 200
    report = projection.json()
    assert report["summary"] == {
        "total_receivables": "150.00",
        "total_expenses": "80.00",
        "net_cash_flow": "70.00",
        "health_indicator": "Healthy",
    }
    assert report["payment_analysis"]["cash_payments"]["percentage"] == "20.00"
    assert report["payment_analysis"]["installment_payments"]["percentage"] == "80.00"


@pytest.mark.e2e
def test_unknown_operator_sale_still_projects(fee_rules, sale_date):
    """
    Sale on an operator missing from the fee table.
    Expected: zero fee with a warning, default 30-day float, receivable still projected
    """
    splits = [PaymentSplit(PaymentMethod.CREDIT_CARD, Decimal("300.00"), 1, "Stone", CardType.CREDIT)]
    sale = clinic_settlement.settle_sale(Decimal("300.00"), splits, fee_rules, sale_date=sale_date)

    assert sale.ok
    assert sale.fee_total == 0
    assert sale.issues[0].blocking is False
    assert sale.schedules[0].installments[0].due_date == date(2024, 3, 31)

    report = clinic_settlement.project_cash_flow(
        date(2024, 3, 31),
        date(2024, 3, 31),
        installments=sale.schedules[0].installments,
        expenses=[Expense(due_date=date(2024, 3, 31), category="Payroll", amount=Decimal("250.00"))],
    )
    # 50 / 300 is under the 30% ratio
    assert report.health_indicator == HealthIndicator.ATTENTION


@pytest.mark.e2e
def test_discounted_package_loses_money(tax_rules, commission_rules):
    """
    A 60% promotional discount on a 250.00 package.
    Expected: negative profit and margin, no exception
    """
    final_price = clinic_settlement.price_from_discount(Decimal("250.00"), Decimal("60")).value
    assert final_price == Decimal("100")

    result = clinic_settlement.compute_profitability(
        final_price,
        PaymentMethod.CASH_PIX,
        1,
        fee_rules=[],
        tax_rules=tax_rules,
        commission_rules=commission_rules,
        direct_cost=Decimal("100.00"),
    )

    assert result.net_revenue == Decimal("82.00")
    assert result.profit == Decimal("-18.00")
    assert result.margin_percent == Decimal("-21.95")
