"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from clinic_settlement.api.main import create_app
from clinic_settlement.domain.models import CardType, CostCategory, FeeRule, VariableCostRule


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    return TestClient(create_app())


@pytest.fixture
def sale_date() -> date:
    return date(2024, 3, 1)


@pytest.fixture
def fee_rules() -> list[FeeRule]:
    """Clinic card fee table: Rede credit 1x-3x and debit, Cielo credit with a retired 2x rate"""
    return [
        FeeRule("Rede", CardType.CREDIT, 1, Decimal("2.5"), 30),
        FeeRule("Rede", CardType.CREDIT, 2, Decimal("2.9"), 30),
        FeeRule("Rede", CardType.CREDIT, 3, Decimal("3.2"), 30),
        FeeRule("Rede", CardType.DEBIT, 1, Decimal("1.35"), 1),
        FeeRule("Cielo", CardType.CREDIT, 1, Decimal("2.7"), 28),
        FeeRule("Cielo", CardType.CREDIT, 2, Decimal("4.0"), 28, active=False),
        FeeRule("Cielo", CardType.CREDIT, 2, Decimal("3.1"), 28),
    ]


@pytest.fixture
def tax_rules() -> list[VariableCostRule]:
    return [
        VariableCostRule(CostCategory.TAX, Decimal("6"), "Simples Nacional"),
        VariableCostRule(CostCategory.TAX, Decimal("2"), "ISS"),
    ]


@pytest.fixture
def commission_rules() -> list[VariableCostRule]:
    return [VariableCostRule(CostCategory.COMMISSION, Decimal("10"), "Sales commission")]


@pytest.fixture
def fee_rules_payload() -> list[dict]:
    """Fee table as sent by the back-office UI"""
    return [
        {
            "card_operator": "Rede",
            "card_type": "CREDIT",
            "installment_count": 3,
            "fee_percentage": "3.2",
            "receiving_days": 30,
        },
        {
            "card_operator": "Rede",
            "card_type": "DEBIT",
            "installment_count": 1,
            "fee_percentage": "1.35",
            "receiving_days": 1,
        },
    ]
