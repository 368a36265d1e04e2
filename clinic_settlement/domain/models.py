"""Domain models - pure Python dataclasses representing settlement entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class PaymentMethod(str, Enum):
    CASH_PIX = "CASH_PIX"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    BANK_SLIP = "BANK_SLIP"

    @property
    def is_card(self) -> bool:
        return self in (PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD)


class CardType(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class InstallmentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class CostCategory(str, Enum):
    TAX = "TAX"
    COMMISSION = "COMMISSION"


class HealthIndicator(str, Enum):
    HEALTHY = "Healthy"
    ATTENTION = "Attention"
    CRITICAL = "Critical"


class MissingFeeRulePolicy(str, Enum):
    """What a card payment does when no fee rule matches its installment count"""

    ZERO = "ZERO"  # charge no fee, warn
    REJECT = "REJECT"  # blocking issue


class RemainderPolicy(str, Enum):
    """Where the cent remainder of an equal split goes"""

    LAST_INSTALLMENT = "LAST_INSTALLMENT"
    EQUAL_SPLIT = "EQUAL_SPLIT"  # every installment rounded alone; sum may drift


class IssueKind(str, Enum):
    UNRESOLVED_FEE_RULE = "UNRESOLVED_FEE_RULE"
    DIVISION_BY_ZERO = "DIVISION_BY_ZERO"
    INVALID_SPLIT_SUM = "INVALID_SPLIT_SUM"
    NEGATIVE_OR_CLAMPED_PRICE = "NEGATIVE_OR_CLAMPED_PRICE"
    SCHEDULE_REMAINDER_DRIFT = "SCHEDULE_REMAINDER_DRIFT"


@dataclass(frozen=True)
class Issue:
    """Business outcome reported alongside a result instead of being raised"""

    kind: IssueKind
    message: str
    blocking: bool = False


@dataclass(frozen=True)
class FeeRule:
    """Card processing fee for one operator, card type and installment count"""

    card_operator: str
    card_type: CardType
    installment_count: int
    fee_percentage: Decimal
    receiving_days: int
    active: bool = True


@dataclass(frozen=True)
class VariableCostRule:
    """Percentage cost applied to every sale price (taxes, commissions)"""

    category: CostCategory
    percentage: Decimal
    description: str = ""


@dataclass(frozen=True)
class PaymentSplit:
    """One payment instrument applied to one sale"""

    payment_method: PaymentMethod
    amount: Decimal
    installment_count: int = 1
    card_operator: Optional[str] = None
    card_type: Optional[CardType] = None

    @property
    def is_single_payment(self) -> bool:
        return self.installment_count == 1


@dataclass(frozen=True)
class Installment:
    """Single dated portion of a split's settlement"""

    sequence_number: int
    amount: Decimal
    due_date: date
    status: InstallmentStatus = InstallmentStatus.PENDING
    net_amount: Optional[Decimal] = None
    payment_method: Optional[PaymentMethod] = None
    total_installments: Optional[int] = None


@dataclass(frozen=True)
class Expense:
    """Outgoing payment in a cash flow period.

    Percentage expenses carry ``percentage`` instead of ``amount`` and are
    resolved against the period's sales total.
    """

    due_date: date
    category: str
    amount: Decimal = Decimal("0")
    custom_category: Optional[str] = None
    description: str = ""
    percentage: Optional[Decimal] = None

    @property
    def label(self) -> str:
        return self.custom_category or self.category


@dataclass
class SolvedValue:
    """Result of a price solver; ``value`` is None when undefined"""

    value: Optional[Decimal]
    issue: Optional[Issue] = None

    @property
    def defined(self) -> bool:
        return self.value is not None


@dataclass
class NetSettlement:
    """Fee and net amount for one gross amount"""

    gross_amount: Decimal
    fee_percentage: Decimal
    fee_amount: Decimal
    net_amount: Decimal
    receiving_days: Optional[int] = None
    fee_rule: Optional[FeeRule] = None
    issues: List[Issue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(issue.blocking for issue in self.issues)


@dataclass
class InstallmentSchedule:
    """Installments generated for one split"""

    payment_method: PaymentMethod
    amount: Decimal
    installments: List[Installment]
    settlement: NetSettlement
    first_due_offset_days: int
    issues: List[Issue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(issue.blocking for issue in self.issues)


@dataclass
class SaleSettlement:
    """Validated splits of a sale with one schedule per split"""

    sale_total: Decimal
    schedules: List[InstallmentSchedule]
    gross_total: Decimal
    fee_total: Decimal
    net_total: Decimal
    issues: List[Issue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(issue.blocking for issue in self.issues)


@dataclass
class ProfitabilityResult:
    """Per-sale deductions, net revenue and margin"""

    gross_amount: Decimal
    fee_percentage: Decimal
    fee_amount: Decimal
    tax_amount: Decimal
    commission_amount: Decimal
    total_deductions: Decimal
    net_revenue: Decimal
    direct_cost: Decimal
    profit: Decimal
    margin_percent: Decimal
    issues: List[Issue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(issue.blocking for issue in self.issues)


@dataclass
class DailyCashFlow:
    date: date
    receivables_total: Decimal
    expenses_total: Decimal
    net_total: Decimal


@dataclass
class MethodPaymentBreakdown:
    cash: Decimal = Decimal("0.00")
    installment: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")


@dataclass
class PaymentAnalysis:
    """Single-payment vs. installment split totals for a period"""

    total_payments: Decimal
    cash_amount: Decimal
    cash_percentage: Decimal
    installment_amount: Decimal
    installment_percentage: Decimal
    by_payment_method: Dict[str, MethodPaymentBreakdown]


@dataclass
class CashFlowReport:
    """Receivables vs. expenses over a period"""

    period_start: date
    period_end: date
    daily: List[DailyCashFlow]
    total_receivables: Decimal
    total_expenses: Decimal
    net_cash_flow: Decimal
    expenses_by_category: Dict[str, Decimal]
    receivables_by_method: Dict[str, Decimal]
    health_indicator: HealthIndicator
    payment_analysis: PaymentAnalysis

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form with a stable key order"""
        analysis = self.payment_analysis
        return {
            "period": {
                "start": self.period_start.isoformat(),
                "end": self.period_end.isoformat(),
            },
            "summary": {
                "total_receivables": str(self.total_receivables),
                "total_expenses": str(self.total_expenses),
                "net_cash_flow": str(self.net_cash_flow),
                "health_indicator": self.health_indicator.value,
            },
            "daily": [
                {
                    "date": day.date.isoformat(),
                    "receivables_total": str(day.receivables_total),
                    "expenses_total": str(day.expenses_total),
                    "net_total": str(day.net_total),
                }
                for day in self.daily
            ],
            "breakdowns": {
                "expenses_by_category": {k: str(v) for k, v in self.expenses_by_category.items()},
                "receivables_by_method": {k: str(v) for k, v in self.receivables_by_method.items()},
            },
            "payment_analysis": {
                "total_payments": str(analysis.total_payments),
                "cash_payments": {
                    "amount": str(analysis.cash_amount),
                    "percentage": str(analysis.cash_percentage),
                },
                "installment_payments": {
                    "amount": str(analysis.installment_amount),
                    "percentage": str(analysis.installment_percentage),
                },
                "by_payment_method": {
                    method: {
                        "cash": str(b.cash),
                        "installment": str(b.installment),
                        "total": str(b.total),
                    }
                    for method, b in analysis.by_payment_method.items()
                },
            },
        }


@dataclass(frozen=True)
class SupplyUsage:
    """Quantity of a supply consumed by one procedure"""

    quantity: Decimal
    cost_per_unit: Decimal


@dataclass(frozen=True)
class LaborUsage:
    """Collaborator time spent on one procedure"""

    time_minutes: Decimal
    base_salary: Decimal
    charges: Decimal = Decimal("0")
    monthly_hours: Optional[int] = None
