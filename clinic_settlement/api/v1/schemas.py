"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from clinic_settlement.domain.models import (
    CardType,
    CostCategory,
    Expense,
    FeeRule,
    Installment,
    InstallmentSchedule,
    InstallmentStatus,
    Issue,
    IssueKind,
    MissingFeeRulePolicy,
    NetSettlement,
    PaymentMethod,
    PaymentSplit,
    RemainderPolicy,
    VariableCostRule,
)


class IssueSchema(BaseModel):
    kind: IssueKind
    message: str
    blocking: bool = False

    @classmethod
    def from_domain(cls, issue: Issue) -> "IssueSchema":
        return cls(kind=issue.kind, message=issue.message, blocking=issue.blocking)


def issues_out(issues: List[Issue]) -> List[IssueSchema]:
    return [IssueSchema.from_domain(i) for i in issues]


class FeeRuleSchema(BaseModel):
    """Card fee rule row as configured by the clinic"""

    card_operator: str = Field(..., min_length=1)
    card_type: CardType
    installment_count: int = Field(..., ge=1)
    fee_percentage: Decimal = Field(..., ge=0)
    receiving_days: int = Field(..., ge=0)
    active: bool = True

    def to_domain(self) -> FeeRule:
        return FeeRule(**self.model_dump())

    @classmethod
    def from_domain(cls, rule: FeeRule) -> "FeeRuleSchema":
        return cls(
            card_operator=rule.card_operator,
            card_type=rule.card_type,
            installment_count=rule.installment_count,
            fee_percentage=rule.fee_percentage,
            receiving_days=rule.receiving_days,
            active=rule.active,
        )


class VariableCostRuleSchema(BaseModel):
    category: CostCategory
    percentage: Decimal = Field(..., ge=0)
    description: str = ""

    def to_domain(self) -> VariableCostRule:
        return VariableCostRule(**self.model_dump())


class FeeResolveRequest(BaseModel):
    """Request body for POST /v1/fees/resolve"""

    fee_rules: List[FeeRuleSchema]
    card_operator: str = Field(..., min_length=1)
    card_type: CardType
    installment_count: int = Field(..., ge=1)


class FeeResolveResponse(BaseModel):
    resolved: bool
    rule: Optional[FeeRuleSchema] = None


class NetSettlementRequest(BaseModel):
    """Request body for POST /v1/settlements/net"""

    gross_amount: Decimal = Field(..., gt=0)
    payment_method: PaymentMethod
    installment_count: int = Field(1, ge=1)
    card_operator: Optional[str] = None
    card_type: Optional[CardType] = None
    fee_rules: List[FeeRuleSchema] = []
    on_missing_rule: Optional[MissingFeeRulePolicy] = None

    def domain_fee_rules(self) -> List[FeeRule]:
        return [r.to_domain() for r in self.fee_rules]


class NetSettlementResponse(BaseModel):
    gross_amount: Decimal
    fee_percentage: Decimal
    fee_amount: Decimal
    net_amount: Decimal
    receiving_days: Optional[int] = None
    issues: List[IssueSchema] = []

    @classmethod
    def from_domain(cls, settlement: NetSettlement) -> "NetSettlementResponse":
        return cls(
            gross_amount=settlement.gross_amount,
            fee_percentage=settlement.fee_percentage,
            fee_amount=settlement.fee_amount,
            net_amount=settlement.net_amount,
            receiving_days=settlement.receiving_days,
            issues=issues_out(settlement.issues),
        )


class ScheduleRequest(NetSettlementRequest):
    """Request body for POST /v1/settlements/schedule"""

    sale_date: Optional[date] = None
    remainder_policy: Optional[RemainderPolicy] = None


class InstallmentSchema(BaseModel):
    """Single installment; also accepted as a receivable in projections"""

    sequence_number: int = Field(1, ge=1)
    amount: Decimal
    due_date: date
    status: InstallmentStatus = InstallmentStatus.PENDING
    net_amount: Optional[Decimal] = None
    payment_method: Optional[PaymentMethod] = None
    total_installments: Optional[int] = None

    def to_domain(self) -> Installment:
        return Installment(**self.model_dump())

    @classmethod
    def from_domain(cls, inst: Installment) -> "InstallmentSchema":
        return cls(
            sequence_number=inst.sequence_number,
            amount=inst.amount,
            due_date=inst.due_date,
            status=inst.status,
            net_amount=inst.net_amount,
            payment_method=inst.payment_method,
            total_installments=inst.total_installments,
        )


class ScheduleResponse(BaseModel):
    payment_method: PaymentMethod
    amount: Decimal
    first_due_offset_days: int
    settlement: NetSettlementResponse
    installments: List[InstallmentSchema]
    issues: List[IssueSchema] = []

    @classmethod
    def from_domain(cls, schedule: InstallmentSchedule) -> "ScheduleResponse":
        return cls(
            payment_method=schedule.payment_method,
            amount=schedule.amount,
            first_due_offset_days=schedule.first_due_offset_days,
            settlement=NetSettlementResponse.from_domain(schedule.settlement),
            installments=[InstallmentSchema.from_domain(i) for i in schedule.installments],
            issues=issues_out(schedule.issues),
        )


class PaymentSplitSchema(BaseModel):
    payment_method: PaymentMethod
    amount: Decimal = Field(..., gt=0)
    installment_count: int = Field(1, ge=1)
    card_operator: Optional[str] = None
    card_type: Optional[CardType] = None

    def to_domain(self) -> PaymentSplit:
        return PaymentSplit(**self.model_dump())


class SaleSettleRequest(BaseModel):
    """Request body for POST /v1/sales/settle"""

    sale_total: Decimal = Field(..., gt=0)
    splits: List[PaymentSplitSchema] = Field(..., min_length=1)
    fee_rules: List[FeeRuleSchema] = []
    sale_date: Optional[date] = None
    on_missing_rule: Optional[MissingFeeRulePolicy] = None


class SaleSettleResponse(BaseModel):
    sale_total: Decimal
    gross_total: Decimal
    fee_total: Decimal
    net_total: Decimal
    schedules: List[ScheduleResponse]
    issues: List[IssueSchema] = []


class MarkupRequest(BaseModel):
    """Request body for POST /v1/pricing/markup; send exactly one of markup_percent or price"""

    cost: Decimal = Field(..., ge=0)
    markup_percent: Optional[Decimal] = None
    price: Optional[Decimal] = Field(None, ge=0)

    @model_validator(mode="after")
    def one_direction(self) -> "MarkupRequest":
        if (self.markup_percent is None) == (self.price is None):
            raise ValueError("Provide exactly one of markup_percent or price")
        return self


class MarkupResponse(BaseModel):
    cost: Decimal
    markup_percent: Optional[Decimal] = None
    price: Optional[Decimal] = None
    issues: List[IssueSchema] = []


class DiscountRequest(BaseModel):
    """Request body for POST /v1/pricing/discount; send exactly one of discount_percent or final_price"""

    list_price: Decimal = Field(..., ge=0)
    discount_percent: Optional[Decimal] = None
    final_price: Optional[Decimal] = Field(None, ge=0)

    @model_validator(mode="after")
    def one_direction(self) -> "DiscountRequest":
        if (self.discount_percent is None) == (self.final_price is None):
            raise ValueError("Provide exactly one of discount_percent or final_price")
        return self


class DiscountResponse(BaseModel):
    list_price: Decimal
    discount_percent: Optional[Decimal] = None
    final_price: Optional[Decimal] = None
    issues: List[IssueSchema] = []


class ProfitabilityRequest(BaseModel):
    """Request body for POST /v1/profitability"""

    price: Decimal = Field(..., gt=0)
    payment_method: PaymentMethod
    installment_count: int = Field(1, ge=1)
    card_operator: Optional[str] = None
    card_type: Optional[CardType] = None
    fee_rules: List[FeeRuleSchema] = []
    tax_rules: List[VariableCostRuleSchema] = []
    commission_rules: List[VariableCostRuleSchema] = []
    direct_cost: Decimal = Field(Decimal("0"), ge=0)
    on_missing_rule: Optional[MissingFeeRulePolicy] = None


class ProfitabilityResponse(BaseModel):
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
    issues: List[IssueSchema] = []


class ExpenseSchema(BaseModel):
    due_date: date
    category: str = Field(..., min_length=1)
    amount: Decimal = Field(Decimal("0"), ge=0)
    custom_category: Optional[str] = None
    description: str = ""
    percentage: Optional[Decimal] = Field(None, ge=0)

    def to_domain(self) -> Expense:
        return Expense(**self.model_dump())


class CashFlowRequest(BaseModel):
    """Request body for POST /v1/cashflow/projection"""

    period_start: date
    period_end: date
    installments: List[InstallmentSchema] = []
    expenses: List[ExpenseSchema] = []
    splits: List[PaymentSplitSchema] = []
    sales_total: Decimal = Field(Decimal("0"), ge=0)

    @model_validator(mode="after")
    def ordered_period(self) -> "CashFlowRequest":
        if self.period_end < self.period_start:
            raise ValueError("period_end must not be before period_start")
        return self
