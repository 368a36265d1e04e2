"""Prometheus metrics for fee resolution, schedules and cash flow health"""

from prometheus_client import Counter, Histogram

from clinic_settlement.domain.models import HealthIndicator, InstallmentSchedule, NetSettlement
from clinic_settlement.domain.fees import fee_resolved

# Settlement metrics
fee_resolution_counter = Counter(
    "settlement_fee_resolution_total",
    "Card fee rule lookups",
    ["outcome"],  # resolved | unresolved
)

schedule_counter = Counter(
    "settlement_schedules_total",
    "Installment schedules generated",
    ["payment_method"],
)

installment_count_histogram = Histogram(
    "settlement_installment_count",
    "Installments per generated schedule",
    buckets=[1, 2, 3, 6, 10, 12, 18, 24],
)

# Cash flow metrics
cashflow_health_counter = Counter(
    "cashflow_reports_total",
    "Cash flow reports by health indicator",
    ["health"],  # Healthy | Attention | Critical
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_fee_resolution(settlement: NetSettlement) -> None:
    """Count card fee lookups by outcome; cash and bank slip payments are not counted"""
    if settlement.fee_rule is None and fee_resolved(settlement):
        return
    outcome = "resolved" if fee_resolved(settlement) else "unresolved"
    fee_resolution_counter.labels(outcome=outcome).inc()


def record_schedule(schedule: InstallmentSchedule) -> None:
    """Record schedule volume and size by payment method"""
    record_fee_resolution(schedule.settlement)
    if not schedule.installments:
        return
    schedule_counter.labels(payment_method=schedule.payment_method.value).inc()
    installment_count_histogram.observe(len(schedule.installments))


def record_cashflow_health(health: HealthIndicator) -> None:
    cashflow_health_counter.labels(health=health.value).inc()
