"""Configuration management using Pydantic Settings"""

from decimal import Decimal
from pydantic_settings import BaseSettings, SettingsConfigDict

from clinic_settlement.domain.models import MissingFeeRulePolicy, RemainderPolicy


class Settings(BaseSettings):
    """Engine and service configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "clinic-settlement"
    log_level: str = "INFO"

    # Fee resolution
    on_missing_fee_rule: MissingFeeRulePolicy = MissingFeeRulePolicy.ZERO
    default_receiving_days: int = 30  # Card float when no rule matches

    # Installment schedules
    remainder_policy: RemainderPolicy = RemainderPolicy.LAST_INSTALLMENT
    installment_interval_days: int = 30
    cash_first_due_offset_days: int = 0
    bank_slip_first_due_offset_days: int = 2

    # Sale validation
    split_sum_tolerance: Decimal = Decimal("0.01")

    # Cash flow
    healthy_net_ratio: Decimal = Decimal("0.3")

    # Direct cost
    default_labor_monthly_hours: int = 160


settings = Settings()
