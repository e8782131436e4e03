"""Domain models - pure Python dataclasses representing business entities"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from tally_gateway.domain.exceptions import ValidationError

PAYMENT_KINDS = ("bill", "subscription")


def _finite_number(name: str, value: Any) -> float:
    if isinstance(value, (bool, str, bytes)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return number


def _as_date(name: str, value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"{name} must be a date, got {value!r}")


@dataclass(frozen=True)
class RecurringObligation:
    """A subscription or other recurring charge, as read from storage"""

    id: str
    amount: float  # Charge per billing cycle
    start_date: date
    recurrence: Optional[str] = "monthly"
    end_date: Optional[date] = None
    roi_expected: Optional[float] = None
    roi_actual: Optional[float] = None
    is_active: Optional[bool] = None
    status: Optional[str] = None
    name: str = ""
    service_provider: Optional[str] = None
    category: Optional[str] = None
    currency: str = "USD"
    next_payment_date: Optional[date] = None

    def __post_init__(self) -> None:
        # frozen: coerce through object.__setattr__
        amount = _finite_number("amount", self.amount)
        if amount < 0:
            raise ValidationError(f"amount must be non-negative, got {amount}")
        object.__setattr__(self, "amount", amount)

        start = _as_date("start_date", self.start_date)
        object.__setattr__(self, "start_date", start)

        if self.end_date is not None:
            end = _as_date("end_date", self.end_date)
            if end < start:
                raise ValidationError(f"end_date {end} is before start_date {start}")
            object.__setattr__(self, "end_date", end)

        if self.next_payment_date is not None:
            object.__setattr__(
                self, "next_payment_date", _as_date("next_payment_date", self.next_payment_date)
            )

        for name in ("roi_expected", "roi_actual"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, _finite_number(name, value))


@dataclass(frozen=True)
class CostAnalysis:
    """Cost, ROI and break-even figures for one obligation"""

    subscription_id: str
    duration_months: int
    monthly_cost: float
    annual_cost: float
    total_cost: float
    expected_return: float
    actual_return: Optional[float]
    roi_percentage: float
    roi_ratio: float
    break_even_months: Optional[float]

    @property
    def roi_status(self) -> str:
        """pending until a non-zero actual return is recorded, then the ROI sign"""
        if self.actual_return is None or self.actual_return == 0:
            return "pending"
        if self.roi_percentage > 0:
            return "positive"
        if self.roi_percentage < 0:
            return "negative"
        return "neutral"


@dataclass
class PortfolioSummary:
    """Aggregate cost picture over billable obligations"""

    subscription_count: int
    total_monthly_cost: float
    total_annual_cost: float
    count_by_category: Dict[str, int]
    count_by_cadence: Dict[str, int]
    monthly_cost_by_category: List[Tuple[str, float]]  # Sorted by cost, descending


@dataclass
class DuplicateGroup:
    """Obligations that look redundant with each other"""

    category: str
    reason: str
    recommendation: str
    obligations: List[RecurringObligation]
    combined_monthly_cost: float
    estimated_monthly_savings: float


@dataclass
class OverlapGroup:
    """Two or more active obligations sharing a category"""

    category: str
    obligations: List[RecurringObligation]

    @property
    def count(self) -> int:
        return len(self.obligations)


@dataclass(frozen=True)
class TimelinePayment:
    """A charge landing on a given day of the month"""

    id: str
    name: str
    amount: float
    day: int  # 1-31
    kind: str = "subscription"  # "bill" or "subscription"
    category: Optional[str] = None

    def __post_init__(self) -> None:
        amount = _finite_number("amount", self.amount)
        if amount < 0:
            raise ValidationError(f"amount must be non-negative, got {amount}")
        object.__setattr__(self, "amount", amount)
        if isinstance(self.day, bool) or not isinstance(self.day, int) or not 1 <= self.day <= 31:
            raise ValidationError(f"day must be an integer between 1 and 31, got {self.day!r}")
        if self.kind not in PAYMENT_KINDS:
            raise ValidationError(f"kind must be one of {PAYMENT_KINDS}, got {self.kind!r}")


@dataclass
class TimelineDay:
    """Totals for one day of the month"""

    day: int
    total: float
    bill_total: float
    subscription_total: float
    payment_count: int
    running_balance: float


@dataclass
class PaymentTimeline:
    """Day-of-month distribution of payments"""

    days: List[TimelineDay]
    total: float
    max_daily_total: float
    payments: List[TimelinePayment] = field(default_factory=list)
