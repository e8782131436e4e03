"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field, model_validator
from datetime import date
from typing import Dict, List, Optional

from tally_gateway.config import settings


class SubscriptionCreate(BaseModel):
    """Request body for POST /v1/subscriptions"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    name: str = Field(..., min_length=1)
    service_provider: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    amount: float = Field(..., ge=0, allow_inf_nan=False, description="Charge per billing cycle")
    currency: str = Field(default_factory=lambda: settings.default_currency)
    recurrence: str = Field("monthly", min_length=1, description="daily, weekly, bi_weekly, monthly, ...")
    start_date: date
    end_date: Optional[date] = None
    next_payment_date: Optional[date] = None
    is_active: bool = True
    status: str = "active"
    roi_expected: Optional[float] = Field(None, allow_inf_nan=False)
    roi_actual: Optional[float] = Field(None, allow_inf_nan=False)
    roi_notes: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self) -> "SubscriptionCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class SubscriptionResponse(BaseModel):
    """A stored subscription"""

    id: str
    user_id: str
    name: str
    service_provider: Optional[str] = None
    category: Optional[str] = None
    amount: float
    currency: str
    recurrence: str
    start_date: date
    end_date: Optional[date] = None
    next_payment_date: Optional[date] = None
    is_active: Optional[bool] = None
    status: Optional[str] = None
    roi_expected: Optional[float] = None
    roi_actual: Optional[float] = None
    created_at: str


class SubscriptionListResponse(BaseModel):
    """Response for GET /v1/subscriptions"""

    user_id: str
    subscriptions: List[SubscriptionResponse]


class ROIRequest(BaseModel):
    """Request body for POST /v1/subscriptions/roi"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    subscription_id: str = Field(..., min_length=1)


class ROIPreviewRequest(BaseModel):
    """Request body for POST /v1/subscriptions/roi/preview - an unsaved obligation"""

    id: str = "preview"
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    recurrence: Optional[str] = "monthly"
    start_date: date
    end_date: Optional[date] = None
    roi_expected: Optional[float] = Field(None, allow_inf_nan=False)
    roi_actual: Optional[float] = Field(None, allow_inf_nan=False)
    as_of: Optional[date] = Field(None, description="Evaluation date (default: today)")


class ROIResponse(BaseModel):
    """Cost and ROI figures for one subscription"""

    subscription_id: str
    name: str
    service_provider: Optional[str] = None
    category: str
    amount: float
    currency: str
    recurrence: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    duration_months: int
    monthly_cost: float
    annual_cost: float
    total_cost: float
    expected_return: float
    actual_return: Optional[float] = None
    roi_percentage: float
    roi_ratio: float
    break_even_months: Optional[float] = None
    subscription_status: str
    roi_status: str


class ROIListResponse(BaseModel):
    """Response for GET /v1/subscriptions/roi"""

    user_id: str
    as_of: date
    results: List[ROIResponse]


class CategorySpend(BaseModel):
    category: str
    monthly_cost: float


class SummaryResponse(BaseModel):
    """Response for GET /v1/subscriptions/summary"""

    user_id: str
    subscription_count: int
    total_monthly_cost: float
    total_annual_cost: float
    count_by_category: Dict[str, int]
    count_by_cadence: Dict[str, int]
    monthly_cost_by_category: List[CategorySpend]


class SubscriptionBrief(BaseModel):
    """Subscription as listed inside a duplicate or overlap group"""

    id: str
    name: str
    service_provider: Optional[str] = None
    amount: float
    recurrence: Optional[str] = None
    monthly_cost: float


class DuplicateGroupSchema(BaseModel):
    category: str
    reason: str
    recommendation: str
    subscriptions: List[SubscriptionBrief]
    combined_monthly_cost: float
    estimated_monthly_savings: float


class DuplicatesResponse(BaseModel):
    """Response for GET /v1/subscriptions/duplicates"""

    user_id: str
    groups: List[DuplicateGroupSchema]


class OverlapGroupSchema(BaseModel):
    category: str
    count: int
    subscriptions: List[SubscriptionBrief]


class OverlapsResponse(BaseModel):
    """Response for GET /v1/subscriptions/overlaps"""

    user_id: str
    groups: List[OverlapGroupSchema]


class TimelineDaySchema(BaseModel):
    day: int
    total: float
    bill_total: float
    subscription_total: float
    payment_count: int
    running_balance: float


class TimelineResponse(BaseModel):
    """Response for GET /v1/payments/timeline"""

    user_id: str
    total: float
    max_daily_total: float
    days: List[TimelineDaySchema]
