"""Subscription cost and ROI analysis - amortizes a recurring charge over its life"""

from datetime import date
from typing import Iterable, List, Optional

from tally_gateway.domain.frequency import normalize_to_monthly
from tally_gateway.domain.models import CostAnalysis, RecurringObligation
from tally_gateway.utils.date_utils import month_bucket_delta


def duration_months(obligation: RecurringObligation, as_of: date) -> int:
    """
    Billed duration in whole months, never less than 1.

    Closed obligations run from start_date to end_date; open ones run to as_of.
    Uses month buckets, so day-of-month does not matter.
    """
    end = obligation.end_date if obligation.end_date is not None else as_of
    return max(1, month_bucket_delta(obligation.start_date, end))


def analyze(obligation: RecurringObligation, as_of: Optional[date] = None) -> CostAnalysis:
    """
    Compute cost, ROI and break-even figures for one obligation.

    Formulas:
    - monthly_cost = amount normalized by recurrence
    - annual_cost  = monthly_cost * 12
    - total_cost   = monthly_cost * duration_months
    - roi_percentage = (expected_return - total_cost) / total_cost * 100
    - roi_ratio      = expected_return / total_cost
    - break_even_months = expected_return / monthly_cost

    ROI figures are 0 and break-even is None unless expected_return > 0
    (and, for break-even, monthly_cost > 0). A return equal to cost is 0%,
    a return below cost is negative.

    Example:
        $10/month for 1 month, roi_expected=5
        total_cost=10, roi_percentage=-50.0, roi_ratio=0.5, break_even=0.5
    """
    if as_of is None:
        as_of = date.today()

    months = duration_months(obligation, as_of)
    monthly_cost = normalize_to_monthly(obligation.amount, obligation.recurrence)
    annual_cost = monthly_cost * 12
    total_cost = monthly_cost * months

    expected_return = obligation.roi_expected if obligation.roi_expected is not None else 0
    actual_return = obligation.roi_actual

    # Free obligations (total_cost == 0) report 0% ROI
    has_return = expected_return > 0 and total_cost > 0
    roi_percentage = ((expected_return - total_cost) / total_cost) * 100 if has_return else 0
    roi_ratio = expected_return / total_cost if has_return else 0

    break_even_months = None
    if expected_return > 0 and monthly_cost > 0:
        break_even_months = expected_return / monthly_cost

    return CostAnalysis(
        subscription_id=obligation.id,
        duration_months=months,
        monthly_cost=monthly_cost,
        annual_cost=annual_cost,
        total_cost=total_cost,
        expected_return=expected_return,
        actual_return=actual_return,
        roi_percentage=roi_percentage,
        roi_ratio=roi_ratio,
        break_even_months=break_even_months,
    )


def analyze_all(
    obligations: Iterable[RecurringObligation],
    as_of: Optional[date] = None,
) -> List[CostAnalysis]:
    """Analyze each obligation against one evaluation date, preserving order"""
    if as_of is None:
        as_of = date.today()
    return [analyze(obligation, as_of) for obligation in obligations]
