"""Portfolio-level insights: spend summary, duplicate services, overlapping categories"""

from collections import defaultdict
from typing import Dict, Iterable, List

from tally_gateway.domain.frequency import normalize_to_monthly, resolve_cadence
from tally_gateway.domain.models import (
    DuplicateGroup,
    OverlapGroup,
    PortfolioSummary,
    RecurringObligation,
)

INACTIVE_STATUSES = {"cancelled", "inactive"}
STREAMING_KEYWORDS = ("streaming", "entertainment")


def is_billable(obligation: RecurringObligation) -> bool:
    """False for obligations flagged inactive or cancelled in storage"""
    if obligation.is_active is False:
        return False
    return (obligation.status or "").lower() not in INACTIVE_STATUSES


def _monthly_cost(obligation: RecurringObligation) -> float:
    return normalize_to_monthly(obligation.amount, obligation.recurrence)


def _group_by_category(
    obligations: Iterable[RecurringObligation],
    default: str,
    lowercase: bool = False,
) -> Dict[str, List[RecurringObligation]]:
    groups: Dict[str, List[RecurringObligation]] = {}
    for obligation in obligations:
        category = obligation.category or default
        if lowercase:
            category = category.lower()
        groups.setdefault(category, []).append(obligation)
    return groups


def summarize_portfolio(obligations: Iterable[RecurringObligation]) -> PortfolioSummary:
    """
    Summarize recurring spend across billable obligations.

    Annual cost is the monthly-normalized total x12, matching
    CostAnalysis.annual_cost. Cadence counts are keyed by canonical cadence
    name, so "yearly" counts as "annual" and a missing recurrence as "monthly".
    """
    billable = [o for o in obligations if is_billable(o)]

    count_by_category: Dict[str, int] = defaultdict(int)
    count_by_cadence: Dict[str, int] = defaultdict(int)
    cost_by_category: Dict[str, float] = defaultdict(float)
    total_monthly = 0.0

    for obligation in billable:
        category = obligation.category or "Uncategorized"
        monthly = _monthly_cost(obligation)

        count_by_category[category] += 1
        count_by_cadence[resolve_cadence(obligation.recurrence).value] += 1
        cost_by_category[category] += monthly
        total_monthly += monthly

    return PortfolioSummary(
        subscription_count=len(billable),
        total_monthly_cost=total_monthly,
        total_annual_cost=total_monthly * 12,
        count_by_category=dict(count_by_category),
        count_by_cadence=dict(count_by_cadence),
        monthly_cost_by_category=sorted(cost_by_category.items(), key=lambda item: item[1], reverse=True),
    )


def _duplicate_group(
    category: str,
    reason: str,
    recommendation: str,
    members: List[RecurringObligation],
) -> DuplicateGroup:
    combined = sum(_monthly_cost(o) for o in members)
    return DuplicateGroup(
        category=category,
        reason=reason,
        recommendation=recommendation,
        obligations=members,
        combined_monthly_cost=combined,
        estimated_monthly_savings=combined / 2,
    )


def find_duplicate_services(obligations: Iterable[RecurringObligation]) -> List[DuplicateGroup]:
    """
    Flag obligations that are likely redundant, per category.

    Rules (categories with at least two obligations only):
    - Streaming/entertainment category: the whole category is one group
    - Same provider more than once (case-insensitive): one group per provider
    - Three or more obligations in the category: the whole category is one group

    Savings are estimated as half the group's combined monthly cost.
    """
    groups: List[DuplicateGroup] = []

    for category, members in _group_by_category(obligations, "Uncategorized").items():
        if len(members) < 2:
            continue

        lowered = category.lower()
        if any(keyword in lowered for keyword in STREAMING_KEYWORDS):
            groups.append(
                _duplicate_group(
                    category,
                    "Multiple streaming services detected",
                    "Consider consolidating to fewer streaming platforms or rotating subscriptions monthly",
                    list(members),
                )
            )

        by_provider: Dict[str, List[RecurringObligation]] = {}
        for obligation in members:
            provider = (obligation.service_provider or "").strip().lower()
            if provider:
                by_provider.setdefault(provider, []).append(obligation)

        for provider, same_provider in by_provider.items():
            if len(same_provider) > 1:
                groups.append(
                    _duplicate_group(
                        category,
                        f"Multiple subscriptions from {provider}",
                        "Check if these services can be bundled or if one can be eliminated",
                        same_provider,
                    )
                )

        if len(members) >= 3:
            groups.append(
                _duplicate_group(
                    category,
                    f"Multiple services in {category} category",
                    "Review if all these services are necessary or if some have overlapping features",
                    list(members),
                )
            )

    return groups


def find_overlapping_categories(obligations: Iterable[RecurringObligation]) -> List[OverlapGroup]:
    """Categories (case-insensitive) holding two or more active obligations, first-seen order"""
    active = [o for o in obligations if o.is_active is not False]
    return [
        OverlapGroup(category=category, obligations=members)
        for category, members in _group_by_category(active, "uncategorized", lowercase=True).items()
        if len(members) >= 2
    ]
