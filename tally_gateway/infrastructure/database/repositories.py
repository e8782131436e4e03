"""Data access layer for subscriptions"""

import uuid
from typing import Any, Dict, List, Optional
from sqlalchemy import inspect
from sqlalchemy.orm import Session
from tally_gateway.infrastructure.database.adapters import obligation_from_row
from tally_gateway.infrastructure.database.models import Subscription
from tally_gateway.domain.exceptions import SubscriptionNotFoundError
from tally_gateway.domain.models import RecurringObligation


def subscription_to_row(subscription: Subscription) -> Dict[str, Any]:
    """Column values of an ORM row as a plain mapping"""
    return {
        attr.key: getattr(subscription, attr.key)
        for attr in inspect(subscription).mapper.column_attrs
    }


class SubscriptionRepository:
    """Repository for user subscriptions"""

    def __init__(self, db: Session):
        self.db = db

    def create_subscription(self, user_id: str, **fields: Any) -> Subscription:
        """Persist a new subscription for a user"""
        db_subscription = Subscription(user_id=user_id, **fields)
        self.db.add(db_subscription)
        self.db.flush()  # Get ID without committing
        return db_subscription

    def get_subscription(self, user_id: str, subscription_id: uuid.UUID) -> Optional[Subscription]:
        """Fetch one subscription, only if the user owns it"""
        return (
            self.db.query(Subscription)
            .filter(Subscription.id == subscription_id, Subscription.user_id == user_id)
            .first()
        )

    def get_subscriptions_by_user(self, user_id: str, limit: Optional[int] = 200) -> List[Subscription]:
        """Fetch a user's subscriptions (active, paused and cancelled); limit=None returns all"""
        query = (
            self.db.query(Subscription)
            .filter(Subscription.user_id == user_id)
            .order_by(Subscription.next_payment_date.asc(), Subscription.created_at.asc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_obligation(self, user_id: str, subscription_id: uuid.UUID) -> RecurringObligation:
        """
        Fetch one subscription as a domain obligation.

        Raises:
            SubscriptionNotFoundError: No such subscription for this user
            ValidationError: Stored row violates obligation invariants
        """
        subscription = self.get_subscription(user_id, subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(f"Subscription {subscription_id} not found")
        return obligation_from_row(subscription_to_row(subscription))

    def get_obligations_by_user(self, user_id: str, limit: Optional[int] = 200) -> List[RecurringObligation]:
        """Fetch all of a user's subscriptions as domain obligations"""
        return [
            obligation_from_row(subscription_to_row(s))
            for s in self.get_subscriptions_by_user(user_id, limit=limit)
        ]
