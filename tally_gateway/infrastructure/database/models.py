"""SQLAlchemy ORM models for the subscriptions table"""

import uuid
from sqlalchemy import Column, Boolean, CheckConstraint, Date, DateTime, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Subscription(Base):
    """Recurring obligation owned by a user"""

    __tablename__ = "subscriptions"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_subscriptions_amount_non_negative"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    service_provider = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    category = Column(Text, nullable=True)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(Text, nullable=False, default="USD")
    recurrence = Column(Text, nullable=False, default="monthly")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    next_payment_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=True, default=True)
    status = Column(Text, nullable=True, default="active")  # active | paused | cancelled
    roi_expected = Column(Numeric(14, 2), nullable=True)
    roi_actual = Column(Numeric(14, 2), nullable=True)
    roi_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
