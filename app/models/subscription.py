from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
import enum
from datetime import datetime
from app.db.session import Base


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELED = "canceled"
    EXPIRED = "expired"  # No transition leads here yet


class Subscription(Base):
    __tablename__ = "subscriptions"

    # Same id as the Stripe subscription (sub_...) so webhooks and the ledger correlate
    id = Column(String, primary_key=True)
    fan_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    creator_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    tier_id = Column(String, nullable=False)  # Stripe price id
    status = Column(SQLEnum(SubscriptionStatus, values_callable=lambda e: [m.value for m in e]), default=SubscriptionStatus.ACTIVE, nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)
    next_billing_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
