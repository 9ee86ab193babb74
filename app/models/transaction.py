from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Text, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
import uuid
import enum
from datetime import datetime
from app.db.session import Base


class TransactionType(str, enum.Enum):
    SUBSCRIPTION = "Subscription"
    TIP = "Tip"
    PPV_MESSAGE = "PPV Message"
    PPV_POST = "PPV Post"


class TransactionStatus(str, enum.Enum):
    PENDING = "Pending"
    CLEARED = "Cleared"
    FAILED = "Failed"
    REFUNDED = "Refunded"  # No transition leads here yet


def _enum_values(e):
    return [m.value for m in e]


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    fan_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    creator_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    type = Column(SQLEnum(TransactionType, values_callable=_enum_values), nullable=False)
    amount = Column(Integer, nullable=False)  # Gross, in cents
    platform_fee = Column(Integer, nullable=False)  # In cents
    creator_payout = Column(Integer, nullable=False)  # In cents; platform_fee + creator_payout == amount
    currency = Column(String(3), default="usd", nullable=False)
    status = Column(SQLEnum(TransactionStatus, values_callable=_enum_values), default=TransactionStatus.PENDING, nullable=False, index=True)
    related_content_id = Column(String, nullable=True)
    message = Column(Text, nullable=True)  # Optional note attached to a tip
    payment_gateway_id = Column(String, nullable=True, unique=True, index=True)  # Stripe PaymentIntent id
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
