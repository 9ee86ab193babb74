from sqlalchemy import Column, String, DateTime, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
import uuid
from datetime import datetime
import enum
from app.db.session import Base


class UserRole(str, enum.Enum):
    FAN = "fan"
    CREATOR = "creator"
    ADMIN = "admin"


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the Supabase auth user
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, nullable=False, unique=True, index=True)
    username = Column(String, nullable=True, unique=True)
    role = Column(SQLEnum(UserRole, values_callable=lambda e: [m.value for m in e]), default=UserRole.FAN, nullable=False)
    stripe_customer_id = Column(String, nullable=True, index=True)  # Payer side (cus_...)
    stripe_account_id = Column(String, nullable=True)  # Connected payee account (acct_...)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
