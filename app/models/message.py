from sqlalchemy import Column, DateTime, Integer, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
import uuid
from datetime import datetime
from app.db.session import Base


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    participant_a = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    participant_b = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Message(Base):
    __tablename__ = "messages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    conversation_id = Column(UUID(as_uuid=True), ForeignKey("conversations.id"), nullable=False, index=True)
    sender_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False)
    receiver_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    price = Column(Integer, nullable=True)  # PPV message price in cents
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
