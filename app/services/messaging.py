"""
Direct messages and creator mass messages.
"""
import logging
from typing import Optional
import uuid

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.core.security import CallerContext
from app.models.message import Conversation, Message
from app.models.user import Profile, UserRole
from app.services.subscriptions import list_active_subscribers
from app.utils.batch import run_best_effort

logger = logging.getLogger(__name__)


def find_or_create_conversation(db: Session, user_a: uuid.UUID, user_b: uuid.UUID) -> Conversation:
    conversation = db.query(Conversation).filter(
        or_(
            and_(Conversation.participant_a == user_a, Conversation.participant_b == user_b),
            and_(Conversation.participant_a == user_b, Conversation.participant_b == user_a),
        )
    ).first()
    if conversation:
        return conversation

    conversation = Conversation(participant_a=user_a, participant_b=user_b)
    db.add(conversation)
    db.flush()
    return conversation


def send_direct_message(
    db: Session,
    sender_id: uuid.UUID,
    receiver_id: uuid.UUID,
    text: str,
    price: Optional[int] = None,
) -> Message:
    if sender_id == receiver_id:
        raise ValidationError("You cannot message yourself.")
    if not db.get(Profile, receiver_id):
        raise NotFoundError("Recipient not found.")

    try:
        conversation = find_or_create_conversation(db, sender_id, receiver_id)
        message = Message(
            conversation_id=conversation.id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            text=text,
            price=price,
        )
        db.add(message)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(message)
    return message


def send_mass_message(
    db: Session,
    caller: CallerContext,
    text: str,
    price: Optional[int] = None,
) -> dict:
    """
    Message every active subscriber of the calling creator.

    Sends one at a time; one failed send is logged and does not stop the
    others. Returns per-recipient results.
    """
    if caller.role != UserRole.CREATOR.value:
        raise ForbiddenError("Access denied. Creator role required.")

    subscriptions = list_active_subscribers(db, caller.id)
    if not subscriptions:
        raise NotFoundError("You have no active subscribers to message.")

    # A fan holding several tiers still gets one message
    fan_ids = list(dict.fromkeys(sub.fan_id for sub in subscriptions))

    results = run_best_effort(
        fan_ids,
        lambda fan_id: send_direct_message(db, caller.id, fan_id, text, price),
        label="MASS_MESSAGE",
    )
    sent = sum(1 for r in results if r.success)
    logger.info(f"[MASS_MESSAGE] Creator {caller.id}: {sent}/{len(results)} delivered")
    return {
        "sent": sent,
        "failed": len(results) - sent,
        "results": [
            {"recipient_id": r.recipient_id, "success": r.success, "error": r.error}
            for r in results
        ],
    }
