from app.models.user import Profile, UserRole
from app.models.transaction import Transaction, TransactionType, TransactionStatus
from app.models.subscription import Subscription, SubscriptionStatus
from app.models.stripe_event import StripeEvent
from app.models.message import Conversation, Message
from app.models.gallery import Gallery

__all__ = [
    "Profile", "UserRole",
    "Transaction", "TransactionType", "TransactionStatus",
    "Subscription", "SubscriptionStatus",
    "StripeEvent", "Conversation", "Message", "Gallery",
]
