from app.schemas.transaction import TipCreate, ContentPurchaseCreate, PaymentInitiated, Transaction
from app.schemas.subscription import SubscriptionCreate, SubscriptionTierUpdate, Subscription
from app.schemas.message import DirectMessageCreate, MassMessageCreate, Message, MassMessageResponse
from app.schemas.gallery import GalleryCreate, GalleryContentChange, Gallery

__all__ = [
    "TipCreate", "ContentPurchaseCreate", "PaymentInitiated", "Transaction",
    "SubscriptionCreate", "SubscriptionTierUpdate", "Subscription",
    "DirectMessageCreate", "MassMessageCreate", "Message", "MassMessageResponse",
    "GalleryCreate", "GalleryContentChange", "Gallery",
]
