from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_caller, require_role
from app.core.security import CallerContext
from app.models.user import UserRole
from app.schemas.message import DirectMessageCreate, MassMessageCreate, Message as MessageSchema, MassMessageResponse
from app.services import messaging

router = APIRouter()


@router.post("", response_model=MessageSchema, status_code=status.HTTP_201_CREATED)
def send_message(
    body: DirectMessageCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller)
):
    return messaging.send_direct_message(db, caller.id, body.receiver_id, body.text, body.price)


@router.post("/mass", response_model=MassMessageResponse)
def send_mass_message(
    body: MassMessageCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_role(UserRole.CREATOR.value))
):
    """
    Message every active subscriber. Runs inside the request, one send at a
    time; individual failures are reported per recipient.
    """
    return messaging.send_mass_message(db, caller, body.text, body.price)
