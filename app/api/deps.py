from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import uuid

from app.db.session import get_db
from app.models.user import Profile
from app.core.security import CallerContext, verify_access_token
from app.services.payment_gateway import StripeGateway, get_payment_gateway

security = HTTPBearer()


def get_caller(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> CallerContext:
    """
    Resolve the bearer token to a CallerContext.
    Supabase vouches for the identity; the role comes from our profiles table.
    """
    payload = verify_access_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = uuid.UUID(str(payload.get("id")))
    except (ValueError, TypeError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )

    profile = db.get(Profile, user_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Profile not found",
        )

    return CallerContext(id=profile.id, role=profile.role.value)


def require_role(*roles: str):
    """Dependency factory restricting a route to the given roles."""
    def checker(caller: CallerContext = Depends(get_caller)) -> CallerContext:
        if caller.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. {' or '.join(r.capitalize() for r in roles)} role required.",
            )
        return caller
    return checker


def get_gateway() -> StripeGateway:
    return get_payment_gateway()
