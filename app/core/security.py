"""
Access token verification against Supabase Auth.

Tokens are issued by Supabase on the frontend; the backend only asks Supabase
who the bearer is and never mints tokens itself.
"""
import logging
from dataclasses import dataclass
from typing import Optional
import uuid

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerContext:
    """Verified identity of the caller, passed explicitly into services."""
    id: uuid.UUID
    role: str


def verify_access_token(token: str) -> Optional[dict]:
    """
    Return the Supabase user payload for a bearer token, or None if the token
    is rejected or Supabase cannot be reached.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
        logger.error("[AUTH] SUPABASE_URL / SUPABASE_ANON_KEY not configured")
        return None

    headers = {
        "Authorization": f"Bearer {token}",
        "apikey": settings.SUPABASE_ANON_KEY,
    }
    try:
        response = httpx.get(
            f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/user",
            headers=headers,
            timeout=10.0,
        )
    except httpx.RequestError as e:
        logger.error(f"[AUTH] Supabase request error: {str(e)}")
        return None

    if response.status_code != 200:
        logger.info(f"[AUTH] Token rejected by Supabase (status {response.status_code})")
        return None
    return response.json()
