"""
FastAPI dependencies (DB session, clock, current owner)
"""
from datetime import tzinfo

from fastapi import Request, HTTPException, status

from tankcare.config import get_settings
from tankcare.infrastructure.db.session import get_db as _get_db
from tankcare.utils.clock import Clock, utc_now


# Re-export get_db
get_db = _get_db


def get_clock() -> Clock:
    """Current-time source; overridden in tests"""
    return utc_now


def get_timezone() -> tzinfo:
    return get_settings().get_timezone()


def get_current_owner_id(request: Request) -> str:
    """
    Owner id of the logged-in user from the session

    Identity itself is managed elsewhere; this only reads the session.

    Raises:
        HTTPException(401): if not logged in
    """
    user_id = request.session.get("user_id")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return str(user_id)
