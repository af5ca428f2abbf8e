# Standard library imports
from typing import Optional

# External package imports
from fastapi import Header, HTTPException, status


async def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None),
) -> str:
    """
    FastAPI dependency returning the caller's user id from the X-User-Id header

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return x_user_id.strip()
