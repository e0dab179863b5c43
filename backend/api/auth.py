"""Caller identity dependency.

Authentication itself happens upstream; the service trusts the
``X-User-Id`` header and scopes every query to it.
"""

from typing import Optional

from fastapi import Header, HTTPException


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Return the caller's user id, or 401 if the header is missing or blank."""
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()
