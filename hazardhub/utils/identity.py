"""
Identity port.

The subsystem never authenticates; it trusts the actor id supplied by the
session layer in front of it (the X-User-ID header).
"""

from fastapi import Header, HTTPException, status


def current_actor_id(
    user_id: str = Header(..., alias="X-User-ID", description="Stable reporter/voter id"),
) -> str:
    actor_id = user_id.strip()
    if not actor_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-ID header must not be empty",
        )
    return actor_id
