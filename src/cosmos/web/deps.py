"""Request dependencies for the Web API.

The caller's identity comes from the X-User-Id / X-User-Email headers set
by the authenticating gateway in front of this service.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Header, HTTPException, status

from cosmos.core.session import Session
from cosmos.llm.client import LLMClient


def get_session(
    x_user_id: str | None = Header(default=None),
    x_user_email: str = Header(default=""),
) -> Session:
    """Build the request session or reject unauthenticated calls."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return Session(user_id=x_user_id, email=x_user_email)


@lru_cache(maxsize=1)
def get_llm_client() -> LLMClient:
    """Shared LLM client, created on first use."""
    return LLMClient()
