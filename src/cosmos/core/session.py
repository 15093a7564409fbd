"""Explicit user session.

Services receive a Session argument instead of reading a global client.
SessionStore holds the current session for long-lived callers (the CLI)
and notifies subscribers whenever it changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars

logger = structlog.get_logger(__name__)

SessionListener = Callable[["Session | None"], None]


@dataclass(frozen=True)
class Session:
    """An authenticated user."""

    user_id: str
    email: str = ""


class SessionStore:
    """Current session plus change subscriptions."""

    def __init__(self, session: Session | None = None):
        self._session = session
        self._listeners: list[SessionListener] = []

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_session(self, session: Session | None) -> None:
        """Replace the session and notify listeners."""
        self._session = session
        logger.debug("session.changed", user_id=session.user_id if session else None)
        for listener in list(self._listeners):
            listener(session)

    def clear(self) -> None:
        """Sign out."""
        self.set_session(None)


def bind_log_context(session: Session | None) -> None:
    """SessionStore listener that tags log lines with the acting user."""
    if session is None:
        unbind_contextvars("user_id")
    else:
        bind_contextvars(user_id=session.user_id)
