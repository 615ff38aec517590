"""Thread-safe registry of per-session state.

Chain sessions are keyed by a caller-chosen id. Subclasses decide how a
state is created; this base class owns storage, locking and expiry.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Generator
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Generic, Protocol, TypeVar, runtime_checkable


@runtime_checkable
class Expirable(Protocol):
    """State that records when it was last modified."""

    updated_at: datetime


T = TypeVar("T")


class SessionNotFoundError(Exception):
    """Raised when no state is registered under a session id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionManager(Generic[T]):
    """Base class for managers that keep one state object per session.

    All access goes through ``self._lock`` (re-entrant, so subclasses can
    hold it across several calls). Mutate a state only inside ``session()``.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, T] = {}
        self._lock = threading.RLock()

    def _get_session(self, session_id: str) -> T:
        # Caller holds the lock
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    @contextmanager
    def session(self, session_id: str) -> Generator[T, None, None]:
        """Yield the session's state with the registry lock held.

        Raises:
            SessionNotFoundError: If the id is not registered.

        """
        with self._lock:
            yield self._get_session(session_id)

    def session_exists(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _register_session(self, session_id: str, state: T) -> None:
        with self._lock:
            self._sessions[session_id] = state

    def cleanup_stale(
        self,
        max_age: timedelta,
        *,
        now: datetime | None = None,
        predicate: Callable[[T], bool] | None = None,
    ) -> list[str]:
        """Drop sessions whose ``updated_at`` is older than ``max_age``.

        Args:
            max_age: Idle time after which a session expires.
            now: Reference time, defaults to the current time.
            predicate: When given, only states it accepts may be dropped.

        Returns:
            Ids of the dropped sessions.

        Raises:
            TypeError: If a registered state has no ``updated_at``.

        """
        cutoff = (now or datetime.now()) - max_age
        with self._lock:
            expired: list[str] = []
            for session_id, state in self._sessions.items():
                if not isinstance(state, Expirable):
                    raise TypeError(f"{type(state).__name__} has no 'updated_at' timestamp")
                if state.updated_at < cutoff and (predicate is None or predicate(state)):
                    expired.append(session_id)
            for session_id in expired:
                del self._sessions[session_id]
        return expired
