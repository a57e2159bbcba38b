"""
Process-wide session state.

``start()`` restores any persisted session and subscribes to auth state
changes; ``stop()`` unsubscribes. Consumers read the current session through
read-only properties and may register their own listeners.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Optional

from src.core.auth_client import AuthClient, AuthSession, AuthUser, Subscription, SIGNED_OUT

logger = logging.getLogger(__name__)

SessionListener = Callable[[str, Optional[AuthSession]], None]


class SessionState:
    def __init__(self, auth_client: AuthClient, storage_path: Optional[Path] = None):
        self._auth_client = auth_client
        self._storage_path = storage_path
        self._session: Optional[AuthSession] = None
        self._subscription: Optional[Subscription] = None
        self._listeners: list[SessionListener] = []
        self._started = False

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    @property
    def user(self) -> Optional[AuthUser]:
        return self._session.user if self._session else None

    @property
    def access_token(self) -> Optional[str]:
        return self._session.access_token if self._session else None

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """Subscribe to auth changes, then restore and verify a stored session."""
        if self._started:
            return
        self._subscription = self._auth_client.on_auth_state_change(self._on_auth_state_change)
        self._started = True

        stored = self._load()
        if stored is None:
            return
        result = await self._auth_client.get_user(stored.access_token)
        if result.error:
            logger.info(f"Stored session is no longer valid: {result.error.message}")
            self._set(SIGNED_OUT, None)
            return
        stored.user = result.data["user"]
        self._session = stored

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._started = False

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def get_user(self) -> Optional[AuthUser]:
        """Current user, re-checked against the auth service."""
        if self._session is None:
            return None
        result = await self._auth_client.get_user(self._session.access_token)
        if result.error:
            logger.warning(f"Session check failed: {result.error.message}")
            return None
        return result.data["user"]

    def _on_auth_state_change(self, event: str, session: Optional[AuthSession]) -> None:
        self._set(event, session)

    def _set(self, event: str, session: Optional[AuthSession]) -> None:
        self._session = session
        self._persist()
        for listener in list(self._listeners):
            listener(event, session)

    def _load(self) -> Optional[AuthSession]:
        if self._storage_path is None or not self._storage_path.exists():
            return None
        try:
            return AuthSession.from_dict(json.loads(self._storage_path.read_text()))
        except (ValueError, KeyError) as e:
            logger.warning(f"Ignoring unreadable session file {self._storage_path}: {e}")
            return None

    def _persist(self) -> None:
        if self._storage_path is None:
            return
        if self._session is None:
            self._storage_path.unlink(missing_ok=True)
            return
        self._storage_path.parent.mkdir(parents=True, exist_ok=True)
        self._storage_path.write_text(json.dumps(self._session.to_dict()))
