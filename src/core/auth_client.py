"""
Async client for the hosted auth service (Supabase GoTrue REST API).

Backend-reported failures are returned as ``AuthResponse.error`` rather than
raised, so callers can pattern-match on the message.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import httpx

from src.core.config import SupabaseConfig

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"


@dataclass
class AuthUser:
    id: str
    email: str
    user_metadata: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "AuthUser":
        return cls(
            id=str(data["id"]),
            email=data.get("email") or "",
            user_metadata=data.get("user_metadata") or {},
        )


@dataclass
class AuthSession:
    access_token: str
    user: AuthUser
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "AuthSession":
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=data.get("expires_at"),
            user=AuthUser.from_dict(data["user"]),
        )

    def to_dict(self) -> dict:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "user": {
                "id": self.user.id,
                "email": self.user.email,
                "user_metadata": self.user.user_metadata,
            },
        }


@dataclass
class AuthError:
    message: str
    status: Optional[int] = None


@dataclass
class AuthResponse:
    """Mirror of the ``{data, error}`` shape the auth service returns."""
    data: Optional[Any] = None
    error: Optional[AuthError] = None


AuthStateCallback = Callable[[str, Optional[AuthSession]], None]


class Subscription:
    """Handle returned by ``on_auth_state_change``."""

    def __init__(self, listeners: list, callback: AuthStateCallback):
        self._listeners = listeners
        self._callback = callback

    def unsubscribe(self) -> None:
        if self._callback in self._listeners:
            self._listeners.remove(self._callback)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Auth request failed: {response.status_code}"
    return (
        body.get("error_description")
        or body.get("msg")
        or body.get("message")
        or body.get("error")
        or f"Auth request failed: {response.status_code}"
    )


class AuthClient:
    """Thin wrapper around the GoTrue endpoints used by this app."""

    def __init__(self, config: SupabaseConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._client = client or httpx.AsyncClient()
        self._listeners: list[AuthStateCallback] = []

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self, access_token: Optional[str] = None) -> dict:
        return {
            "apikey": self.config.anon_key,
            "Authorization": f"Bearer {access_token or self.config.anon_key}",
            "Content-Type": "application/json",
        }

    def _emit(self, event: str, session: Optional[AuthSession]) -> None:
        for callback in list(self._listeners):
            try:
                callback(event, session)
            except Exception as e:
                logger.error(f"Auth state listener failed on {event}: {e}", exc_info=True)

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        self._listeners.append(callback)
        return Subscription(self._listeners, callback)

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response | AuthError:
        try:
            return await self._client.request(method, f"{self.config.auth_url}{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Auth request to {path} failed: {e}")
            return AuthError(message=str(e))

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[dict] = None,
        redirect_url: Optional[str] = None,
    ) -> AuthResponse:
        params = {"redirect_to": redirect_url} if redirect_url else None
        response = await self._request(
            "POST", "/signup",
            params=params,
            headers=self._headers(),
            json={"email": email, "password": password, "data": metadata or {}},
        )
        if isinstance(response, AuthError):
            return AuthResponse(error=response)
        if not response.is_success:
            return AuthResponse(error=AuthError(_error_message(response), response.status_code))

        body = response.json()
        if body.get("access_token"):
            session = AuthSession.from_dict(body)
            self._emit(SIGNED_IN, session)
            return AuthResponse(data={"user": session.user, "session": session})

        # Email confirmation pending: the service returns only the user
        return AuthResponse(data={"user": AuthUser.from_dict(body), "session": None})

    async def sign_in(self, email: str, password: str) -> AuthResponse:
        response = await self._request(
            "POST", "/token",
            params={"grant_type": "password"},
            headers=self._headers(),
            json={"email": email, "password": password},
        )
        if isinstance(response, AuthError):
            return AuthResponse(error=response)
        if not response.is_success:
            return AuthResponse(error=AuthError(_error_message(response), response.status_code))

        session = AuthSession.from_dict(response.json())
        self._emit(SIGNED_IN, session)
        return AuthResponse(data={"user": session.user, "session": session})

    async def sign_out(self, access_token: Optional[str]) -> AuthResponse:
        if access_token:
            response = await self._request(
                "POST", "/logout", headers=self._headers(access_token)
            )
            if isinstance(response, AuthError):
                return AuthResponse(error=response)
            # 401 means the token is already gone; treat as signed out
            if not response.is_success and response.status_code != 401:
                return AuthResponse(error=AuthError(_error_message(response), response.status_code))
        self._emit(SIGNED_OUT, None)
        return AuthResponse(data={})

    async def get_user(self, access_token: str) -> AuthResponse:
        response = await self._request("GET", "/user", headers=self._headers(access_token))
        if isinstance(response, AuthError):
            return AuthResponse(error=response)
        if not response.is_success:
            return AuthResponse(error=AuthError(_error_message(response), response.status_code))
        return AuthResponse(data={"user": AuthUser.from_dict(response.json())})
