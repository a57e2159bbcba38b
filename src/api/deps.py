"""
FastAPI dependencies: database sessions, the image client and user authentication.
"""

import os
import logging
from uuid import UUID
from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth_client import AuthClient
from src.core.config import SupabaseConfig
from src.core.image_generator import ImageConfig, ImageModelClient
from src.db.engine import get_async_session

logger = logging.getLogger(__name__)

# Fixed UUID for local development when auth is not configured
_DEV_USER_ID = UUID("00000000-0000-0000-0000-000000000000")

_auth_client: Optional[AuthClient] = None


async def get_db(
    session: AsyncSession = Depends(get_async_session),
) -> AsyncSession:
    """Alias dependency for database session."""
    return session


def get_auth_client() -> AuthClient:
    global _auth_client
    if _auth_client is None:
        _auth_client = AuthClient(SupabaseConfig())
    return _auth_client


async def close_auth_client() -> None:
    global _auth_client
    if _auth_client is not None:
        await _auth_client.close()
    _auth_client = None


async def get_image_client() -> AsyncGenerator[ImageModelClient, None]:
    """One gateway client per invocation; the orchestrator is stateless."""
    async with ImageModelClient(ImageConfig()) as client:
        yield client


async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(None),
    auth_client: AuthClient = Depends(get_auth_client),
) -> UUID:
    """
    Resolve the caller's user id from the bearer access token.

    The token is checked against the auth service, so every read and write
    is filtered by a verified identity. In local dev mode (neither the auth
    service nor DATABASE_URL configured) falls back to a fixed dev UUID.
    """
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
        result = await auth_client.get_user(token)
        if result.error or not result.data:
            logger.warning(f"Rejected access token: {result.error.message if result.error else 'no user'}")
            raise HTTPException(status_code=401, detail="Invalid or expired session")
        user_id = UUID(result.data["user"].id)
        request.state.user_id = str(user_id)
        return user_id

    # Local dev fallback: no auth required when nothing is configured
    if not os.getenv("DATABASE_URL") and not auth_client.config.validate():
        request.state.user_id = str(_DEV_USER_ID)
        return _DEV_USER_ID

    raise HTTPException(
        status_code=401,
        detail="Authentication required. Provide a Bearer access token.",
    )
