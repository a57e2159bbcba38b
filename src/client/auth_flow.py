"""
Sign-in / sign-up flow: validates input, calls the auth service and turns
the outcome into a user-facing message.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from src.client.forms import SignInForm, SignUpForm, first_error_message
from src.client.session import SessionState
from src.core.auth_client import AuthClient

logger = logging.getLogger(__name__)

SIGN_IN = "sign_in"
SIGN_UP = "sign_up"

WELCOME_BACK = "Welcome back!"
ACCOUNT_CREATED = "Account created! Welcome to Pixverse AI!"


@dataclass
class AuthOutcome:
    success: bool
    message: str


def map_auth_error(message: str) -> str:
    """Translate known backend messages; pass anything else through."""
    if "Invalid login credentials" in message:
        return "Invalid email or password"
    if "already registered" in message:
        return "This email is already registered. Please sign in instead."
    return message


class AuthFlow:
    def __init__(
        self,
        auth_client: AuthClient,
        session_state: SessionState,
        redirect_url: Optional[str] = None,
    ):
        self.auth_client = auth_client
        self.session_state = session_state
        self.redirect_url = redirect_url
        self.mode = SIGN_IN
        self.loading = False

    def toggle_mode(self) -> str:
        self.mode = SIGN_UP if self.mode == SIGN_IN else SIGN_IN
        return self.mode

    def should_redirect(self) -> bool:
        """A signed-in user has no business on the auth screen."""
        return self.session_state.user is not None

    async def submit(
        self, email: str, password: str, full_name: Optional[str] = None
    ) -> AuthOutcome:
        try:
            if self.mode == SIGN_UP:
                form = SignUpForm(email=email, password=password, full_name=full_name or "")
            else:
                form = SignInForm(email=email, password=password)
        except ValidationError as e:
            return AuthOutcome(False, first_error_message(e))

        self.loading = True
        try:
            if self.mode == SIGN_UP:
                result = await self.auth_client.sign_up(
                    form.email,
                    form.password,
                    metadata={"full_name": form.full_name},
                    redirect_url=self.redirect_url,
                )
                success_message = ACCOUNT_CREATED
            else:
                result = await self.auth_client.sign_in(form.email, form.password)
                success_message = WELCOME_BACK
        finally:
            self.loading = False

        if result.error:
            logger.info(f"Auth {self.mode} rejected: {result.error.message}")
            return AuthOutcome(False, map_auth_error(result.error.message))
        return AuthOutcome(True, success_message)

    async def sign_out(self) -> AuthOutcome:
        result = await self.auth_client.sign_out(self.session_state.access_token)
        if result.error:
            logger.warning(f"Sign out failed: {result.error.message}")
            return AuthOutcome(False, "Error signing out")
        return AuthOutcome(True, "Signed out successfully")
