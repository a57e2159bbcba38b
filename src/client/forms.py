"""
Sign-in and sign-up form validation.
"""

from pydantic import BaseModel, EmailStr, ValidationError, field_validator


class SignInForm(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def check_email_length(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if len(v) > 255:
                raise ValueError("Invalid email address")
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        if len(v) > 100:
            raise ValueError("Password must be at most 100 characters")
        return v


class SignUpForm(SignInForm):
    full_name: str

    @field_validator("full_name")
    @classmethod
    def check_full_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        if len(v) > 100:
            raise ValueError("Name must be at most 100 characters")
        return v


def first_error_message(exc: ValidationError) -> str:
    """User-facing message for the first failing field."""
    error = exc.errors()[0]
    if error["loc"] and error["loc"][0] == "email":
        return "Invalid email address"
    message = error.get("msg", "Invalid input")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return message
