from __future__ import annotations

from pydantic import Field

from .base import CamelModel


class SignupRequest(CamelModel):
    email: str = ""
    username: str = ""
    password: str = ""

    model_config = {
        "json_schema_extra": {
            "example": {"email": "ada@example.com", "username": "ada", "password": "s3cret!"}
        },
    }


class LoginRequest(CamelModel):
    username: str = ""
    password: str = ""


class UserOut(CamelModel):
    id: int
    email: str
    username: str


class AuthResponse(CamelModel):
    user: UserOut
    token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")


class MeResponse(CamelModel):
    message: str = "Authorized"
    user: UserOut
