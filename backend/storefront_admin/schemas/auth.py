import math
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class SessionPayload(BaseModel):
    sub: str = Field(..., min_length=1)  # Subject from Google
    email: str = Field(..., min_length=1)
    exp: int  # Expiration timestamp (seconds since epoch)
    name: str = ""

    @field_validator("exp", mode="before")
    @classmethod
    def exp_must_be_number(cls, value: Any) -> int:
        # bool is an int subclass; numeric strings are not numbers on the wire
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("exp must be a number")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("exp must be finite")
        return int(value)


class AdminUser(BaseModel):
    email: str
    name: str
    sub: str


class AdminPrincipal(AdminUser):
    method: Literal["session", "token"]

    def public_user(self) -> AdminUser:
        return AdminUser(email=self.email, name=self.name, sub=self.sub)


class AuthMeResponse(BaseModel):
    authenticated: bool
    user: AdminUser | None = None


class LogoutResponse(BaseModel):
    ok: bool = True


class AuthErrorResponse(BaseModel):
    error: str
    detail: Any = None
