from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# bcrypt only hashes the first 72 bytes and newer releases reject longer input.
MAX_PASSWORD_BYTES = 72


class UserRecord(BaseModel):
    """A stored user document. ``password`` holds a bcrypt hash."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    email: str
    first_name: str = ""
    last_name: str = ""
    password: Optional[str] = None
    role: str = "user"
    name: Optional[str] = None
    image: Optional[str] = None
    auth_provider_id: Optional[str] = None


class PublicUser(BaseModel):
    """What a sign-in returns to the caller; never includes the password."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str = "user"


# ── Requests ─────────────────────────────────────────────────────────────────

class SignInRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class RegisterRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=8)
    first_name: str = ""
    last_name: str = ""

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class FederatedProfile(BaseModel):
    """Identity handed over by an external provider after a federated login."""
    provider: str
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None
    id: Optional[str] = None


class FederatedSignInResponse(BaseModel):
    status: str = "success"
    allowed: bool
