# app/schemas/profile.py
from typing import Literal

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

# Application roles stored on the profiles table.
Role = Literal["buyer", "seller"]


class Profile(SQLModel):
    """
    Application-level user record (profiles table).

    Identity:
      - id: matches Supabase auth.users.id

    This is distinct from the raw auth identity: it is materialized by a
    database trigger after sign-up, so it may lag behind the auth user.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    full_name: str = ""
    role: Role = "buyer"


class SignUpRequest(SQLModel):
    """
    Payload for email/password sign-up.

    full_name and role are sent as user metadata; the profile trigger
    copies them into the profiles row.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str = Field(max_length=100)
    role: Role = "buyer"

    @field_validator("full_name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("full_name cannot be empty")
        return v


class SignInRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str


class SessionRead(SQLModel):
    """What the UI needs to render the header: loading flag + profile."""

    status: Literal["loading", "unauthenticated", "authenticated"]
    loading: bool
    is_authenticated: bool
    profile: Profile | None = None
