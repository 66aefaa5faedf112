"""Pydantic schemas for identities, sessions and sign-in forms."""
from __future__ import annotations
from typing import Any, Optional
from pydantic import BaseModel, EmailStr, Field


class Identity(BaseModel):
    """An authenticated user as reported by the hosted auth service."""

    id: str
    email: Optional[str] = None
    user_metadata: Optional[dict[str, Any]] = None

    model_config = {"extra": "ignore"}

    @property
    def display_name(self) -> str:
        meta = self.user_metadata or {}
        if meta.get("full_name"):
            return meta["full_name"]
        if meta.get("name"):
            return meta["name"]
        if self.email:
            return self.email.split("@")[0]
        return "User"


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "bearer"
    user: Optional[Identity] = None

    model_config = {"extra": "ignore"}


class PasswordSignIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: Optional[str] = None


class AuthOptionsOut(BaseModel):
    password: bool = True
    oauth_providers: list[str] = []
