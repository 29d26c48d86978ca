"""
Pydantic models for user data.

``UserRecord`` is the persisted shape of an account in ``users.json``
and contains the password and PIN hashes.  It is never returned by the
API; responses use ``UserRead`` which exposes only id, username and
balance.  Request bodies declare every field optional so that missing
fields are reported by the services with a readable message instead
of a schema error.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import Envelope, Money


class UserRecord(BaseModel):
    """An account as stored on disk."""

    # Older data files may carry extra keys (e.g. captured face images).
    model_config = ConfigDict(extra="ignore")

    id: str
    username: str
    password: str
    balance: Money
    pin: Optional[str] = None
    createdAt: datetime


class UserRead(BaseModel):
    """Public view of an account."""

    id: str
    username: str
    balance: Money


class Credentials(BaseModel):
    username: Optional[str] = Field(None, examples=["alice"])
    password: Optional[str] = Field(None, examples=["secret123"])


class RegisterRequest(Credentials):
    """Schema for registering a user."""


class LoginRequest(Credentials):
    """Schema for logging in."""


class ChangePasswordRequest(BaseModel):
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None


class SetPinRequest(BaseModel):
    """Set or clear (``pin: null``) the transfer PIN.

    The account password is required to change the PIN.
    """

    password: Optional[str] = None
    pin: Optional[str] = Field(None, examples=["4321"])


class RegisterResponse(Envelope):
    userId: str


class LoginResponse(Envelope):
    user: UserRead


class BalanceResponse(Envelope):
    balance: Money
    username: str


class PinResponse(Envelope):
    hasPin: bool
