"""
Business logic for accounts.

``AccountService`` registers users, checks credentials, reports
balances and manages the two account secrets (password and transfer
PIN).  Secrets are hashed with ``core.security`` before they reach the
store and are never part of a value returned from this module.
"""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..core.config import settings
from ..core.db import USERS, get_store
from ..core.errors import AuthError, NotFoundError, ValidationError
from ..core.security import hash_password, verify_password
from ..schemas.user import UserRead, UserRecord

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
PIN_PATTERN = re.compile(r"^\d{4,6}$")


def find_user(users: List[Dict[str, Any]], *, user_id: Optional[str] = None,
              username: Optional[str] = None) -> Tuple[int, Optional[UserRecord]]:
    """Locate a stored user by id or by username.

    Returns ``(index, record)``; ``(-1, None)`` when there is no match.
    """
    for index, row in enumerate(users):
        if user_id is not None and row.get("id") == user_id:
            return index, UserRecord.model_validate(row)
        if username is not None and row.get("username") == username:
            return index, UserRecord.model_validate(row)
    return -1, None


def dump_user(user: UserRecord) -> Dict[str, Any]:
    """Serialise a user for storage; an unset PIN is omitted."""
    return user.model_dump(mode="json", exclude_none=True)


def _check_password_length(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


class AccountService:
    """Registration, login, balance lookup and secret management."""

    @classmethod
    async def register(cls, username: Optional[str], password: Optional[str]) -> str:
        """Create a new account and return its id.

        The username is stripped of surrounding whitespace.  New
        accounts start with ``settings.starting_balance``.
        """
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")
        if len(username) < MIN_USERNAME_LENGTH:
            raise ValidationError(
                f"Username must be at least {MIN_USERNAME_LENGTH} characters long"
            )
        _check_password_length(password)

        with get_store().transaction() as data:
            users = data[USERS]
            _, existing = find_user(users, username=username)
            if existing:
                raise ValidationError("Username already exists")
            user = UserRecord(
                id=uuid.uuid4().hex,
                username=username,
                password=hash_password(password),
                balance=settings.starting_balance,
                createdAt=datetime.now(timezone.utc),
            )
            users.append(dump_user(user))
        logger.info("Registered user %s (%s)", user.username, user.id)
        return user.id

    @classmethod
    async def login(cls, username: Optional[str], password: Optional[str]) -> UserRead:
        """Check credentials and return the public view of the account.

        Unknown usernames and wrong passwords fail identically.
        """
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")
        _, user = find_user(get_store().read(USERS), username=username)
        if user is None or not verify_password(password, user.password):
            logger.info("Failed login for %s", username)
            raise AuthError("Invalid credentials")
        logger.info("User %s logged in", user.username)
        return UserRead(id=user.id, username=user.username, balance=user.balance)

    @classmethod
    async def get_balance(cls, user_id: str) -> UserRead:
        """Return the account's current balance (with its username)."""
        _, user = find_user(get_store().read(USERS), user_id=user_id)
        if user is None:
            raise NotFoundError("User not found")
        return UserRead(id=user.id, username=user.username, balance=user.balance)

    @classmethod
    async def change_password(cls, user_id: str, current_password: Optional[str],
                              new_password: Optional[str]) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current and new password are required")
        with get_store().transaction() as data:
            users = data[USERS]
            index, user = find_user(users, user_id=user_id)
            if user is None:
                raise NotFoundError("User not found")
            if not verify_password(current_password, user.password):
                raise AuthError("Invalid credentials")
            _check_password_length(new_password)
            user.password = hash_password(new_password)
            users[index] = dump_user(user)
        logger.info("Password changed for user %s", user_id)

    @classmethod
    async def set_pin(cls, user_id: str, password: Optional[str], pin: Optional[str]) -> bool:
        """Set, replace or clear (``pin=None``) the transfer PIN.

        Returns whether the account has a PIN afterwards.
        """
        if not password:
            raise ValidationError("Password is required")
        with get_store().transaction() as data:
            users = data[USERS]
            index, user = find_user(users, user_id=user_id)
            if user is None:
                raise NotFoundError("User not found")
            if not verify_password(password, user.password):
                raise AuthError("Invalid credentials")
            if pin is None:
                user.pin = None
            elif PIN_PATTERN.match(pin):
                user.pin = hash_password(pin)
            else:
                raise ValidationError("PIN must be 4 to 6 digits")
            users[index] = dump_user(user)
        logger.info("PIN %s for user %s", "set" if user.pin else "cleared", user_id)
        return user.pin is not None
