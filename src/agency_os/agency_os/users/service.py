from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from werkzeug.security import check_password_hash

from ..core.enums import DESTRUCTIVE_ROLES, Role
from ..core.exceptions import AuthenticationError
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    agency_id: int
    full_name: str
    role: Role

    @property
    def can_delete_projects(self) -> bool:
        return self.role in DESTRUCTIVE_ROLES

    def to_session(self) -> dict:
        return {
            "user_id": self.user_id,
            "agency_id": self.agency_id,
            "name": self.full_name,
            "role": self.role.value,
        }

    @classmethod
    def from_session(cls, data: Mapping[str, Any]) -> "SessionUser":
        return cls(
            user_id=int(data["user_id"]),
            agency_id=int(data["agency_id"]),
            full_name=str(data.get("name") or ""),
            role=Role.parse(data.get("role")),
        )


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("failed login for %r", username)
            raise AuthenticationError("Invalid username or password")

        return SessionUser(
            user_id=user.user_id,
            agency_id=user.agency_id,
            full_name=user.full_name,
            role=user.role,
        )
