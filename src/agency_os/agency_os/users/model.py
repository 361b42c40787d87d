from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an agency member who can sign in.

    Plain data object; no database access here.
    """

    user_id: int
    agency_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    is_active: bool = True
