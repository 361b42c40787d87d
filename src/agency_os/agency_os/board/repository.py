from __future__ import annotations

from typing import Iterable, Protocol, Sequence

from ..projects.filters import ProjectFilters
from .model import SavedView


class SavedViewRepository(Protocol):
    """Saved views are private to the user who created them."""

    def list_for_user(self, agency_id: int, user_id: int) -> Sequence[SavedView]:
        raise NotImplementedError

    def create(self, agency_id: int, user_id: int, *, name: str, filters: ProjectFilters) -> SavedView:
        raise NotImplementedError

    def delete(self, agency_id: int, user_id: int, view_id: str) -> bool:
        raise NotImplementedError


class FavoriteRepository(Protocol):
    def list_ids(self, user_id: int) -> Sequence[str]:
        raise NotImplementedError

    def add(self, user_id: int, project_id: str) -> None:
        raise NotImplementedError

    def remove(self, user_id: int, project_id: str) -> bool:
        raise NotImplementedError


class SelectionRepository(Protocol):
    """Bulk-action selection of one user, kept server-side between requests."""

    def list_ids(self, user_id: int) -> Sequence[str]:
        raise NotImplementedError

    def replace(self, user_id: int, project_ids: Iterable[str]) -> None:
        raise NotImplementedError
