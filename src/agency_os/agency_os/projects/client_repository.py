from __future__ import annotations

from typing import Iterable, Protocol, Sequence

from .client_model import Client


class ClientRepository(Protocol):
    def get_many(self, agency_id: int, client_ids: Iterable[str]) -> Sequence[Client]:
        raise NotImplementedError
