from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Client:
    """Domain entity: the customer a project is billed to."""

    client_id: str
    name: str
    company_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.company_name or self.name
