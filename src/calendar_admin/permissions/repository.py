from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import Module
from .model import Permission


class PermissionRepository(Protocol):
    def get(self, *, user_id: int, module: Module) -> Optional[Permission]:
        raise NotImplementedError

    def list_for_users(self, user_ids: Iterable[int]) -> Mapping[int, Sequence[Permission]]:
        raise NotImplementedError

    def upsert_many(self, *, user_id: int, permissions: Sequence[Permission]) -> Sequence[Permission]:
        """Create or update one row per module in a single transaction."""

        raise NotImplementedError
