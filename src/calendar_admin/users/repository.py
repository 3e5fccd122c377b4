from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        raise NotImplementedError

    def list_all(self, *, limit: int) -> Sequence[User]:
        """Users ordered by name."""

        raise NotImplementedError

    def existing_ids(self, user_ids: Iterable[int]) -> set[int]:
        raise NotImplementedError
