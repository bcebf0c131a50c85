from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Gender, Position
from .model import User


class UserRepository(Protocol):
    """Giao diện repository cho User.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def list_with_legacy_template(self) -> Sequence[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        username: str,
        password_hash: str,
        position: Position,
        gender: Optional[Gender],
        fingerprint_template: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_profile(
        self,
        user_id: int,
        *,
        username: Optional[str] = None,
        position: Optional[Position] = None,
        gender: Optional[Gender] = None,
        password_hash: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def set_fingerprint_template(self, user_id: int, template: Optional[str]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError
