from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Candidate, Fingerprint


class FingerprintRepository(Protocol):
    def list_candidates(self) -> Sequence[Candidate]:
        """All rows of the fingerprints table joined with users, in store order."""
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Fingerprint]:
        raise NotImplementedError

    def upsert(
        self,
        *,
        user_id: int,
        template: str,
        finger_index: int,
        quality: Optional[int],
        capture_count: int,
    ) -> int:
        raise NotImplementedError

    def delete_for_user(self, user_id: int) -> int:
        raise NotImplementedError
