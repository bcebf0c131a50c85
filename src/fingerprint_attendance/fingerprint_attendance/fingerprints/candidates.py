from __future__ import annotations

from typing import Iterator, Optional

from ..core.enums import CandidateSource
from ..users.repository import UserRepository
from .model import Candidate
from .repository import FingerprintRepository


class CandidateProvider:
    """Merges the fingerprints table and the legacy users.fingerprint_template column.

    Table rows come first, in store order (a user may contribute several fingers).
    A legacy template is yielded only for a user_id the table did not produce.
    """

    def __init__(self, fingerprints: FingerprintRepository, users: UserRepository):
        self._fingerprints = fingerprints
        self._users = users

    def __iter__(self) -> Iterator[Candidate]:
        return self.iter_candidates()

    def iter_candidates(self, *, user_id: Optional[int] = None) -> Iterator[Candidate]:
        seen: set[int] = set()

        for c in self._fingerprints.list_candidates():
            if user_id is not None and c.user_id != user_id:
                continue
            if not c.template:
                continue
            seen.add(c.user_id)
            yield c

        for u in self._users.list_with_legacy_template():
            if user_id is not None and u.user_id != user_id:
                continue
            if u.user_id in seen or not u.fingerprint_template:
                continue
            seen.add(u.user_id)
            yield Candidate(
                user_id=u.user_id,
                username=u.username,
                position=u.position.value,
                template=u.fingerprint_template,
                source=CandidateSource.LEGACY,
                finger_index=0,
            )

    def enrolled_user_count(self) -> int:
        return len({c.user_id for c in self.iter_candidates()})
