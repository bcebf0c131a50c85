from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import require_non_empty
from ..core.exceptions import UserNotFound, ValidationError
from ..users.repository import UserRepository
from .candidates import CandidateProvider
from .matcher import TemplateMatcher
from .model import Fingerprint, MatchResult
from .repository import FingerprintRepository

logger = logging.getLogger(__name__)


class FingerprintService:
    """Use case: enrolment, 1:N identification and 1:1 verification."""

    def __init__(
        self,
        fingerprints: FingerprintRepository,
        users: UserRepository,
        matcher: TemplateMatcher,
        candidates: Optional[CandidateProvider] = None,
    ):
        self._fingerprints = fingerprints
        self._users = users
        self._matcher = matcher
        self._candidates = candidates or CandidateProvider(fingerprints, users)

    @property
    def threshold(self) -> float:
        return self._matcher.threshold

    def identify_user(self, template: str) -> MatchResult:
        if not template or not template.strip():
            return MatchResult.failure("Fingerprint template is required")
        logger.info("Starting fingerprint identification (threshold=%s)", self._matcher.threshold)
        return self._matcher.identify_best(template.strip(), self._candidates.iter_candidates())

    def verify_user(self, user_id: int, template: str) -> MatchResult:
        if not template or not template.strip():
            return MatchResult.failure("Fingerprint template is required")
        user = self._users.get_by_id(user_id)
        if not user:
            raise UserNotFound(user_id)

        result = self._matcher.identify_best(template.strip(), self._candidates.iter_candidates(user_id=user_id))
        if result.matched:
            return result
        return MatchResult(
            success=True,
            matched=False,
            score=result.score,
            message="Fingerprint does not match" if result.score else "No fingerprint enrolled for this user",
            user_id=user.user_id,
            username=user.username,
            position=user.position.value,
        )

    def enroll(
        self,
        *,
        user_id: int,
        template: str,
        finger_index: int = 0,
        quality: Optional[int] = None,
        capture_count: int = 1,
    ) -> int:
        template = require_non_empty(template, "Fingerprint template")
        if finger_index < 0 or finger_index > 9:
            raise ValidationError("Finger index must be between 0 and 9")
        if not self._users.get_by_id(user_id):
            raise UserNotFound(user_id)

        logger.info("Enrolling fingerprint for user %s, finger %s (%d chars)", user_id, finger_index, len(template))
        self._users.set_fingerprint_template(user_id, template)
        fingerprint_id = self._fingerprints.upsert(
            user_id=user_id,
            template=template,
            finger_index=int(finger_index),
            quality=quality,
            capture_count=max(1, int(capture_count)),
        )
        logger.info("Fingerprint enrollment complete (id=%s)", fingerprint_id)
        return fingerprint_id

    def list_templates(self) -> list[dict]:
        return [
            {
                "userId": c.user_id,
                "username": c.username,
                "position": c.position,
                "fingerIndex": c.finger_index,
                "source": c.source.value,
                "fingerprintTemplate": c.template,
            }
            for c in self._candidates.iter_candidates()
        ]

    def get_user_fingerprints(self, user_id: int) -> list[Fingerprint]:
        user = self._users.get_by_id(user_id)
        if not user:
            raise UserNotFound(user_id)
        rows = list(self._fingerprints.list_for_user(user_id))
        if not rows and user.fingerprint_template:
            rows.append(Fingerprint(fingerprint_id=0, user_id=user_id, template=user.fingerprint_template))
        return rows

    def delete_fingerprints(self, user_id: int) -> int:
        if not self._users.get_by_id(user_id):
            raise UserNotFound(user_id)
        removed = self._fingerprints.delete_for_user(user_id)
        self._users.set_fingerprint_template(user_id, None)
        logger.info("Deleted %d fingerprint(s) for user %s", removed, user_id)
        return removed

    def status(self) -> dict:
        return {
            "enrolledUsers": self._candidates.enrolled_user_count(),
            "matchThreshold": self._matcher.threshold,
        }
