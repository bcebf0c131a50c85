from __future__ import annotations

import base64
import binascii
import logging
from typing import Iterable, Optional

from ..core.constants import DEFAULT_MATCH_THRESHOLD
from ..core.exceptions import ScannerError
from ..scanner.session import ScannerSession
from .model import Candidate, MatchResult

logger = logging.getLogger(__name__)

PERFECT_SCORE = 100.0


def _b64decode(value: str) -> bytes:
    return base64.b64decode(value, validate=True)


def byte_similarity(a: bytes, b: bytes) -> float:
    """Percentage of equal byte positions; 0 when the lengths differ."""
    if len(a) != len(b) or not a:
        return 0.0
    same = sum(1 for x, y in zip(a, b) if x == y)
    return same / len(a) * 100


def char_similarity(a: str, b: str) -> float:
    if a == b:
        return PERFECT_SCORE
    if not a or not b:
        return 0.0
    longest = max(len(a), len(b))
    same = sum(1 for x, y in zip(a, b) if x == y)
    return same / longest * 100


class TemplateMatcher:
    """Scores base64 templates, preferring the native matcher when one is available.

    Scores are always in [0, 100]. Native failures never escape: they switch the
    comparison to the decode-and-compare fallback.
    """

    def __init__(self, session: Optional[ScannerSession] = None, *, threshold: float = DEFAULT_MATCH_THRESHOLD):
        self._session = session
        self.threshold = float(threshold)

    def compare(self, template_a: str, template_b: str) -> float:
        if not template_a or not template_b:
            return 0.0
        if template_a == template_b:
            return PERFECT_SCORE

        native = self._native_score(template_a, template_b)
        if native is not None:
            return native

        try:
            a, b = _b64decode(template_a), _b64decode(template_b)
        except (binascii.Error, ValueError):
            score = char_similarity(template_a, template_b)
            logger.debug("String similarity: %.2f%%", score)
            return score

        score = byte_similarity(a, b)
        logger.debug("Byte comparison similarity: %.2f%% (%d vs %d bytes)", score, len(a), len(b))
        return score

    def _native_score(self, template_a: str, template_b: str) -> Optional[float]:
        if self._session is None or not self._session.is_initialized:
            return None
        try:
            raw = self._session.match(_b64decode(template_a), _b64decode(template_b))
        except (binascii.Error, ValueError):
            return None
        except ScannerError as e:
            logger.warning("SDK matching failed, falling back to byte comparison: %s", e)
            return None
        return max(0.0, min(PERFECT_SCORE, float(raw)))

    def identify_best(
        self,
        sample: str,
        candidates: Iterable[Candidate],
        threshold: Optional[float] = None,
    ) -> MatchResult:
        """1:N search. The first candidate reaching the maximum score wins ties."""

        threshold = self.threshold if threshold is None else float(threshold)
        best_score = 0.0
        best: Optional[Candidate] = None
        compared = 0

        for candidate in candidates:
            compared += 1
            score = self.compare(sample, candidate.template)
            logger.info(
                "Comparing with user %s (%s, %s): score=%.2f",
                candidate.user_id,
                candidate.username,
                candidate.source.value,
                score,
            )
            if score > best_score:
                best_score = score
                best = candidate
            if best_score >= PERFECT_SCORE:
                break

        if best is not None and best_score >= threshold:
            logger.info("Match found: user %s score=%.2f threshold=%.2f", best.user_id, best_score, threshold)
            return MatchResult(
                success=True,
                matched=True,
                score=best_score,
                message="Fingerprint matched",
                user_id=best.user_id,
                username=best.username,
                position=best.position,
            )

        logger.info("No match among %d candidate(s): best=%.2f threshold=%.2f", compared, best_score, threshold)
        return MatchResult(
            success=True,
            matched=False,
            score=best_score,
            message=f"No matching fingerprint found (best score: {best_score:g}, threshold: {threshold:g})",
        )
