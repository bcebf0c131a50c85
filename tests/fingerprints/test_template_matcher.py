from __future__ import annotations

import base64

from src.fingerprint_attendance.fingerprint_attendance.core.enums import CandidateSource
from src.fingerprint_attendance.fingerprint_attendance.fingerprints.matcher import TemplateMatcher
from src.fingerprint_attendance.fingerprint_attendance.fingerprints.model import Candidate
from src.fingerprint_attendance.fingerprint_attendance.scanner.session import ScannerSession

from tests.fakes import FakeZKLibrary


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def cand(user_id: int, template: str, source=CandidateSource.TABLE) -> Candidate:
    return Candidate(user_id=user_id, username=f"user{user_id}", position="staff", template=template, source=source)


class ScoreTable(TemplateMatcher):
    """Matcher with scripted scores keyed by stored template."""

    def __init__(self, scores: dict[str, float], threshold: float = 50):
        super().__init__(None, threshold=threshold)
        self._scores = scores

    def compare(self, template_a, template_b):
        return self._scores[template_b]


def test_identical_templates_score_100():
    m = TemplateMatcher()
    t = b64(b"\x01\x02\x03\x04")
    assert m.compare(t, t) == 100


def test_empty_template_scores_zero():
    assert TemplateMatcher().compare("", "AAAA") == 0


def test_different_decoded_lengths_score_zero():
    m = TemplateMatcher()
    assert m.compare(b64(b"\x01\x02\x03"), b64(b"\x01\x02\x03\x04")) == 0


def test_byte_similarity_fallback():
    m = TemplateMatcher()
    assert m.compare(b64(b"\x01\x02\x03\x04"), b64(b"\x01\x02\x09\x09")) == 50


def test_undecodable_templates_use_character_similarity():
    m = TemplateMatcher()
    assert m.compare("abc$", "abd$") == 75


def test_native_score_is_used_and_clamped():
    lib = FakeZKLibrary(match_score=250)
    session = ScannerSession(loader=lambda: lib)
    session.initialize()
    m = TemplateMatcher(session)

    assert m.compare(b64(b"\x01\x02"), b64(b"\x03\x04")) == 100


def test_native_failure_falls_back_to_bytes():
    lib = FakeZKLibrary(match_score=-17)
    session = ScannerSession(loader=lambda: lib)
    session.initialize()
    m = TemplateMatcher(session)

    assert m.compare(b64(b"\x01\x02\x03\x04"), b64(b"\x01\x02\x03\x00")) == 75


def test_uninitialized_session_is_not_called():
    lib = FakeZKLibrary(match_score=99)
    m = TemplateMatcher(ScannerSession(loader=lambda: lib))

    assert m.compare(b64(b"\x01\x02"), b64(b"\x01\x00")) == 50
    assert "match" not in lib.calls


def test_identify_best_picks_max_score():
    m = ScoreTable({"a": 40, "b": 80, "c": 60})
    result = m.identify_best("sample", [cand(1, "a"), cand(2, "b"), cand(3, "c")])

    assert result.matched
    assert result.user_id == 2
    assert result.score == 80


def test_identify_best_ties_resolve_to_first_seen():
    m = ScoreTable({"a": 70, "b": 70})
    result = m.identify_best("sample", [cand(1, "a"), cand(2, "b", CandidateSource.LEGACY)])

    assert result.user_id == 1


def test_identify_best_below_threshold_is_no_match():
    m = ScoreTable({"a": 49.9})
    result = m.identify_best("sample", [cand(1, "a")])

    assert result.success is True
    assert result.matched is False
    assert result.user_id is None


def test_threshold_is_inclusive():
    m = ScoreTable({"a": 50})
    assert m.identify_best("sample", [cand(1, "a")]).matched
