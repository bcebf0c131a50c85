from __future__ import annotations

import pytest

from src.fingerprint_attendance.fingerprint_attendance.core.enums import CandidateSource
from src.fingerprint_attendance.fingerprint_attendance.core.exceptions import UserNotFound, ValidationError
from src.fingerprint_attendance.fingerprint_attendance.fingerprints.candidates import CandidateProvider
from src.fingerprint_attendance.fingerprint_attendance.fingerprints.matcher import TemplateMatcher
from src.fingerprint_attendance.fingerprint_attendance.fingerprints.service import FingerprintService

from tests.fakes import InMemoryFingerprints, InMemoryUsers, make_user

T1 = "AQIDBA=="  # 01 02 03 04
T2 = "BQYHCA=="  # 05 06 07 08


def _setup():
    users = InMemoryUsers(
        make_user(1, "alice"),
        make_user(2, "bob", template=T2),
        make_user(3, "carol", template="legacy-of-carol"),
    )
    fps = InMemoryFingerprints(users)
    return users, fps, FingerprintService(fps, users, TemplateMatcher())


def test_candidates_table_first_then_legacy_deduplicated_by_user():
    users, fps, _ = _setup()
    fps.add(1, T1)
    fps.add(2, T2)

    got = list(CandidateProvider(fps, users))

    assert [(c.user_id, c.source) for c in got] == [
        (1, CandidateSource.TABLE),
        (2, CandidateSource.TABLE),
        (3, CandidateSource.LEGACY),
    ]


def test_identify_user_from_table_template():
    _, fps, svc = _setup()
    fps.add(1, T1)

    result = svc.identify_user(T1)

    assert result.matched and result.user_id == 1 and result.username == "alice"


def test_identify_user_from_legacy_column():
    _, _, svc = _setup()
    result = svc.identify_user(T2)
    assert result.matched and result.user_id == 2


def test_identify_empty_template_is_failure():
    _, _, svc = _setup()
    result = svc.identify_user("  ")
    assert result.success is False and not result.matched


def test_enroll_upserts_table_and_legacy_column():
    users, fps, svc = _setup()

    first = svc.enroll(user_id=1, template=T1, finger_index=2)
    second = svc.enroll(user_id=1, template=T2, finger_index=2)

    assert first == second
    assert [f.template for f in fps.list_for_user(1)] == [T2]
    assert users.get_by_id(1).fingerprint_template == T2


def test_enroll_unknown_user():
    _, _, svc = _setup()
    with pytest.raises(UserNotFound):
        svc.enroll(user_id=99, template=T1)


def test_enroll_rejects_bad_finger_index():
    _, _, svc = _setup()
    with pytest.raises(ValidationError):
        svc.enroll(user_id=1, template=T1, finger_index=12)


def test_verify_user_only_checks_that_users_templates():
    _, fps, svc = _setup()
    fps.add(1, T1)

    ok = svc.verify_user(1, T1)
    wrong = svc.verify_user(2, T1)

    assert ok.matched
    assert not wrong.matched and wrong.user_id == 2


def test_delete_fingerprints_clears_both_sources():
    users, fps, svc = _setup()
    svc.enroll(user_id=2, template=T2)

    removed = svc.delete_fingerprints(2)

    assert removed == 1
    assert users.get_by_id(2).fingerprint_template is None
    assert svc.status()["enrolledUsers"] == 1
