"""Tests for the role privilege table and chapter access gate."""
import dataclasses
import math

from english_tutor.models import Chapter
from english_tutor.privileges import (
    ROLE_PRIVILEGES, Role, can_access_chapter, get_privileges, parse_role,
)

CHAIN = [Role.GUEST, Role.STUDENT, Role.PREMIUM, Role.TEACHER, Role.ADMIN]


def _granted(role):
    flags = dataclasses.asdict(get_privileges(role))
    flags.pop("max_chapters")
    return {name for name, value in flags.items() if value}


def test_guest_is_limited_to_two_chapters():
    assert get_privileges(Role.GUEST).max_chapters == 2
    assert not get_privileges(Role.GUEST).can_save_progress


def test_only_guest_has_a_chapter_cap():
    for role in CHAIN[1:]:
        assert get_privileges(role).max_chapters == math.inf


def test_roles_form_an_increasing_chain():
    for lower, higher in zip(CHAIN, CHAIN[1:]):
        assert _granted(lower) < _granted(higher), f"{higher} should extend {lower}"


def test_admin_has_everything():
    assert _granted(Role.ADMIN) == set(dataclasses.asdict(ROLE_PRIVILEGES[Role.ADMIN])) - {"max_chapters"}


def test_parse_role_defaults_to_student():
    assert parse_role("teacher") is Role.TEACHER
    assert parse_role("wizard") is Role.STUDENT
    assert parse_role(None) is Role.STUDENT


def test_guest_denied_third_chapter_even_if_free():
    chapter = Chapter(id="chapter-3", title="Free", order=3, is_premium=False)
    assert can_access_chapter(chapter, 1, Role.GUEST)
    assert not can_access_chapter(chapter, 2, Role.GUEST)


def test_premium_chapter_needs_premium_role():
    chapter = Chapter(id="p", title="Premium", order=1, is_premium=True)
    assert not can_access_chapter(chapter, 0, Role.GUEST)
    assert not can_access_chapter(chapter, 0, Role.STUDENT)
    assert can_access_chapter(chapter, 0, Role.PREMIUM)
    assert can_access_chapter(chapter, 40, Role.ADMIN)


def test_student_has_no_chapter_limit():
    chapter = Chapter(id="c", title="Free", order=50)
    assert can_access_chapter(chapter, 49, Role.STUDENT)
