# tests/test_users.py
import pytest

from english_tutor.db import get_document, set_document
from english_tutor.errors import NotFound
from english_tutor.privileges import Role
from english_tutor.users import ban_user, list_users, load_user_role, promote_user, set_role


def test_first_sign_in_creates_student(ready_db):
    assert load_user_role(ready_db, "u1", "ann@example.com") == Role.STUDENT
    doc = get_document(ready_db, "users", "u1")
    assert doc["email"] == "ann@example.com"
    assert doc["role"] == "student"
    assert doc["banned"] is False


def test_existing_role_is_loaded(ready_db):
    set_document(ready_db, "users", "u1", {"email": "t@example.com", "role": "teacher"})
    assert load_user_role(ready_db, "u1", "t@example.com") == Role.TEACHER
    assert "lastLogin" in get_document(ready_db, "users", "u1")


def test_unknown_role_falls_back_to_student(ready_db):
    set_document(ready_db, "users", "u1", {"email": "x@example.com", "role": "wizard"})
    assert load_user_role(ready_db, "u1", "x@example.com") == Role.STUDENT


def test_banned_user_is_guest(ready_db):
    load_user_role(ready_db, "u1", "ann@example.com")
    ban_user(ready_db, "u1")
    assert load_user_role(ready_db, "u1", "ann@example.com") == Role.GUEST


def test_store_failure_falls_back_to_student(tmp_db):
    assert load_user_role(tmp_db, "u1", "ann@example.com") == Role.STUDENT


def test_promote_walks_the_role_chain(ready_db):
    load_user_role(ready_db, "u1", "ann@example.com")
    assert promote_user(ready_db, "u1") == Role.PREMIUM
    assert promote_user(ready_db, "u1") == Role.TEACHER
    assert promote_user(ready_db, "u1") == Role.ADMIN
    assert promote_user(ready_db, "u1") == Role.ADMIN
    assert get_document(ready_db, "users", "u1")["role"] == "admin"


def test_promote_missing_user(ready_db):
    with pytest.raises(NotFound):
        promote_user(ready_db, "ghost")


def test_set_role_and_list(ready_db):
    load_user_role(ready_db, "u1", "a@example.com")
    load_user_role(ready_db, "u2", "b@example.com")
    set_role(ready_db, "u2", Role.PREMIUM)
    users = {u["id"]: u["role"] for u in list_users(ready_db)}
    assert users == {"u1": "student", "u2": "premium"}
