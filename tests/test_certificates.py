# tests/test_certificates.py
import pytest
from rich.panel import Panel

from english_tutor.certificates import (
    determine_certificate_type, export_certificate_text, generate_certificate, render_certificate,
)
from english_tutor.db import get_document, set_document
from english_tutor.errors import NotFound


def _seed_user(db_path, accuracy_correct=19, chapters=5, achievements=5):
    set_document(db_path, "users", "u1", {"email": "ann@example.com", "role": "premium"})
    set_document(db_path, "userProgress", "u1", {
        "score": 420, "completedChapters": [f"chapter-{i}" for i in range(chapters)],
    })
    set_document(db_path, "userStats", "u1", {
        "totalQuestions": 20, "correctAnswers": accuracy_correct,
        "achievements": [f"a{i}" for i in range(achievements)], "totalStudyTime": 125_000,
    })


def test_auto_type_thresholds():
    progress = {"completedChapters": ["a", "b", "c", "d", "e"]}
    stats = {"totalQuestions": 20, "correctAnswers": 19, "achievements": list("abcde")}
    assert determine_certificate_type(progress, stats) == "mastery"
    stats["correctAnswers"] = 17
    assert determine_certificate_type(progress, stats) == "excellence"
    stats["achievements"] = ["a", "b"]
    assert determine_certificate_type(progress, stats) == "completion"
    assert determine_certificate_type({}, {}) == "completion"


def test_explicit_type():
    assert determine_certificate_type({}, {}, "mastery") == "mastery"
    with pytest.raises(ValueError):
        determine_certificate_type({}, {}, "gold-star")


def test_generate_certificate(ready_db):
    _seed_user(ready_db)
    cert = generate_certificate(ready_db, "u1")
    assert cert["type"] == "mastery"
    assert cert["recipientName"] == "ann"
    assert cert["score"] == 420
    assert cert["accuracy"] == 95
    assert cert["chaptersCompleted"] == 5
    assert cert["studyTime"] == "2m 5s"
    assert cert["achievements"] == 5
    assert get_document(ready_db, "certificates", cert["id"])["userId"] == "u1"


def test_generate_certificate_with_name_and_type(ready_db):
    _seed_user(ready_db, accuracy_correct=10, chapters=1, achievements=0)
    cert = generate_certificate(ready_db, "u1", "excellence", name="Ann Smith")
    assert cert["type"] == "excellence"
    assert cert["recipientName"] == "Ann Smith"


def test_generate_certificate_missing_user(ready_db):
    with pytest.raises(NotFound):
        generate_certificate(ready_db, "ghost")


def test_render_and_export(ready_db):
    _seed_user(ready_db)
    cert = generate_certificate(ready_db, "u1", name="Ann Smith")
    assert isinstance(render_certificate(cert), Panel)
    text = export_certificate_text(cert)
    assert "Certificate of Mastery" in text
    assert "Ann Smith" in text
    assert cert["id"] in text
