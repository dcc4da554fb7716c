import pytest
from unittest.mock import patch

from english_tutor.app import (
    SessionExitRequested, ask_choice, cmd_login, cmd_study, option_letter, run_question, session_prompt,
)
from english_tutor.auth import LocalIdentityProvider
from english_tutor.content import sample_chapters
from english_tutor.events import EventChannel
from english_tutor.privileges import Role
from english_tutor.quiz import QuizSession


@pytest.fixture
def session(ready_db, clock):
    s = QuizSession(db_path=ready_db, chapters=sample_chapters(), role=Role.STUDENT, clock=clock)
    s.start()
    return s


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("english_tutor.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("english_tutor.app.Prompt.ask", return_value=" MENU "):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("english_tutor.app.Prompt.ask", return_value="hello"):
        assert session_prompt("test prompt") == "hello"


def test_option_letter():
    assert [option_letter(i) for i in range(3)] == ["a", "b", "c"]


def test_ask_choice_returns_index():
    with patch("english_tutor.app.Prompt.ask", return_value="c"):
        assert ask_choice(["one", "two", "three"]) == 2


def test_run_question_multiple_choice(session):
    with patch("english_tutor.app.Prompt.ask", return_value="b"):
        result = run_question(session)
    assert result.is_correct
    assert session.progress.score == 10


def test_run_question_matching(session):
    session.go_to_chapter(1)
    with patch("english_tutor.app.random.shuffle"), \
            patch("english_tutor.app.Prompt.ask", side_effect=["1a", "2c", "2b", "3c"]):
        result = run_question(session)
    assert result.is_correct
    assert result.points_awarded == 15


def test_run_question_matching_gives_up(session):
    session.go_to_chapter(1)
    with patch("english_tutor.app.random.shuffle"), \
            patch("english_tutor.app.Prompt.ask", side_effect=["1a", "done"]):
        result = run_question(session)
    assert not result.is_correct


def test_cmd_study_completes_chapter(session):
    with patch("english_tutor.app.Prompt.ask", side_effect=["b", "goes"]):
        cmd_study(session)
    assert session.progress.completed_chapters == ["chapter-1"]
    assert session.progress.score == 70
    assert session.current_chapter.id == "chapter-2"


def test_cmd_study_exit_keeps_progress(session):
    with patch("english_tutor.app.Prompt.ask", side_effect=["b", "q"]):
        cmd_study(session)
    assert session.progress.total_questions == 1
    assert session.progress.completed_chapters == []
    assert session.question_index == 1


def test_cmd_study_shows_upgrade_prompt(ready_db, clock):
    s = QuizSession(db_path=ready_db, chapters=sample_chapters(), clock=clock)
    s.start()
    s.chapter_index = 2
    with patch("english_tutor.app.Prompt.ask") as ask:
        cmd_study(s)
    ask.assert_not_called()
    assert s.progress.total_questions == 0


def test_cmd_login_rejects_bad_email():
    channel = EventChannel()
    identity = LocalIdentityProvider(channel)
    with patch("english_tutor.app.Prompt.ask", return_value="nobody"):
        cmd_login(identity)
    assert identity.current is None
