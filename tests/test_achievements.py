"""Tests for the achievement table and evaluator."""
import dataclasses

from english_tutor.achievements import ACHIEVEMENTS, achievement_points, evaluate_achievements
from english_tutor.models import Stats


def _ids(achievements):
    return [a.id for a in achievements]


def test_rule_table_order_and_points():
    assert [(a.id, a.points) for a in ACHIEVEMENTS] == [
        ("first_question", 10),
        ("perfect_chapter", 50),
        ("speed_demon", 30),
        ("streak_master", 100),
        ("knowledge_seeker", 75),
        ("accuracy_expert", 60),
        ("dedicated_learner", 150),
        ("question_master", 80),
    ]


def test_nothing_earned_on_empty_stats():
    assert evaluate_achievements(Stats()) == []


def test_first_question_awarded_once():
    stats = Stats(total_questions=1)
    assert _ids(evaluate_achievements(stats)) == ["first_question"]
    after = dataclasses.replace(stats, achievements=("first_question",))
    assert evaluate_achievements(after) == []


def test_thresholds():
    assert _ids(evaluate_achievements(Stats(perfect_chapters=1, achievements=()))) == ["perfect_chapter"]
    assert _ids(evaluate_achievements(Stats(fast_answers=9))) == []
    assert _ids(evaluate_achievements(Stats(fast_answers=10))) == ["speed_demon"]
    assert _ids(evaluate_achievements(Stats(study_streak=6))) == []
    assert _ids(evaluate_achievements(Stats(study_streak=7))) == ["streak_master"]
    assert _ids(evaluate_achievements(Stats(completed_chapters=5))) == ["knowledge_seeker"]
    days = {f"2026-09-{d:02d}": {} for d in range(1, 31)}
    assert _ids(evaluate_achievements(Stats(daily_study=days))) == ["dedicated_learner"]


def test_accuracy_expert_needs_both_volume_and_accuracy():
    earned = set(_ids(evaluate_achievements(Stats(total_questions=50, correct_answers=45))))
    assert "accuracy_expert" in earned
    earned = set(_ids(evaluate_achievements(Stats(total_questions=50, correct_answers=44))))
    assert "accuracy_expert" not in earned
    earned = set(_ids(evaluate_achievements(Stats(total_questions=49, correct_answers=49))))
    assert "accuracy_expert" not in earned


def test_simultaneous_rules_awarded_together_in_table_order():
    stats = Stats(total_questions=100, correct_answers=100, fast_answers=10)
    assert _ids(evaluate_achievements(stats)) == [
        "first_question", "speed_demon", "accuracy_expert", "question_master",
    ]


def test_earned_rules_are_never_reawarded():
    stats = Stats(total_questions=100, correct_answers=100,
                  achievements=("question_master", "first_question"))
    assert _ids(evaluate_achievements(stats)) == ["accuracy_expert"]


def test_evaluation_does_not_mutate_stats():
    stats = Stats(total_questions=1)
    evaluate_achievements(stats)
    assert stats.achievements == ()


def test_achievement_points():
    assert achievement_points(["first_question", "question_master"]) == 90
    assert achievement_points(["unknown"]) == 0
