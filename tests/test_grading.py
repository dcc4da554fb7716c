"""Tests for the per-variant grading rules."""
import pytest

from english_tutor.grading import confirmed_pairs, grade_answer
from english_tutor.models import (
    DragDropQuestion, FillInBlankQuestion, MatchingQuestion, MatchPair, MultipleChoiceQuestion,
    ReadingPassageQuestion,
)

EMAIL_ORDER = ("Subject line", "Greeting", "Body", "Closing", "Signature")


def _matching():
    return MatchingQuestion(prompt="Match", pairs=(
        MatchPair("Enormous", "Very large"),
        MatchPair("Tiny", "Very small"),
        MatchPair("Ancient", "Very old"),
    ))


def test_multiple_choice_single_index():
    q = MultipleChoiceQuestion(prompt="Q", options=("a", "b", "c", "d"), correct=1)
    assert grade_answer(q, 1) is True
    assert grade_answer(q, 0) is False


def test_multiple_choice_no_selection_is_incorrect():
    q = MultipleChoiceQuestion(prompt="Q", options=("a", "b"), correct=0)
    assert grade_answer(q, None) is False


def test_multiple_choice_index_set_membership():
    q = MultipleChoiceQuestion(prompt="Q", options=("a", "b", "c", "d"), correct=frozenset({1, 2, 3}))
    assert grade_answer(q, 2) is True
    assert grade_answer(q, 0) is False


def test_reading_passage_grades_like_multiple_choice():
    q = ReadingPassageQuestion(prompt="Main idea?", passage="...", options=("a", "b", "c"), correct=2)
    assert grade_answer(q, 2) is True
    assert grade_answer(q, 1) is False


def test_fill_in_blank_trims_and_lowercases():
    q = FillInBlankQuestion(prompt="She _ to school", correct=("goes", "walks", "drives"))
    assert grade_answer(q, " Goes ") is True
    assert grade_answer(q, "WALKS") is True
    assert grade_answer(q, "went") is False
    assert grade_answer(q, "") is False


def test_fill_in_blank_stored_answers_are_lowercased_too():
    q = FillInBlankQuestion(prompt="Passive", correct=("Is Explained",))
    assert grade_answer(q, "is explained") is True


def test_drag_drop_requires_exact_order():
    q = DragDropQuestion(prompt="Order", items=EMAIL_ORDER[::-1], correct=EMAIL_ORDER)
    assert grade_answer(q, list(EMAIL_ORDER)) is True
    swapped = ["Greeting", "Subject line", "Body", "Closing", "Signature"]
    assert grade_answer(q, swapped) is False
    assert grade_answer(q, list(EMAIL_ORDER[:4])) is False


@pytest.mark.parametrize("order", [
    ["Signature", "Closing", "Body", "Greeting", "Subject line"],
    ["Subject line", "Greeting", "Closing", "Body", "Signature"],
])
def test_drag_drop_any_other_order_is_incorrect(order):
    q = DragDropQuestion(prompt="Order", items=EMAIL_ORDER, correct=EMAIL_ORDER)
    assert grade_answer(q, order) is False


def test_matching_needs_every_pair():
    q = _matching()
    two = [(0, "Very large"), (1, "Very small")]
    assert grade_answer(q, two) is False
    assert grade_answer(q, two + [(2, "Very old")]) is True


def test_matching_ignores_wrong_and_repeated_attempts():
    q = _matching()
    attempts = [(0, "Very small"), (0, "Very large"), (0, "Very large"), (1, "Very small")]
    assert confirmed_pairs(q, attempts) == {0, 1}
    assert grade_answer(q, attempts) is False


def test_matching_out_of_range_left_index_is_ignored():
    assert confirmed_pairs(_matching(), [(7, "Very old"), (-1, "Very old")]) == set()


def test_grade_unknown_question_type_raises():
    with pytest.raises(TypeError):
        grade_answer(object(), 0)
