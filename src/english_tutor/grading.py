"""Answer grading rules, one per question variant."""
from english_tutor.models import (
    DragDropQuestion, FillInBlankQuestion, MatchingQuestion, MultipleChoiceQuestion,
    ReadingPassageQuestion,
)


def grade_choice(correct, selected) -> bool:
    if isinstance(correct, frozenset):
        return selected in correct
    return selected == correct


def grade_fill_in_blank(correct, text) -> bool:
    if text is None:
        return False
    answer = str(text).strip().lower()
    return any(c.lower() == answer for c in correct)


def grade_drag_drop(correct, order) -> bool:
    if order is None:
        return False
    return list(order) == list(correct)


def confirmed_pairs(question: MatchingQuestion, attempts) -> set[int]:
    """Left indices whose attempted right value is the correct partner."""
    confirmed = set()
    for left_index, right in attempts or ():
        if 0 <= left_index < len(question.pairs) and question.pairs[left_index].right == right:
            confirmed.add(left_index)
    return confirmed


def grade_matching(question: MatchingQuestion, attempts) -> bool:
    return len(confirmed_pairs(question, attempts)) == len(question.pairs)


def grade_answer(question, selection) -> bool:
    """Return whether ``selection`` answers ``question`` correctly.

    Selection shapes by variant:
        multiple-choice / reading-passage: option index (or None)
        fill-in-blank: the typed text
        drag-drop: the items in the submitted order
        matching: iterable of (left_index, right) attempts
    """
    if isinstance(question, (MultipleChoiceQuestion, ReadingPassageQuestion)):
        return grade_choice(question.correct, selection)
    if isinstance(question, FillInBlankQuestion):
        return grade_fill_in_blank(question.correct, selection)
    if isinstance(question, DragDropQuestion):
        return grade_drag_drop(question.correct, selection)
    if isinstance(question, MatchingQuestion):
        return grade_matching(question, selection)
    raise TypeError(f"cannot grade {type(question).__name__}")
