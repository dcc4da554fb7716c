"""Chapter content store with a bundled fallback set."""
import json
import logging
from pathlib import Path

from english_tutor.db import list_documents
from english_tutor.errors import BackendUnavailable, ContentError
from english_tutor.models import (
    Chapter, DragDropQuestion, FillInBlankQuestion, MatchingQuestion, MatchPair,
    MultipleChoiceQuestion, ReadingPassageQuestion,
    MULTIPLE_CHOICE, FILL_IN_BLANK, DRAG_DROP, MATCHING, READING_PASSAGE,
)

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "data"
CHAPTERS_COLLECTION = "chapters"


def _parse_correct_index(value):
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(int(i) for i in value)
    return int(value)


def _texts(values) -> tuple:
    # YAML reads bare numbers as ints; answers are always compared as text.
    if isinstance(values, (str, int, float)):
        values = [values]
    return tuple(str(v) for v in values)


def question_from_dict(data: dict):
    """Build the question variant named by ``data["type"]``."""
    qtype = data.get("type")
    try:
        common = {
            "prompt": str(data.get("question", "")),
            "feedback": str(data.get("feedback", "")),
            "points": int(data.get("points") or 10),
            "difficulty": data.get("difficulty", ""),
        }
        if qtype == MULTIPLE_CHOICE:
            return MultipleChoiceQuestion(
                options=_texts(data["options"]),
                correct=_parse_correct_index(data["correct"]),
                **common,
            )
        if qtype == READING_PASSAGE:
            return ReadingPassageQuestion(
                passage=data.get("passage", ""),
                options=_texts(data["options"]),
                correct=_parse_correct_index(data["correct"]),
                **common,
            )
        if qtype == FILL_IN_BLANK:
            return FillInBlankQuestion(correct=_texts(data["correct"]), **common)
        if qtype == DRAG_DROP:
            correct = _texts(data["correct"])
            return DragDropQuestion(items=_texts(data.get("items") or correct), correct=correct, **common)
        if qtype == MATCHING:
            pairs = tuple(MatchPair(left=str(p["left"]), right=str(p["right"])) for p in data["pairs"])
            return MatchingQuestion(pairs=pairs, **common)
    except (KeyError, TypeError, ValueError) as e:
        raise ContentError(f"malformed {qtype} question: {e}") from e
    raise ContentError(f"unknown question type: {qtype!r}")


def question_to_dict(question) -> dict:
    data = {
        "type": question.type,
        "question": question.prompt,
        "feedback": question.feedback,
        "points": question.points,
    }
    if question.difficulty:
        data["difficulty"] = question.difficulty
    if isinstance(question, (MultipleChoiceQuestion, ReadingPassageQuestion)):
        if isinstance(question, ReadingPassageQuestion):
            data["passage"] = question.passage
        data["options"] = list(question.options)
        data["correct"] = sorted(question.correct) if isinstance(question.correct, frozenset) else question.correct
    elif isinstance(question, FillInBlankQuestion):
        data["correct"] = list(question.correct)
    elif isinstance(question, DragDropQuestion):
        data["items"] = list(question.items)
        data["correct"] = list(question.correct)
    elif isinstance(question, MatchingQuestion):
        data["pairs"] = [{"left": p.left, "right": p.right} for p in question.pairs]
    return data


def chapter_from_dict(data: dict) -> Chapter:
    return Chapter(
        id=str(data["id"]),
        title=data.get("title", ""),
        order=int(data.get("order") or 0),
        questions=tuple(question_from_dict(q) for q in data.get("questions") or []),
        examples=tuple(data.get("examples") or []),
        is_premium=bool(data.get("isPremium", False)),
        lesson=data.get("lesson", ""),
        explanation=data.get("explanation", ""),
        difficulty=data.get("difficulty", ""),
        estimated_time=data.get("estimatedTime"),
    )


def chapter_to_dict(chapter: Chapter) -> dict:
    data = {
        "id": chapter.id,
        "title": chapter.title,
        "order": chapter.order,
        "isPremium": chapter.is_premium,
        "lesson": chapter.lesson,
        "explanation": chapter.explanation,
        "examples": list(chapter.examples),
        "difficulty": chapter.difficulty,
        "questions": [question_to_dict(q) for q in chapter.questions],
    }
    if chapter.estimated_time is not None:
        data["estimatedTime"] = chapter.estimated_time
    return data


def load_bundled_chapters(filename: str) -> list[dict]:
    return json.loads((CONTENT_DIR / filename).read_text())["chapters"]


def sample_chapters() -> list[Chapter]:
    """The fixed three-chapter set used when the store has nothing."""
    return [chapter_from_dict(c) for c in load_bundled_chapters("sample_chapters.json")]


def list_chapters(db_path: str) -> list[Chapter]:
    """Chapters ordered by ``order``; falls back to the sample set."""
    try:
        docs = list_documents(db_path, CHAPTERS_COLLECTION, order_by="order")
    except BackendUnavailable as e:
        logger.error("Error loading chapters: %s", e)
        return sample_chapters()
    if not docs:
        return sample_chapters()
    chapters = []
    for doc in docs:
        try:
            chapters.append(chapter_from_dict(doc))
        except (ContentError, KeyError, ValueError) as e:
            logger.error("Skipping chapter %s: %s", doc.get("id"), e)
    return chapters or sample_chapters()
