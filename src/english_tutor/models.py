"""Data classes for the tutor domain model."""
from dataclasses import dataclass, field
from typing import Optional, Union

MULTIPLE_CHOICE = "multiple-choice"
FILL_IN_BLANK = "fill-in-blank"
DRAG_DROP = "drag-drop"
MATCHING = "matching"
READING_PASSAGE = "reading-passage"

QUESTION_TYPES = (MULTIPLE_CHOICE, FILL_IN_BLANK, DRAG_DROP, MATCHING, READING_PASSAGE)


@dataclass(frozen=True)
class MatchPair:
    left: str
    right: str


@dataclass(frozen=True)
class MultipleChoiceQuestion:
    prompt: str
    options: tuple[str, ...]
    correct: Union[int, frozenset]
    feedback: str = ""
    points: int = 10
    difficulty: str = ""
    type: str = field(default=MULTIPLE_CHOICE, init=False)


@dataclass(frozen=True)
class FillInBlankQuestion:
    prompt: str
    correct: tuple[str, ...]
    feedback: str = ""
    points: int = 10
    difficulty: str = ""
    type: str = field(default=FILL_IN_BLANK, init=False)


@dataclass(frozen=True)
class DragDropQuestion:
    prompt: str
    items: tuple[str, ...]
    correct: tuple[str, ...]
    feedback: str = ""
    points: int = 10
    difficulty: str = ""
    type: str = field(default=DRAG_DROP, init=False)


@dataclass(frozen=True)
class MatchingQuestion:
    prompt: str
    pairs: tuple[MatchPair, ...]
    feedback: str = ""
    points: int = 10
    difficulty: str = ""
    type: str = field(default=MATCHING, init=False)


@dataclass(frozen=True)
class ReadingPassageQuestion:
    prompt: str
    passage: str
    options: tuple[str, ...]
    correct: Union[int, frozenset]
    feedback: str = ""
    points: int = 10
    difficulty: str = ""
    type: str = field(default=READING_PASSAGE, init=False)


Question = Union[
    MultipleChoiceQuestion,
    FillInBlankQuestion,
    DragDropQuestion,
    MatchingQuestion,
    ReadingPassageQuestion,
]


@dataclass(frozen=True)
class Chapter:
    id: str
    title: str
    order: int
    questions: tuple = ()
    examples: tuple[str, ...] = ()
    is_premium: bool = False
    lesson: str = ""
    explanation: str = ""
    difficulty: str = ""
    estimated_time: Optional[int] = None


@dataclass
class UserProgress:
    score: int = 0
    total_questions: int = 0
    correct_answers: int = 0
    completed_chapters: list = field(default_factory=list)
    chapter_progress: dict = field(default_factory=dict)

    @property
    def accuracy(self) -> int:
        if not self.total_questions:
            return 0
        return round(self.correct_answers / self.total_questions * 100)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "totalQuestions": self.total_questions,
            "correctAnswers": self.correct_answers,
            "completedChapters": list(self.completed_chapters),
            "chapterProgress": {k: dict(v) for k, v in self.chapter_progress.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserProgress":
        return cls(
            score=int(data.get("score", 0)),
            total_questions=int(data.get("totalQuestions", 0)),
            correct_answers=int(data.get("correctAnswers", 0)),
            completed_chapters=list(data.get("completedChapters", [])),
            chapter_progress={k: dict(v) for k, v in (data.get("chapterProgress") or {}).items()},
        )


@dataclass(frozen=True)
class TypeStats:
    total: int = 0
    correct: int = 0

    @property
    def accuracy(self) -> float:
        return (self.correct / self.total) * 100 if self.total else 0.0


@dataclass(frozen=True)
class Stats:
    """Snapshot of a signed-in user's lifetime counters."""
    total_questions: int = 0
    correct_answers: int = 0
    perfect_chapters: int = 0
    fast_answers: int = 0
    study_streak: int = 0
    total_study_time: int = 0  # milliseconds
    total_sessions: int = 0
    completed_chapters: int = 0
    score: int = 0
    question_types: dict = field(default_factory=dict)
    achievements: tuple[str, ...] = ()
    daily_study: dict = field(default_factory=dict)
    last_study_date: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def accuracy(self) -> float:
        if not self.total_questions:
            return 0.0
        return self.correct_answers / self.total_questions * 100

    @property
    def total_study_days(self) -> int:
        return len(self.daily_study)

    @classmethod
    def from_dict(cls, data: dict) -> "Stats":
        types = {
            name: TypeStats(total=int(t.get("total", 0)), correct=int(t.get("correct", 0)))
            for name, t in (data.get("questionTypes") or {}).items()
        }
        return cls(
            total_questions=int(data.get("totalQuestions", 0)),
            correct_answers=int(data.get("correctAnswers", 0)),
            perfect_chapters=int(data.get("perfectChapters", 0)),
            fast_answers=int(data.get("fastAnswers", 0)),
            study_streak=int(data.get("studyStreak", 0)),
            total_study_time=int(data.get("totalStudyTime", 0)),
            total_sessions=int(data.get("totalSessions", 0)),
            completed_chapters=int(data.get("completedChapters", 0)),
            score=int(data.get("score", 0)),
            question_types=types,
            achievements=tuple(data.get("achievements") or ()),
            daily_study=dict(data.get("dailyStudy") or {}),
            last_study_date=data.get("lastStudyDate"),
            created_at=data.get("createdAt"),
        )
