"""Achievement rules and their evaluation against a stats snapshot."""
from dataclasses import dataclass
from typing import Callable

from english_tutor.models import Stats


@dataclass(frozen=True)
class Achievement:
    id: str
    title: str
    description: str
    icon: str
    condition: Callable[[Stats], bool]
    points: int


ACHIEVEMENTS = (
    Achievement(
        "first_question", "Getting Started", "Answer your first question", "🎯",
        lambda s: s.total_questions >= 1, 10,
    ),
    Achievement(
        "perfect_chapter", "Perfect Score", "Complete a chapter with 100% accuracy", "⭐",
        lambda s: s.perfect_chapters >= 1, 50,
    ),
    Achievement(
        "speed_demon", "Speed Demon", "Answer 10 questions correctly in under 30 seconds each", "⚡",
        lambda s: s.fast_answers >= 10, 30,
    ),
    Achievement(
        "streak_master", "Streak Master", "Maintain a 7-day study streak", "🔥",
        lambda s: s.study_streak >= 7, 100,
    ),
    Achievement(
        "knowledge_seeker", "Knowledge Seeker", "Complete 5 chapters", "📚",
        lambda s: s.completed_chapters >= 5, 75,
    ),
    Achievement(
        "accuracy_expert", "Accuracy Expert", "Maintain 90% accuracy over 50 questions", "🎯",
        lambda s: s.total_questions >= 50 and s.accuracy >= 90, 60,
    ),
    Achievement(
        "dedicated_learner", "Dedicated Learner", "Study for 30 days total", "💪",
        lambda s: s.total_study_days >= 30, 150,
    ),
    Achievement(
        "question_master", "Question Master", "Answer 100 questions correctly", "🏆",
        lambda s: s.correct_answers >= 100, 80,
    ),
)

ACHIEVEMENTS_BY_ID = {a.id: a for a in ACHIEVEMENTS}


def evaluate_achievements(stats: Stats, rules=ACHIEVEMENTS) -> list[Achievement]:
    """Rules newly satisfied by ``stats``, in rule order.

    Rules already in ``stats.achievements`` are skipped; nothing is mutated.
    """
    earned = set(stats.achievements)
    return [rule for rule in rules if rule.id not in earned and rule.condition(stats)]


def achievement_points(achievement_ids) -> int:
    return sum(ACHIEVEMENTS_BY_ID[a].points for a in achievement_ids if a in ACHIEVEMENTS_BY_ID)
