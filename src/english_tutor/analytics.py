"""Per-user statistics, study tracking, achievements and reports.

Stats live in the ``userStats`` collection and only exist for signed-in users.
Writes are fire-and-forget: a store failure is logged and the update dropped.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from english_tutor.achievements import ACHIEVEMENTS, Achievement, achievement_points, evaluate_achievements
from english_tutor.db import Increment, get_document, set_document, update_document
from english_tutor.errors import TutorError
from english_tutor.models import Stats

logger = logging.getLogger(__name__)

STATS_COLLECTION = "userStats"
FAST_ANSWER_MS = 30_000


@dataclass
class StudySession:
    """Counters for the current sitting, flushed into daily study on exit."""
    started_at: float = field(default_factory=time.time)
    questions_answered: int = 0
    correct_answers: int = 0

    @property
    def accuracy(self) -> float:
        if not self.questions_answered:
            return 0.0
        return self.correct_answers / self.questions_answered * 100


def zeroed_stats() -> dict:
    return {
        "totalQuestions": 0,
        "correctAnswers": 0,
        "totalStudyTime": 0,
        "totalSessions": 0,
        "studyStreak": 0,
        "completedChapters": 0,
        "perfectChapters": 0,
        "fastAnswers": 0,
        "score": 0,
        "achievements": [],
        "questionTypes": {},
        "dailyStudy": {},
        "createdAt": datetime.now().isoformat(),
        "lastStudyDate": None,
    }


def initialize_stats(db_path: str, user_id: str) -> bool:
    """Create a zeroed stats document if none exists. Returns True if created."""
    try:
        if get_document(db_path, STATS_COLLECTION, user_id) is not None:
            return False
        set_document(db_path, STATS_COLLECTION, user_id, zeroed_stats())
    except TutorError as e:
        logger.error("Error initializing user stats: %s", e)
        return False
    logger.info("Initialized stats for %s", user_id)
    return True


def load_stats(db_path: str, user_id: str) -> Stats | None:
    try:
        data = get_document(db_path, STATS_COLLECTION, user_id)
    except TutorError as e:
        logger.error("Error loading user stats: %s", e)
        return None
    return Stats.from_dict(data) if data is not None else None


def _update_stats(db_path: str, user_id: str, fields: dict) -> bool:
    if not user_id:
        return False
    try:
        update_document(db_path, STATS_COLLECTION, user_id, fields)
    except TutorError as e:
        logger.error("Error updating user stats: %s", e)
        return False
    return True


def increment_stat(db_path: str, user_id: str, field_name: str, delta) -> bool:
    return _update_stats(db_path, user_id, {field_name: Increment(delta)})


def track_question_attempt(
    db_path: str, user_id: str, question_type: str, is_correct: bool, time_spent_ms: float,
) -> bool:
    fields = {
        "totalQuestions": Increment(1),
        f"questionTypes.{question_type}.total": Increment(1),
    }
    if is_correct:
        fields["correctAnswers"] = Increment(1)
        fields[f"questionTypes.{question_type}.correct"] = Increment(1)
        if time_spent_ms < FAST_ANSWER_MS:
            fields["fastAnswers"] = Increment(1)
    return _update_stats(db_path, user_id, fields)


def update_study_streak(db_path: str, user_id: str, today: date | None = None) -> None:
    """Extend the streak if the last study day was yesterday, else restart it."""
    today = today or date.today()
    stats = load_stats(db_path, user_id)
    if stats is None or stats.last_study_date == today.isoformat():
        return
    if stats.last_study_date == (today - timedelta(days=1)).isoformat():
        streak = stats.study_streak + 1
    else:
        streak = 1
    _update_stats(db_path, user_id, {"studyStreak": streak, "lastStudyDate": today.isoformat()})


def track_chapter_completion(
    db_path: str, user_id: str, accuracy: float, today: date | None = None,
) -> None:
    fields = {"completedChapters": Increment(1)}
    if accuracy == 100:
        fields["perfectChapters"] = Increment(1)
    if _update_stats(db_path, user_id, fields):
        update_study_streak(db_path, user_id, today)


def track_study_session(
    db_path: str, user_id: str, session: StudySession,
    now: float | None = None, today: date | None = None,
) -> None:
    """Record time spent in ``session`` and the day's study summary."""
    now = now if now is not None else time.time()
    elapsed_ms = int((now - session.started_at) * 1000)
    today = today or date.today()
    _update_stats(db_path, user_id, {
        "totalStudyTime": Increment(elapsed_ms),
        "totalSessions": Increment(1),
        f"dailyStudy.{today.isoformat()}": {
            "questionsAnswered": session.questions_answered,
            "timeSpent": elapsed_ms,
            "accuracy": session.accuracy,
        },
    })


def check_achievements(db_path: str, user_id: str) -> list[Achievement]:
    """Award every newly satisfied achievement in a single write.

    Returns the awarded achievements; an empty list if none or on failure.
    """
    stats = load_stats(db_path, user_id)
    if stats is None:
        return []
    new = evaluate_achievements(stats)
    if not new:
        return []
    updated = _update_stats(db_path, user_id, {
        "achievements": list(stats.achievements) + [a.id for a in new],
        "score": Increment(sum(a.points for a in new)),
    })
    if not updated:
        return []
    for a in new:
        logger.info("Achievement unlocked for %s: %s (+%d)", user_id, a.id, a.points)
    return new


def format_time(milliseconds: float) -> str:
    seconds = int(milliseconds // 1000)
    minutes = seconds // 60
    hours = minutes // 60
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    elif minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def _type_label(question_type: str) -> str:
    return question_type.replace("-", " ").title()


def analyze_strengths(stats: Stats) -> list[dict]:
    """Question types answered with at least 80% accuracy."""
    return [
        {"type": _type_label(name), "accuracy": round(t.accuracy)}
        for name, t in stats.question_types.items()
        if t.total > 0 and t.accuracy >= 80
    ]


def generate_recommendations(stats: Stats) -> list[dict]:
    recommendations = []
    for name, t in stats.question_types.items():
        if t.total >= 5 and t.accuracy < 60:
            recommendations.append({
                "type": "improvement",
                "message": f"Focus on {name.replace('-', ' ')} questions - current accuracy: {round(t.accuracy)}%",
            })
    if stats.study_streak == 0:
        recommendations.append({
            "type": "streak",
            "message": "Start a study streak! Try to study for at least 10 minutes daily.",
        })
    elif stats.study_streak < 7:
        recommendations.append({
            "type": "streak",
            "message": f"Great {stats.study_streak}-day streak! Keep going to reach the 7-day milestone.",
        })
    if stats.completed_chapters < 3:
        recommendations.append({
            "type": "progress",
            "message": "Try to complete more chapters to unlock advanced topics.",
        })
    return recommendations


def generate_report(db_path: str, user_id: str) -> dict | None:
    stats = load_stats(db_path, user_id)
    if stats is None:
        return None
    return {
        "overview": {
            "total_questions": stats.total_questions,
            "correct_answers": stats.correct_answers,
            "accuracy": round(stats.accuracy),
            "total_study_time": format_time(stats.total_study_time),
            "study_streak": stats.study_streak,
            "completed_chapters": stats.completed_chapters,
        },
        "achievements": {
            "earned": list(stats.achievements),
            "total": len(ACHIEVEMENTS),
            "points": achievement_points(stats.achievements),
        },
        "question_types": {
            name: {"total": t.total, "correct": t.correct} for name, t in stats.question_types.items()
        },
        "daily_study": dict(stats.daily_study),
        "strengths": analyze_strengths(stats),
        "recommendations": generate_recommendations(stats),
    }
