"""Progress summaries for learners, teachers and admins."""
from english_tutor.models import Chapter, UserProgress
from english_tutor.privileges import Role, can_access_chapter
from english_tutor.progress import list_remote_progress
from english_tutor.users import list_users


def get_accuracy_label(accuracy: float) -> str:
    if accuracy >= 80:
        return "EXCELLENT"
    elif accuracy >= 65:
        return "GOOD"
    elif accuracy >= 50:
        return "FAIR"
    return "NEEDS PRACTICE"


def get_accuracy_color(accuracy: float) -> str:
    if accuracy >= 80:
        return "green"
    elif accuracy >= 65:
        return "yellow"
    elif accuracy >= 50:
        return "dark_orange"
    return "red"


def get_progress_summary(progress: UserProgress, chapters: list[Chapter]) -> dict:
    completed = len(progress.completed_chapters)
    overall = (completed / len(chapters) * 100) if chapters else 0.0
    return {
        "score": progress.score,
        "accuracy": progress.accuracy,
        "total_questions": progress.total_questions,
        "correct_answers": progress.correct_answers,
        "chapters_completed": completed,
        "total_chapters": len(chapters),
        "overall_progress": round(overall, 1),
    }


def get_chapter_rows(progress: UserProgress, chapters: list[Chapter], role: Role) -> list[dict]:
    """One row per chapter with completion and access state, in list order."""
    return [
        {
            "index": i,
            "id": c.id,
            "title": c.title,
            "questions": len(c.questions),
            "premium": c.is_premium,
            "completed": c.id in progress.completed_chapters,
            "accessible": can_access_chapter(c, i, role),
        }
        for i, c in enumerate(chapters)
    ]


def get_student_progress(db_path: str) -> list[dict]:
    """Stored progress of every user, best score first."""
    rows = []
    for doc in list_remote_progress(db_path):
        progress = UserProgress.from_dict(doc)
        rows.append({
            "user_id": doc["id"],
            "score": progress.score,
            "accuracy": progress.accuracy,
            "chapters_completed": len(progress.completed_chapters),
            "last_updated": doc.get("lastUpdated"),
        })
    rows.sort(key=lambda r: r["score"], reverse=True)
    return rows


def get_admin_statistics(db_path: str, chapters: list[Chapter]) -> dict:
    users = list_remote_progress(db_path)
    total_questions = sum(len(c.questions) for c in chapters)
    if users and chapters:
        completed = sum(len(u.get("completedChapters") or []) for u in users)
        avg_completion = round(completed / len(users) / len(chapters) * 100)
    else:
        avg_completion = 0
    return {
        "total_chapters": len(chapters),
        "total_questions": total_questions,
        "total_users": len(list_users(db_path)),
        "avg_completion": avg_completion,
    }
