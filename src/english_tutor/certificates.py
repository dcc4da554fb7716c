"""Certificates of completion, excellence and mastery."""
import io
import logging
import uuid
from datetime import datetime

from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from english_tutor.analytics import STATS_COLLECTION, format_time
from english_tutor.db import get_document, set_document
from english_tutor.errors import NotFound
from english_tutor.progress import PROGRESS_COLLECTION
from english_tutor.users import USERS_COLLECTION

logger = logging.getLogger(__name__)

CERTIFICATES_COLLECTION = "certificates"

TEMPLATES = {
    "completion": {
        "title": "Certificate of Completion",
        "subtitle": "English Learning Program",
        "description": "has successfully completed the Interactive English Learning Course",
        "color": "blue",
        "icon": "🎓",
    },
    "excellence": {
        "title": "Certificate of Excellence",
        "subtitle": "Outstanding Performance",
        "description": "has demonstrated exceptional proficiency in English learning with outstanding results",
        "color": "yellow",
        "icon": "⭐",
    },
    "mastery": {
        "title": "Certificate of Mastery",
        "subtitle": "Advanced English Skills",
        "description": "has achieved mastery level in English language skills through dedicated learning",
        "color": "green",
        "icon": "🏆",
    },
}


def _accuracy(stats: dict) -> float:
    total = stats.get("totalQuestions") or 0
    return (stats.get("correctAnswers", 0) / total) * 100 if total else 0.0


def determine_certificate_type(progress: dict, stats: dict, requested: str = "auto") -> str:
    """Pick a template; ``auto`` chooses by accuracy, chapters and achievements."""
    if requested != "auto":
        if requested not in TEMPLATES:
            raise ValueError(f"unknown certificate type: {requested}")
        return requested
    accuracy = _accuracy(stats)
    chapters = len(progress.get("completedChapters") or [])
    achievements = len(stats.get("achievements") or [])
    if accuracy >= 95 and chapters >= 5 and achievements >= 5:
        return "mastery"
    elif accuracy >= 85 and chapters >= 3 and achievements >= 3:
        return "excellence"
    return "completion"


def generate_certificate(
    db_path: str, user_id: str, cert_type: str = "auto", name: str | None = None,
) -> dict:
    """Build a certificate from the user's stored records and save it.

    Raises NotFound when the user or their progress record is missing.
    """
    user = get_document(db_path, USERS_COLLECTION, user_id)
    progress = get_document(db_path, PROGRESS_COLLECTION, user_id)
    if user is None or progress is None:
        raise NotFound(f"user data not found for {user_id}")
    stats = get_document(db_path, STATS_COLLECTION, user_id) or {}

    chosen = determine_certificate_type(progress, stats, cert_type)
    now = datetime.now()
    certificate = {
        "id": f"cert-{now.strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:9]}",
        "userId": user_id,
        "type": chosen,
        "recipientName": name or user.get("email", user_id).split("@")[0],
        "issueDate": now.strftime("%B %d, %Y"),
        "completionDate": now.isoformat(),
        "score": progress.get("score", 0),
        "accuracy": round(_accuracy(stats)),
        "chaptersCompleted": len(progress.get("completedChapters") or []),
        "studyTime": format_time(stats.get("totalStudyTime", 0)),
        "achievements": len(stats.get("achievements") or []),
    }
    set_document(db_path, CERTIFICATES_COLLECTION, certificate["id"], certificate)
    logger.info("Issued %s certificate %s to %s", chosen, certificate["id"], user_id)
    return certificate


def render_certificate(certificate: dict) -> Panel:
    template = TEMPLATES[certificate["type"]]
    color = template["color"]
    body = Group(
        Align.center(Text(template["icon"], style="bold")),
        Align.center(Text(template["subtitle"], style="dim")),
        Text(),
        Align.center(Text("This certifies that")),
        Align.center(Text(certificate["recipientName"], style=f"bold {color}")),
        Align.center(Text(template["description"])),
        Text(),
        Align.center(Text(
            f"Final Score: {certificate['score']} points  |  Accuracy: {certificate['accuracy']}%  |  "
            f"Chapters Completed: {certificate['chaptersCompleted']}"
        )),
        Align.center(Text(
            f"Study Time: {certificate['studyTime']}  |  Achievements Earned: {certificate['achievements']}"
        )),
        Text(),
        Align.center(Text(f"Issued {certificate['issueDate']}  ·  {certificate['id']}", style="dim")),
    )
    return Panel(body, title=f"[bold]{template['title']}[/bold]", border_style=color, padding=(1, 4))


def export_certificate_text(certificate: dict, width: int = 100) -> str:
    """Plain-text rendering of the certificate, suitable for saving to a file."""
    console = Console(record=True, width=width, file=io.StringIO())
    console.print(render_certificate(certificate))
    return console.export_text()
