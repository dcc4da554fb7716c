"""Content editor: validate, add, update, import and export chapters."""
import json
import logging
import time
from pathlib import Path

from english_tutor.content import CHAPTERS_COLLECTION, chapter_from_dict, chapter_to_dict
from english_tutor.db import get_document, list_documents, set_document, sort_key
from english_tutor.errors import ContentError, NotFound
from english_tutor.models import MATCHING, MULTIPLE_CHOICE, READING_PASSAGE

logger = logging.getLogger(__name__)

REQUIRED_CHAPTER_FIELDS = ["title", "lesson", "explanation", "examples", "questions"]


def validate_chapter(chapter: dict) -> bool:
    """Raise ContentError describing the first problem found in ``chapter``."""
    missing = [f for f in REQUIRED_CHAPTER_FIELDS if not chapter.get(f)]
    if missing:
        raise ContentError(f"Missing required fields: {', '.join(missing)}")
    for i, question in enumerate(chapter["questions"], 1):
        answer_field = "pairs" if question.get("type") == MATCHING else "correct"
        if not question.get("type") or not question.get("question") or not question.get("feedback") \
                or question.get(answer_field) in (None, "", []):
            raise ContentError(f"Question {i} is missing required fields")
        if question["type"] in (MULTIPLE_CHOICE, READING_PASSAGE) and not question.get("options"):
            raise ContentError(f"Question {i} is missing options for multiple choice")
    # Parse to catch unknown types and malformed answers.
    try:
        chapter_from_dict({"id": chapter.get("id", "new"), **chapter})
    except ContentError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise ContentError(f"Invalid chapter field: {e}") from e
    return True


def normalize_chapter(chapter: dict) -> dict:
    """The stored form of ``chapter``: typed fields, without its id."""
    data = chapter_to_dict(chapter_from_dict({"id": chapter.get("id", "new"), **chapter}))
    del data["id"]
    return data


def _next_order(db_path: str) -> int:
    orders = [sort_key(d.get("order")) for d in list_documents(db_path, CHAPTERS_COLLECTION)]
    return int(max((v for rank, v in orders if rank == 0), default=0)) + 1


def add_chapter(db_path: str, chapter: dict) -> str:
    """Validate and store a new chapter; returns its generated id."""
    validate_chapter(chapter)
    chapter_id = f"chapter-{int(time.time() * 1000)}"
    if chapter.get("order") in (None, ""):
        chapter = {**chapter, "order": _next_order(db_path)}
    set_document(db_path, CHAPTERS_COLLECTION, chapter_id, normalize_chapter(chapter))
    logger.info("Chapter added with ID: %s", chapter_id)
    return chapter_id


def update_chapter(db_path: str, chapter_id: str, updates: dict) -> None:
    if get_document(db_path, CHAPTERS_COLLECTION, chapter_id) is None:
        raise NotFound(f"{CHAPTERS_COLLECTION}/{chapter_id}")
    set_document(db_path, CHAPTERS_COLLECTION, chapter_id, updates, merge=True)
    logger.info("Chapter %s updated successfully", chapter_id)


def batch_upload(db_path: str, chapters: list[dict]) -> int:
    """Validate every chapter, then store them all under their own ids."""
    for i, chapter in enumerate(chapters, 1):
        try:
            validate_chapter(chapter)
        except ContentError as e:
            raise ContentError(f"Chapter {i}: {e}") from e
        if not chapter.get("id"):
            raise ContentError(f"Chapter {i}: missing id")
    for chapter in chapters:
        set_document(db_path, CHAPTERS_COLLECTION, str(chapter["id"]), normalize_chapter(chapter))
        logger.info("Uploaded: %s", chapter["title"])
    return len(chapters)


def _load_structured(path: Path):
    if path.suffix.lower() in (".yaml", ".yml"):
        import yaml
        return yaml.safe_load(path.read_text())
    return json.loads(path.read_text())


def _lesson_from_data(data) -> str:
    # A chapter-shaped mapping contributes its lesson; a list of strings its lines.
    if isinstance(data, dict):
        if "lesson" in data:
            return str(data["lesson"])
        return "\n".join(f"{key}: {value}" for key, value in data.items())
    if isinstance(data, list):
        return "\n".join(str(item) for item in data)
    return "" if data is None else str(data)


def read_file_content(file_path: str) -> str:
    """Lesson text extracted from a document.

    Text and Markdown are read as is; PDF, Word and HTML are reduced to their
    text; JSON and YAML contribute their ``lesson`` field when they have one.
    """
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix in (".json", ".yaml", ".yml"):
        return _lesson_from_data(_load_structured(path))
    elif suffix == ".pdf":
        from PyPDF2 import PdfReader
        reader = PdfReader(file_path)
        return "\n\n".join((page.extract_text() or "").strip() for page in reader.pages)
    elif suffix == ".docx":
        from docx import Document
        doc = Document(file_path)
        return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
    elif suffix in (".html", ".htm"):
        from bs4 import BeautifulSoup
        soup = BeautifulSoup(path.read_text(), "html.parser")
        for tag in soup(["script", "style"]):
            tag.decompose()
        lines = (line.strip() for line in soup.get_text("\n").splitlines())
        return "\n".join(line for line in lines if line)
    return path.read_text()


def load_chapter_file(file_path: str) -> list[dict]:
    """Chapters from a JSON or YAML file: a list, or a mapping with ``chapters``."""
    path = Path(file_path)
    data = _load_structured(path)
    if isinstance(data, dict):
        data = data.get("chapters", [data])
    if not isinstance(data, list):
        raise ContentError(f"{path.name} does not contain chapters")
    return data


def import_chapters(db_path: str, file_path: str) -> int:
    """Import chapters from a file; chapters without an id get one generated."""
    chapters = load_chapter_file(file_path)
    for i, chapter in enumerate(chapters):
        if not chapter.get("id"):
            chapter["id"] = f"chapter-{int(time.time() * 1000)}-{i}"
    return batch_upload(db_path, chapters)


def import_lesson(db_path: str, chapter_id: str, file_path: str) -> dict:
    """Replace a chapter's lesson text with the text of a document."""
    content = read_file_content(file_path).strip()
    update_chapter(db_path, chapter_id, {"lesson": content})
    return {"filename": Path(file_path).name, "chapter_id": chapter_id, "length": len(content)}


def export_chapters(db_path: str, file_path: str) -> int:
    chapters = list_documents(db_path, CHAPTERS_COLLECTION, order_by="order")
    Path(file_path).write_text(json.dumps(chapters, indent=2))
    return len(chapters)
