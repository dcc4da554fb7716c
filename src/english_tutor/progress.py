"""Progress persistence: a local cache plus a remote document per user."""
import json
import logging
from datetime import datetime

from english_tutor.db import (
    get_document, get_local_item, list_documents, remove_local_item, set_document, set_local_item,
)
from english_tutor.errors import TutorError
from english_tutor.models import UserProgress

logger = logging.getLogger(__name__)

LOCAL_PROGRESS_KEY = "learningProgress"
PROGRESS_COLLECTION = "userProgress"


def merge_progress(base: UserProgress, overlay: dict) -> UserProgress:
    """Shallow merge: top-level fields present in ``overlay`` win."""
    return UserProgress.from_dict({**base.to_dict(), **overlay})


def load_local_progress(cache_path: str) -> dict | None:
    try:
        raw = get_local_item(cache_path, LOCAL_PROGRESS_KEY)
    except TutorError as e:
        logger.error("Error reading local progress: %s", e)
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Discarding corrupt local progress: %s", e)
        return None


def save_local_progress(cache_path: str, progress: UserProgress) -> bool:
    try:
        set_local_item(cache_path, LOCAL_PROGRESS_KEY, json.dumps(progress.to_dict()))
    except TutorError as e:
        logger.error("Error saving local progress: %s", e)
        return False
    return True


def clear_local_progress(cache_path: str) -> None:
    try:
        remove_local_item(cache_path, LOCAL_PROGRESS_KEY)
    except TutorError as e:
        logger.error("Error clearing local progress: %s", e)


def load_remote_progress(db_path: str, user_id: str) -> dict | None:
    """The stored progress document, or None when absent or unreachable."""
    try:
        doc = get_document(db_path, PROGRESS_COLLECTION, user_id)
    except TutorError as e:
        logger.error("Error loading user progress: %s", e)
        return None
    if doc is not None:
        doc.pop("lastUpdated", None)
    return doc


def save_remote_progress(db_path: str, user_id: str, progress: UserProgress) -> bool:
    try:
        set_document(db_path, PROGRESS_COLLECTION, user_id, {
            **progress.to_dict(),
            "lastUpdated": datetime.now().isoformat(),
        })
    except TutorError as e:
        logger.error("Error saving user progress: %s", e)
        return False
    return True


def list_remote_progress(db_path: str) -> list[dict]:
    """Every user's progress document, for teacher and admin views."""
    try:
        return list_documents(db_path, PROGRESS_COLLECTION)
    except TutorError as e:
        logger.error("Error loading users: %s", e)
        return []
