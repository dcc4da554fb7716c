"""User records: role lookup and administration."""
import logging
from datetime import datetime

from english_tutor.db import get_document, list_documents, set_document, update_document
from english_tutor.errors import NotFound, TutorError
from english_tutor.privileges import Role, parse_role

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"

ROLE_CHAIN = [Role.GUEST, Role.STUDENT, Role.PREMIUM, Role.TEACHER, Role.ADMIN]


def load_user_role(db_path: str, user_id: str, email: str) -> Role:
    """Role for a signed-in user, creating a student record on first sign-in.

    Banned users are treated as guests. Store failures fall back to student.
    """
    now = datetime.now().isoformat()
    try:
        doc = get_document(db_path, USERS_COLLECTION, user_id)
        if doc is None:
            set_document(db_path, USERS_COLLECTION, user_id, {
                "email": email,
                "role": Role.STUDENT.value,
                "createdAt": now,
                "lastLogin": now,
                "banned": False,
            })
            return Role.STUDENT
        update_document(db_path, USERS_COLLECTION, user_id, {"lastLogin": now})
    except TutorError as e:
        logger.error("Error loading user role: %s", e)
        return Role.STUDENT
    if doc.get("banned"):
        return Role.GUEST
    return parse_role(doc.get("role"))


def list_users(db_path: str) -> list[dict]:
    return list_documents(db_path, USERS_COLLECTION)


def set_role(db_path: str, user_id: str, role: Role) -> None:
    update_document(db_path, USERS_COLLECTION, user_id, {"role": role.value})
    logger.info("Set role of %s to %s", user_id, role.value)


def promote_user(db_path: str, user_id: str) -> Role:
    """Move a user one step up the role chain; admins stay admins."""
    doc = get_document(db_path, USERS_COLLECTION, user_id)
    if doc is None:
        raise NotFound(f"{USERS_COLLECTION}/{user_id}")
    current = parse_role(doc.get("role"))
    index = ROLE_CHAIN.index(current)
    new_role = ROLE_CHAIN[min(index + 1, len(ROLE_CHAIN) - 1)]
    set_role(db_path, user_id, new_role)
    return new_role


def ban_user(db_path: str, user_id: str) -> None:
    update_document(db_path, USERS_COLLECTION, user_id, {"banned": True})
    logger.info("Banned %s", user_id)
