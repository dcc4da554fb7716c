"""User roles and the capabilities each role grants."""
import math
from dataclasses import dataclass
from enum import Enum

from english_tutor.models import Chapter


class Role(str, Enum):
    GUEST = "guest"
    STUDENT = "student"
    PREMIUM = "premium"
    TEACHER = "teacher"
    ADMIN = "admin"


@dataclass(frozen=True)
class Privileges:
    max_chapters: float = math.inf
    can_save_progress: bool = False
    can_view_dashboard: bool = False
    can_access_premium_content: bool = False
    can_download_certificates: bool = False
    can_create_content: bool = False
    can_view_student_progress: bool = False
    can_manage_users: bool = False
    can_access_admin_panel: bool = False


# Each role holds every capability of the role before it.
ROLE_PRIVILEGES = {
    Role.GUEST: Privileges(max_chapters=2),
    Role.STUDENT: Privileges(
        can_save_progress=True,
        can_view_dashboard=True,
    ),
    Role.PREMIUM: Privileges(
        can_save_progress=True,
        can_view_dashboard=True,
        can_access_premium_content=True,
        can_download_certificates=True,
    ),
    Role.TEACHER: Privileges(
        can_save_progress=True,
        can_view_dashboard=True,
        can_access_premium_content=True,
        can_download_certificates=True,
        can_create_content=True,
        can_view_student_progress=True,
    ),
    Role.ADMIN: Privileges(
        can_save_progress=True,
        can_view_dashboard=True,
        can_access_premium_content=True,
        can_download_certificates=True,
        can_create_content=True,
        can_view_student_progress=True,
        can_manage_users=True,
        can_access_admin_panel=True,
    ),
}


def parse_role(value) -> Role:
    """Map a stored role string to a Role; unknown values become student."""
    try:
        return Role(value)
    except ValueError:
        return Role.STUDENT


def get_privileges(role: Role) -> Privileges:
    return ROLE_PRIVILEGES[role]


def can_access_chapter(chapter: Chapter, position: int, role: Role) -> bool:
    """Whether ``role`` may open ``chapter`` at zero-based ``position``.

    The chapter limit counts list positions, not entitlements: a guest sees the
    first two chapters of whatever order the content store returns.
    """
    privileges = get_privileges(role)
    if chapter.is_premium and not privileges.can_access_premium_content:
        return False
    return position < privileges.max_chapters
