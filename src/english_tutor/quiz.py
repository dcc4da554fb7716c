"""Quiz session: chapter navigation, answer grading and scoring.

A ``QuizSession`` is the whole mutable state of one learner's sitting. It is
created explicitly and passed to whatever drives it (the CLI, tests); there
is no module-level instance.

Per question the session is either awaiting an answer or answered::

    load_question -> AWAITING_ANSWER --submit_answer--> ANSWERED
                         ^                                 |
                         +------------- advance -----------+  (more questions)

After the last question of a chapter ``advance`` returns False and
``chapter_complete`` becomes true; ``complete_chapter`` then awards the bonus.
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum

from english_tutor.analytics import (
    StudySession, check_achievements, initialize_stats, track_chapter_completion,
    track_question_attempt, track_study_session,
)
from english_tutor.content import list_chapters
from english_tutor.db import DEFAULT_DB_PATH
from english_tutor.events import EventChannel, SignedIn, SignedOut
from english_tutor.grading import confirmed_pairs, grade_answer
from english_tutor.models import Chapter, MatchingQuestion, UserProgress
from english_tutor.privileges import Privileges, Role, can_access_chapter, get_privileges
from english_tutor.progress import (
    clear_local_progress, load_local_progress, load_remote_progress, merge_progress,
    save_local_progress, save_remote_progress,
)
from english_tutor.users import load_user_role

logger = logging.getLogger(__name__)

CHAPTER_COMPLETION_BONUS = 50


class QuestionState(Enum):
    AWAITING_ANSWER = "awaiting_answer"
    ANSWERED = "answered"


@dataclass(frozen=True)
class AnswerResult:
    is_correct: bool
    feedback: str
    points_awarded: int
    chapter_complete: bool
    achievements: tuple = ()


@dataclass(frozen=True)
class ChapterCompletion:
    chapter_id: str
    bonus: int
    accuracy: float
    already_completed: bool
    achievements: tuple = ()


@dataclass(frozen=True)
class UpgradePrompt:
    """Returned instead of a chapter the current role may not open."""
    chapter: Chapter
    reason: str  # "premium" or "chapter_limit"


class QuizSession:
    def __init__(
        self,
        db_path: str = DEFAULT_DB_PATH,
        cache_path: str | None = None,
        chapters=None,
        role: Role = Role.GUEST,
        clock=time.time,
    ):
        self.db_path = db_path
        self.cache_path = cache_path or db_path
        self.clock = clock
        self.chapters: list[Chapter] = list(chapters) if chapters is not None else []
        self.role = role
        self.user: SignedIn | None = None
        self.progress = UserProgress()
        self.chapter_index = 0
        self.question_index = 0
        self.state = QuestionState.AWAITING_ANSWER
        self.question_started_at: float | None = None
        self.matched_pairs: dict[int, str] = {}
        self.study_session = StudySession(started_at=clock())

    # ------------------------------------------------------------------
    # Setup and identity
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Load chapters (unless given) and the local progress cache."""
        if not self.chapters:
            self.chapters = list_chapters(self.db_path)
        self.restore_local_progress()
        if self.chapters:
            self.go_to_chapter(0)

    def subscribe(self, channel: EventChannel):
        return channel.subscribe(self.handle_event)

    def handle_event(self, event) -> None:
        if isinstance(event, SignedIn):
            if self.user is not None and self.user.user_id != event.user_id:
                self.end_study_session()
                self.progress = UserProgress()
            self.user = event
            self.role = load_user_role(self.db_path, event.user_id, event.email)
            initialize_stats(self.db_path, event.user_id)
            remote = load_remote_progress(self.db_path, event.user_id)
            if remote:
                self.progress = merge_progress(self.progress, remote)
            logger.info("Session now %s (%s)", event.email, self.role.value)
        elif isinstance(event, SignedOut):
            # The account's progress stays in its remote record only.
            self.end_study_session()
            self.user = None
            self.role = Role.GUEST
            self.progress = UserProgress()
            clear_local_progress(self.cache_path)
        else:
            return
        if self.chapters and not self.check_access(self.chapter_index):
            self.go_to_chapter(0)

    def restore_local_progress(self) -> None:
        data = load_local_progress(self.cache_path)
        if data:
            self.progress = merge_progress(self.progress, data)

    # ------------------------------------------------------------------
    # Position
    # ------------------------------------------------------------------

    @property
    def privileges(self) -> Privileges:
        return get_privileges(self.role)

    @property
    def current_chapter(self) -> Chapter | None:
        if not self.chapters:
            return None
        return self.chapters[self.chapter_index]

    @property
    def current_question(self):
        chapter = self.current_chapter
        if chapter is None or not chapter.questions:
            return None
        return chapter.questions[self.question_index]

    @property
    def chapter_complete(self) -> bool:
        """True once the chapter's last question has been answered."""
        chapter = self.current_chapter
        return (
            chapter is not None
            and self.state is QuestionState.ANSWERED
            and self.question_index == len(chapter.questions) - 1
        )

    def check_access(self, index: int) -> bool:
        return can_access_chapter(self.chapters[index], index, self.role)

    def go_to_chapter(self, index: int):
        """Open chapter ``index``; returns the chapter or an UpgradePrompt."""
        chapter = self.chapters[index]
        if not self.check_access(index):
            reason = "premium" if chapter.is_premium and not self.privileges.can_access_premium_content else "chapter_limit"
            logger.debug("Access to %s denied for %s: %s", chapter.id, self.role.value, reason)
            return UpgradePrompt(chapter=chapter, reason=reason)
        self.chapter_index = index
        if chapter.questions:
            self.load_question(0)
        else:
            self.question_index = 0
            self.state = QuestionState.AWAITING_ANSWER
        return chapter

    def next_chapter(self):
        if self.chapter_index < len(self.chapters) - 1:
            return self.go_to_chapter(self.chapter_index + 1)
        return None

    def previous_chapter(self):
        if self.chapter_index > 0:
            return self.go_to_chapter(self.chapter_index - 1)
        return None

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    def load_question(self, index: int = 0) -> None:
        chapter = self.current_chapter
        if chapter is None or not 0 <= index < len(chapter.questions):
            raise IndexError(f"question {index} out of range")
        self.question_index = index
        self.state = QuestionState.AWAITING_ANSWER
        self.matched_pairs = {}
        self.question_started_at = self.clock()

    def match_pair(self, left_index: int, right: str) -> bool:
        """Try to match a left item with a right value on a matching question.

        Correct matches are kept; wrong ones are dropped and may be retried.
        """
        question = self.current_question
        if self.state is QuestionState.ANSWERED or not isinstance(question, MatchingQuestion):
            return False
        if confirmed_pairs(question, [(left_index, right)]):
            self.matched_pairs[left_index] = right
            return True
        return False

    def submit_answer(self, selection=None) -> AnswerResult | None:
        """Grade ``selection`` for the current question.

        Returns None, changing nothing, when the question is already answered.
        Matching questions are graded on the pairs confirmed via ``match_pair``;
        a ``selection`` of (left_index, right) attempts is matched first.
        """
        question = self.current_question
        if self.state is QuestionState.ANSWERED or question is None:
            return None
        if isinstance(question, MatchingQuestion):
            for left_index, right in selection or ():
                self.match_pair(left_index, right)
            selection = list(self.matched_pairs.items())
        is_correct = grade_answer(question, selection)
        self.state = QuestionState.ANSWERED
        time_spent_ms = (self.clock() - (self.question_started_at or self.clock())) * 1000

        points = question.points if is_correct else 0
        self._record_answer(is_correct, points)
        if self.user:
            track_question_attempt(self.db_path, self.user.user_id, question.type, is_correct, time_spent_ms)
        self.save_progress()
        achievements = self._award_achievements()
        return AnswerResult(
            is_correct=is_correct,
            feedback=question.feedback,
            points_awarded=points,
            chapter_complete=self.chapter_complete,
            achievements=achievements,
        )

    def _record_answer(self, is_correct: bool, points: int) -> None:
        self.progress.total_questions += 1
        self.study_session.questions_answered += 1
        if is_correct:
            self.progress.correct_answers += 1
            self.progress.score += points
            self.study_session.correct_answers += 1
        answers = self.progress.chapter_progress.setdefault(self.current_chapter.id, {})
        answers[str(self.question_index)] = is_correct

    def advance(self) -> bool:
        """Move to the next question. False when not answered or at the end."""
        if self.state is not QuestionState.ANSWERED:
            return False
        if self.question_index < len(self.current_chapter.questions) - 1:
            self.load_question(self.question_index + 1)
            return True
        return False

    # ------------------------------------------------------------------
    # Chapters and progress
    # ------------------------------------------------------------------

    def chapter_accuracy(self, chapter: Chapter) -> float:
        """Percentage of the chapter's questions last answered correctly."""
        if not chapter.questions:
            return 0.0
        answers = self.progress.chapter_progress.get(chapter.id, {})
        correct = sum(1 for v in answers.values() if v)
        return min(correct, len(chapter.questions)) / len(chapter.questions) * 100

    def complete_chapter(self) -> ChapterCompletion:
        """Mark the current chapter complete; the bonus is awarded once per chapter."""
        chapter = self.current_chapter
        accuracy = self.chapter_accuracy(chapter)
        if chapter.id in self.progress.completed_chapters:
            return ChapterCompletion(chapter.id, 0, accuracy, already_completed=True)
        self.progress.completed_chapters.append(chapter.id)
        self.progress.score += CHAPTER_COMPLETION_BONUS
        if self.user:
            track_chapter_completion(self.db_path, self.user.user_id, accuracy)
        self.save_progress()
        achievements = self._award_achievements()
        logger.info("Completed %s at %.0f%%", chapter.id, accuracy)
        return ChapterCompletion(chapter.id, CHAPTER_COMPLETION_BONUS, accuracy, False, achievements)

    def _award_achievements(self) -> tuple:
        if not self.user:
            return ()
        new = check_achievements(self.db_path, self.user.user_id)
        if new:
            self.progress.score += sum(a.points for a in new)
            self.save_progress()
        return tuple(new)

    def save_progress(self) -> bool:
        """Persist progress if the role allows it. Remote only when signed in."""
        if not self.privileges.can_save_progress:
            return False
        saved = save_local_progress(self.cache_path, self.progress)
        if self.user:
            saved = save_remote_progress(self.db_path, self.user.user_id, self.progress) and saved
        return saved

    def reset_progress(self) -> None:
        self.progress = UserProgress()
        self.chapter_index = 0
        self.question_index = 0
        clear_local_progress(self.cache_path)
        if self.user:
            save_remote_progress(self.db_path, self.user.user_id, self.progress)
        if self.chapters:
            self.go_to_chapter(0)

    def end_study_session(self) -> None:
        """Flush the sitting's time and daily totals for a signed-in user."""
        if self.user:
            track_study_session(self.db_path, self.user.user_id, self.study_session, now=self.clock())
        self.study_session = StudySession(started_at=self.clock())
