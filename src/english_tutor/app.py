"""Interactive CLI application."""
import logging
import random
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from english_tutor.achievements import ACHIEVEMENTS
from english_tutor.analytics import generate_report
from english_tutor.auth import LocalIdentityProvider
from english_tutor.certificates import export_certificate_text, generate_certificate, render_certificate
from english_tutor.dashboard import (
    get_accuracy_color, get_accuracy_label, get_admin_statistics, get_chapter_rows,
    get_progress_summary, get_student_progress,
)
from english_tutor.db import init_db, DEFAULT_DB_PATH
from english_tutor.errors import TutorError
from english_tutor.events import EventChannel
from english_tutor.importer import export_chapters, import_chapters, import_lesson
from english_tutor.models import (
    DragDropQuestion, FillInBlankQuestion, MatchingQuestion, ReadingPassageQuestion,
)
from english_tutor.quiz import QuestionState, QuizSession, UpgradePrompt
from english_tutor.seed import seed_all, is_seeded
from english_tutor.users import ban_user, list_users, promote_user

console = Console()
logger = logging.getLogger(__name__)


class SessionExitRequested(Exception):
    """User typed 'q' or 'menu' at a prompt inside a chapter."""


EXIT_WORDS = ("q", "menu")


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def option_letter(index: int) -> str:
    return chr(ord("a") + index)


def show_welcome():
    console.print(Panel(
        "[bold]Interactive English Book[/bold]\n[dim]Grammar, vocabulary and reading practice[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu(session: QuizSession):
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("study", "Study the current chapter"),
        ("chapters", "List chapters and jump to one"),
        ("next", "Next chapter"),
        ("prev", "Previous chapter"),
        ("progress", "Score and accuracy"),
    ]
    privileges = session.privileges
    if privileges.can_view_dashboard:
        commands.append(("dashboard", "Analytics and achievements"))
    if privileges.can_download_certificates:
        commands.append(("certificate", "Issue a certificate"))
    if privileges.can_view_student_progress:
        commands.append(("students", "Student progress"))
    if privileges.can_access_admin_panel:
        commands.append(("admin", "Admin panel"))
    if session.user:
        commands.append(("logout", f"Sign out {session.user.email}"))
    else:
        commands.append(("login", "Sign in or register"))
    commands += [("reset", "Reset all progress"), ("quit", "Exit")]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")
    user = session.user.email.split("@")[0] if session.user else "Guest"
    console.print(f"\n[dim]{user} · {session.role.value.upper()}[/dim]")


def show_upgrade_prompt(prompt: UpgradePrompt):
    if prompt.reason == "premium":
        message = f'"{prompt.chapter.title}" is available for premium users only.'
    else:
        message = f'Sign in to unlock "{prompt.chapter.title}" and every chapter after it.'
    console.print(Panel(
        f"{message}\n\n[bold]Upgrade to Premium to unlock:[/bold]\n"
        "  - Access to all chapters\n  - Advanced question types\n"
        "  - Detailed analytics\n  - Certificate downloads",
        title="🔒 Premium Content", border_style="yellow",
    ))


def show_achievements(achievements):
    for a in achievements:
        console.print(Panel(
            f"{a.icon} [bold]{a.title}[/bold]\n{a.description}\n[bold]+{a.points} points[/bold]",
            title="Achievement Unlocked!", border_style="yellow",
        ))


def show_chapter(session: QuizSession):
    chapter = session.current_chapter
    console.print(Panel(chapter.lesson, title=chapter.title, border_style="cyan"))
    if chapter.explanation:
        console.print(f"[dim]{chapter.explanation}[/dim]")
    if chapter.examples:
        console.print("\n[bold]Examples:[/bold]")
        for example in chapter.examples:
            console.print(f"  • {example}")
    console.print()


def ask_choice(options) -> int:
    for i, option in enumerate(options):
        console.print(f"  [cyan]{option_letter(i)})[/cyan] {option}")
    letters = [option_letter(i) for i in range(len(options))]
    answer = session_prompt("\nYour answer", choices=letters + list(EXIT_WORDS), show_choices=False)
    return letters.index(answer.strip().lower())


def ask_order(question: DragDropQuestion) -> list[str]:
    items = list(question.items)
    random.shuffle(items)
    for i, item in enumerate(items, 1):
        console.print(f"  [cyan]{i}.[/cyan] {item}")
    while True:
        raw = session_prompt("Enter the numbers in the correct order (e.g. 2,1,3)")
        try:
            picks = [int(p) for p in raw.replace(" ", "").split(",") if p]
            return [items[p - 1] for p in picks]
        except (ValueError, IndexError):
            console.print("[red]Use the item numbers separated by commas.[/red]")


def ask_matches(session: QuizSession, question: MatchingQuestion) -> None:
    rights = [p.right for p in question.pairs]
    random.shuffle(rights)
    table = Table(show_header=False, box=None)
    for i, pair in enumerate(question.pairs):
        table.add_row(f"[cyan]{i + 1}.[/cyan] {pair.left}", f"[cyan]{option_letter(i)})[/cyan] {rights[i]}")
    console.print(table)
    while len(session.matched_pairs) < len(question.pairs):
        raw = session_prompt("Match (e.g. 1b) or 'done'").strip().lower()
        if raw == "done":
            return
        try:
            left_index = int(raw[:-1]) - 1
            right = rights[ord(raw[-1]) - ord("a")]
        except (ValueError, IndexError):
            console.print("[red]Type a number followed by a letter.[/red]")
            continue
        if session.match_pair(left_index, right):
            console.print(f"[green]Matched {question.pairs[left_index].left} → {right}[/green]")
        else:
            console.print("[yellow]Not a match, try again.[/yellow]")


def run_question(session: QuizSession):
    chapter = session.current_chapter
    question = session.current_question
    console.print(f"[bold]Q{session.question_index + 1}/{len(chapter.questions)}.[/bold] {question.prompt}\n")
    if isinstance(question, ReadingPassageQuestion):
        console.print(Panel(question.passage, border_style="dim"))
    if isinstance(question, FillInBlankQuestion):
        selection = session_prompt("Your answer")
    elif isinstance(question, DragDropQuestion):
        selection = ask_order(question)
    elif isinstance(question, MatchingQuestion):
        ask_matches(session, question)
        selection = None
    else:
        selection = ask_choice(question.options)
    result = session.submit_answer(selection)
    if result.is_correct:
        console.print(f"[green]Correct! +{result.points_awarded}[/green]")
    else:
        console.print("[red]Incorrect.[/red]")
    if result.feedback:
        console.print(f"[dim]{result.feedback}[/dim]")
    show_achievements(result.achievements)
    console.print()
    return result


def cmd_study(session: QuizSession):
    chapter = session.current_chapter
    if chapter is None:
        console.print("[yellow]No chapters available.[/yellow]")
        return
    if not session.check_access(session.chapter_index):
        result = session.go_to_chapter(session.chapter_index)
        show_upgrade_prompt(result)
        return
    show_chapter(session)
    if not chapter.questions:
        return
    if session.chapter_complete:
        session.load_question(0)
    elif session.state is QuestionState.ANSWERED:
        session.advance()
    console.print("[dim]Type 'q' at any prompt to return to the menu.[/dim]\n")
    try:
        while not session.chapter_complete:
            run_question(session)
            if not session.chapter_complete:
                session.advance()
    except SessionExitRequested:
        console.print("[dim]Progress saved. Back to the menu.[/dim]")
        return
    completion = session.complete_chapter()
    if completion.already_completed:
        console.print(f"[green]Chapter reviewed ({completion.accuracy:.0f}% correct).[/green]")
    else:
        console.print(Panel(
            f"Great job completing this chapter!\n[bold]+{completion.bonus} bonus points[/bold]",
            title="🎉 Chapter Complete!", border_style="green",
        ))
        show_achievements(completion.achievements)
    cmd_navigate(session, session.next_chapter)


def cmd_navigate(session: QuizSession, move):
    result = move()
    if result is None:
        console.print("[dim]No more chapters in that direction.[/dim]")
    elif isinstance(result, UpgradePrompt):
        show_upgrade_prompt(result)
    else:
        console.print(f"[cyan]Now on {result.title}[/cyan]")


def cmd_chapters(session: QuizSession):
    rows = get_chapter_rows(session.progress, session.chapters, session.role)
    table = Table(title="Chapters")
    table.add_column("#", justify="right")
    table.add_column("Chapter")
    table.add_column("Questions", justify="right")
    table.add_column("Status")
    for row in rows:
        if not row["accessible"]:
            status = "[dim]🔒 Premium[/dim]" if row["premium"] else "[dim]🔒 Upgrade[/dim]"
        elif row["completed"]:
            status = "[green]Done[/green]"
        else:
            status = "[cyan]Current[/cyan]" if row["index"] == session.chapter_index else ""
        table.add_row(str(row["index"] + 1), row["title"], str(row["questions"]), status)
    console.print(table)
    choice = Prompt.ask("Open chapter (Enter to stay)", default="")
    if choice.strip():
        index = int(choice) - 1
        if 0 <= index < len(session.chapters):
            cmd_navigate(session, lambda: session.go_to_chapter(index))
        else:
            console.print("[red]No such chapter.[/red]")


def cmd_progress(session: QuizSession):
    summary = get_progress_summary(session.progress, session.chapters)
    color = get_accuracy_color(summary["accuracy"])
    bar_filled = int(summary["overall_progress"] / 5)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(f"\n  Score: [bold]{summary['score']}[/bold]  |  "
                  f"Accuracy: [{color}]{summary['accuracy']}% {get_accuracy_label(summary['accuracy'])}[/{color}]  |  "
                  f"Chapters: [bold]{summary['chapters_completed']}/{summary['total_chapters']}[/bold]")
    console.print(f"  {bar} {summary['overall_progress']}%\n")
    if not session.privileges.can_save_progress:
        console.print("[dim]Guest progress is not saved. Sign in to keep it.[/dim]")


def cmd_dashboard(session: QuizSession):
    if not session.user:
        console.print("[yellow]Sign in to see your dashboard.[/yellow]")
        return
    report = generate_report(session.db_path, session.user.user_id)
    if report is None:
        console.print("[yellow]No statistics yet.[/yellow]")
        return
    o = report["overview"]
    console.print(Panel(
        f"Questions: [bold]{o['total_questions']}[/bold]  |  Correct: [bold]{o['correct_answers']}[/bold]  |  "
        f"Accuracy: [bold]{o['accuracy']}%[/bold]\nStudy time: [bold]{o['total_study_time']}[/bold]  |  "
        f"Streak: [bold]{o['study_streak']}[/bold] days  |  Chapters: [bold]{o['completed_chapters']}[/bold]",
        title="Learning Dashboard", border_style="blue",
    ))
    table = Table(title=f"Achievements ({len(report['achievements']['earned'])}/{report['achievements']['total']})")
    table.add_column("")
    table.add_column("Achievement")
    table.add_column("Points", justify="right")
    for a in ACHIEVEMENTS:
        earned = a.id in report["achievements"]["earned"]
        style = "" if earned else "dim"
        table.add_row(a.icon if earned else "·", f"[{style}]{a.title}[/{style}]" if style else a.title, str(a.points))
    console.print(table)
    for s in report["strengths"]:
        console.print(f"  [green]Strength:[/green] {s['type']} ({s['accuracy']}%)")
    for r in report["recommendations"]:
        console.print(f"  [yellow]Tip:[/yellow] {r['message']}")


def cmd_certificate(session: QuizSession):
    if not session.user:
        console.print("[yellow]Sign in to earn certificates.[/yellow]")
        return
    kind = Prompt.ask("Certificate type", choices=["auto", "completion", "excellence", "mastery"], default="auto")
    name = Prompt.ask("Name on certificate", default=session.user.email.split("@")[0])
    certificate = generate_certificate(session.db_path, session.user.user_id, kind, name=name)
    console.print(render_certificate(certificate))
    path = Prompt.ask("Save to file (Enter to skip)", default="")
    if path.strip():
        Path(path).write_text(export_certificate_text(certificate))
        console.print(f"[green]Saved {path}[/green]")


def cmd_students(session: QuizSession):
    table = Table(title="Student Progress")
    table.add_column("User")
    table.add_column("Score", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Chapters", justify="right")
    for row in get_student_progress(session.db_path):
        table.add_row(row["user_id"], str(row["score"]), f"{row['accuracy']}%", str(row["chapters_completed"]))
    console.print(table)


def cmd_admin(session: QuizSession):
    stats = get_admin_statistics(session.db_path, session.chapters)
    console.print(f"\n  Chapters: [bold]{stats['total_chapters']}[/bold]  |  "
                  f"Questions: [bold]{stats['total_questions']}[/bold]  |  "
                  f"Users: [bold]{stats['total_users']}[/bold]  |  "
                  f"Avg completion: [bold]{stats['avg_completion']}%[/bold]")
    action = Prompt.ask(
        "Action", choices=["import", "lesson", "export", "users", "promote", "ban", "back"], default="back",
    )
    if action == "import":
        file_path = Prompt.ask("Chapter file (JSON or YAML)")
        count = import_chapters(session.db_path, file_path)
        console.print(f"[green]Imported {count} chapters.[/green]")
        session.chapters = []
        session.start()
    elif action == "lesson":
        chapter_id = Prompt.ask("Chapter id", choices=[c.id for c in session.chapters], show_choices=False)
        file_path = Prompt.ask("Lesson document")
        result = import_lesson(session.db_path, chapter_id, file_path)
        console.print(f"[green]Imported {result['filename']} ({result['length']} chars) → {chapter_id}[/green]")
    elif action == "export":
        file_path = Prompt.ask("Export to", default="chapters-export.json")
        count = export_chapters(session.db_path, file_path)
        console.print(f"[green]Exported {count} chapters to {file_path}[/green]")
    elif action == "users":
        table = Table(title="Users")
        table.add_column("Id")
        table.add_column("Email")
        table.add_column("Role")
        table.add_column("Status")
        for u in list_users(session.db_path):
            table.add_row(u["id"], u.get("email", ""), u.get("role", ""), "[red]banned[/red]" if u.get("banned") else "")
        console.print(table)
    elif action == "promote":
        user_id = Prompt.ask("User id")
        role = promote_user(session.db_path, user_id)
        console.print(f"[green]{user_id} is now {role.value}.[/green]")
    elif action == "ban":
        user_id = Prompt.ask("User id")
        if Prompt.ask(f"Ban {user_id}?", choices=["y", "n"], default="n") == "y":
            ban_user(session.db_path, user_id)
            console.print(f"[red]{user_id} banned.[/red]")


def cmd_login(identity: LocalIdentityProvider):
    email = Prompt.ask("Email")
    try:
        user = identity.sign_in(email)
    except ValueError as e:
        console.print(f"[red]Login failed: {e}[/red]")
        return
    console.print(f"[green]Welcome, {user.email.split('@')[0]}![/green]")


def cmd_reset(session: QuizSession):
    if Prompt.ask("Reset all progress? This cannot be undone", choices=["y", "n"], default="n") == "y":
        session.reset_progress()
        console.print("[yellow]Progress reset.[/yellow]")


def configure_logging(level: int = logging.WARNING) -> None:
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main(db_path: str = DEFAULT_DB_PATH):
    configure_logging()
    try:
        init_db(db_path)
        first_run = not is_seeded(db_path)
        if first_run:
            console.print("[dim]Setting up for first use...[/dim]")
        seed_all(db_path)
        session = QuizSession(db_path)
        channel = EventChannel()
        session.subscribe(channel)
        identity = LocalIdentityProvider(channel)
        session.start()
    except (TutorError, OSError) as e:
        logger.exception("Initialization error")
        console.print(Panel(
            f"The tutor could not start.\n[dim]{e}[/dim]", title="Error", border_style="red",
        ))
        sys.exit(1)

    show_welcome()

    while True:
        show_menu(session)
        choice = Prompt.ask("\n[bold]>[/bold]", default="study").strip().lower()
        try:
            if choice == "study":
                cmd_study(session)
            elif choice == "chapters":
                cmd_chapters(session)
            elif choice == "next":
                cmd_navigate(session, session.next_chapter)
            elif choice == "prev":
                cmd_navigate(session, session.previous_chapter)
            elif choice == "progress":
                cmd_progress(session)
            elif choice == "dashboard" and session.privileges.can_view_dashboard:
                cmd_dashboard(session)
            elif choice == "certificate" and session.privileges.can_download_certificates:
                cmd_certificate(session)
            elif choice == "students" and session.privileges.can_view_student_progress:
                cmd_students(session)
            elif choice == "admin" and session.privileges.can_access_admin_panel:
                cmd_admin(session)
            elif choice == "login" and not session.user:
                cmd_login(identity)
            elif choice == "logout" and session.user:
                identity.sign_out()
            elif choice == "reset":
                cmd_reset(session)
            elif choice in ("quit", "exit", "q"):
                session.end_study_session()
                console.print("[dim]Keep practicing![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except (TutorError, ValueError, OSError) as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
