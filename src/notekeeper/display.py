"""
Terminal rendering for Notekeeper.
"""

import os
from datetime import datetime
from typing import Any

from notekeeper.models import Category, Note, User


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    WHITE = "\033[37m"

    BRIGHT_CYAN = "\033[96m"
    BRIGHT_MAGENTA = "\033[95m"
    BRIGHT_YELLOW = "\033[93m"

    @classmethod
    def enabled(cls) -> bool:
        """Check if colors should be enabled."""
        if os.environ.get("NO_COLOR"):
            return False
        return True


def c(text: str, *codes: str) -> str:
    """Apply color codes to text if colors are enabled."""
    if not Colors.enabled():
        return text
    return "".join(codes) + text + Colors.RESET


SHORT_ID_LENGTH = 8


def short_id(record_id: str) -> str:
    """First few hex characters of an id; commands accept any unique prefix."""
    return record_id[:SHORT_ID_LENGTH]


def format_timestamp(moment: datetime) -> str:
    """Render a stored UTC timestamp in the local time zone."""
    return moment.astimezone().strftime("%Y-%m-%d %H:%M")


def format_date(note: Note) -> str:
    return format_timestamp(note.date_added)


def format_notes(notes: list[Note], heading: str = "NOTES") -> str:
    """Format a notes list as a table."""
    if not notes:
        return c("No notes found.", Colors.DIM)

    lines = [c(f"━━━ {heading} ━━━", Colors.BOLD, Colors.BLUE), ""]
    lines.append(c(f"{'ID':8}  {'ADDED':16}  {'CATEGORY':12}  NOTE", Colors.DIM))
    lines.append(c("─" * 70, Colors.DIM))

    for note in notes:
        label = note.title or (note.content.splitlines() or [""])[0]
        edited = c(" [edited]", Colors.GREEN) if note.date_edited else ""
        lines.append(
            f"{c(short_id(note.id), Colors.DIM)}  "
            f"{format_date(note):16}  "
            f"{c(f'{note.category[:12]:12}', Colors.BRIGHT_CYAN)}  "
            f"{label[:40]}{edited}"
        )

    return "\n".join(lines)


def format_note(note: Note) -> str:
    """Format a single note in full."""
    lines = []
    if note.title:
        lines.append(c(note.title, Colors.BOLD, Colors.WHITE))
    lines.append(c(f"{note.category} · added {format_date(note)}", Colors.DIM))
    if note.date_edited:
        lines.append(c(f"edited {format_timestamp(note.date_edited)}", Colors.DIM))
    lines.append(c(f"id {note.id}", Colors.DIM))
    lines.append("")
    lines.append(note.content)
    return "\n".join(lines)


def format_categories(categories: list[Category]) -> str:
    if not categories:
        return c("No categories.", Colors.DIM)

    lines = [c("━━━ CATEGORIES ━━━", Colors.BOLD, Colors.BLUE), ""]
    for category in categories:
        lines.append(f"{c(short_id(category.id), Colors.DIM)}  {c(category.name, Colors.BRIGHT_MAGENTA)}")
    return "\n".join(lines)


def format_user(user: User) -> str:
    return f"{c(user.username, Colors.BOLD)} <{user.email}>"


def format_stats(user: User, stats: dict[str, Any]) -> str:
    lines = [
        "Notekeeper Statistics",
        "-" * 30,
        f"User: {user.username} <{user.email}>",
        f"Total notes: {stats['total_notes']}",
        f"Edited notes: {stats['edited_notes']}",
        f"Categories: {stats['total_categories']}",
        "",
        "By category:",
    ]
    for name, count in sorted(stats.get("by_category", {}).items()):
        lines.append(f"  {name}: {count}")
    return "\n".join(lines)
