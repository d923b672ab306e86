"""
CLI for Notekeeper.

Minimal CLI using stdlib argument handling for fast startup.
Subcommands are imported lazily to avoid startup overhead.

Usage:
    notekeeper add "your note here"   # Add a note
    notekeeper list                   # List notes
    notekeeper --help                 # Show help
"""

import sys


def print_help() -> None:
    """Print help message."""
    print("""notekeeper - local-first categorized notes

Usage:
    notekeeper add [options] <text>    Add a note (--title, --category)

Account:
    notekeeper register <email> <username>   Create an account and log in
    notekeeper login <email>                 Log in
    notekeeper logout                        Log out
    notekeeper whoami                        Show the logged-in user
    notekeeper account [options]             Change --email / --username
    notekeeper passwd                        Change password

Notes:
    notekeeper list [options]          List notes (--category, --search, --asc, --desc)
    notekeeper show <id>               Show a note in full
    notekeeper edit <id> [options]     Edit a note (--content, --title, --category)
    notekeeper rm <id>                 Delete a note
    notekeeper stats                   Show notebook statistics

Categories:
    notekeeper categories              List categories
    notekeeper category add <name>     Add a category
    notekeeper category rm <name|id>   Delete a category

Options:
    notekeeper --help, -h              Show this help
    notekeeper --version, -v           Show version
    --password <pw>                    Skip the password prompt (register, login)

Examples:
    notekeeper register me@example.com me
    notekeeper add --category Work "Write report"
    notekeeper list --search "milk report" --asc
    notekeeper edit 3f2a9c1b --title "Groceries"

Note ids can be shortened to any unique prefix.""")


def print_version() -> None:
    """Print version."""
    from notekeeper import __version__
    print(f"notekeeper {__version__}")


def parse_options(args: list[str], options: dict[str, str], switches: dict[str, str] | None = None) -> tuple[dict, list[str]]:
    """
    Split args into named options and positional words.

    Args:
        args: Raw arguments after the subcommand
        options: Maps flags that take a value (e.g. "--title", "-t") to a name
        switches: Maps boolean flags (e.g. "--asc") to a name

    Returns:
        (values by name, positional arguments)
    """
    switches = switches or {}
    values: dict = {}
    positional: list[str] = []

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in options:
            if i + 1 >= len(args):
                raise ValueError(f"Missing value for {arg}")
            values[options[arg]] = args[i + 1]
            i += 2
        elif arg in switches:
            values[switches[arg]] = True
            i += 1
        else:
            positional.append(arg)
            i += 1

    return values, positional


def read_password(values: dict, prompt: str = "Password: ") -> str:
    """Password from --password, else an interactive prompt."""
    if password := values.get("password"):
        return password
    import getpass
    return getpass.getpass(prompt)


def run(coro) -> int:
    """Run a command coroutine, reporting errors on stderr."""
    import asyncio

    try:
        return asyncio.run(coro)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


async def open_session():
    """Open the configured store and restore the remembered user."""
    from notekeeper.session import AuthSession
    from notekeeper.store import open_store

    session = AuthSession(open_store())
    await session.load()
    return session


async def require_user():
    session = await open_session()
    if not session.logged_in:
        raise ValueError("Not logged in. Run: notekeeper login <email>")
    return session


# -- account --------------------------------------------------------------

async def cmd_register(args: list[str]) -> int:
    """Create an account and log in."""
    from notekeeper.display import format_user

    values, positional = parse_options(args, {"--password": "password", "-p": "password"})
    if len(positional) < 2:
        print("Usage: notekeeper register <email> <username>", file=sys.stderr)
        return 1

    email, username = positional[0], " ".join(positional[1:])
    password = read_password(values)

    session = await open_session()
    if not await session.register(email, password, username):
        print("Registration failed. Email may already be in use.", file=sys.stderr)
        return 1

    print(f"Registered and logged in as {format_user(session.user)}")
    return 0


async def cmd_login(args: list[str]) -> int:
    """Log in."""
    from notekeeper.display import format_user

    values, positional = parse_options(args, {"--password": "password", "-p": "password"})
    if not positional:
        print("Usage: notekeeper login <email>", file=sys.stderr)
        return 1

    password = read_password(values)
    session = await open_session()
    if not await session.login(positional[0], password):
        print("Invalid email or password", file=sys.stderr)
        return 1

    print(f"Logged in as {format_user(session.user)}")
    return 0


async def cmd_logout() -> int:
    session = await open_session()
    await session.logout()
    print("Logged out.")
    return 0


async def cmd_whoami() -> int:
    from notekeeper.display import format_user

    session = await open_session()
    if not session.logged_in:
        print("Not logged in.")
        return 1
    print(format_user(session.user))
    return 0


async def cmd_account(args: list[str]) -> int:
    """Change email and/or username."""
    from notekeeper.display import format_user

    values, _ = parse_options(args, {
        "--email": "email", "-e": "email",
        "--username": "username", "-u": "username",
    })
    if not values:
        print("Usage: notekeeper account [--email <email>] [--username <name>]", file=sys.stderr)
        return 1

    session = await require_user()
    email = values.get("email", session.user.email)
    username = values.get("username", session.user.username)

    if not await session.update_profile(email, username):
        print("Failed to update profile", file=sys.stderr)
        return 1

    print(f"Profile updated: {format_user(session.user)}")
    return 0


async def cmd_passwd() -> int:
    """Change password (all three prompted)."""
    import getpass

    session = await require_user()
    current = getpass.getpass("Current password: ")
    new = getpass.getpass("New password: ")
    confirm = getpass.getpass("Confirm new password: ")

    if not await session.change_password(current, new, confirm):
        print("Failed to change password", file=sys.stderr)
        return 1

    print("Password changed successfully")
    return 0


# -- notes ----------------------------------------------------------------

async def cmd_add(args: list[str]) -> int:
    """Add a note. Text comes from the arguments or piped stdin."""
    from notekeeper.display import short_id
    from notekeeper.notebook import create_note

    values, positional = parse_options(args, {
        "--title": "title", "-t": "title",
        "--category": "category", "-c": "category",
    })
    content = " ".join(positional)
    if not content.strip() and not sys.stdin.isatty():
        content = sys.stdin.read()

    session = await require_user()
    note = await create_note(
        session.store,
        session.user,
        content,
        title=values.get("title"),
        category=values.get("category"),
    )

    print(f"{short_id(note.id)}  [{note.category}]")
    return 0


async def cmd_list(args: list[str]) -> int:
    """List notes with optional category filter, search and order."""
    from notekeeper.config import load_config
    from notekeeper.display import format_notes
    from notekeeper.notebook import list_notes
    from notekeeper.query import ALL_CATEGORIES

    values, positional = parse_options(
        args,
        {"--category": "category", "-c": "category", "--search": "search", "-s": "search"},
        {"--asc": "asc", "--desc": "desc"},
    )

    order = load_config().get("notes", {}).get("sort_order", "desc")
    if values.get("asc"):
        order = "asc"
    elif values.get("desc"):
        order = "desc"

    query = values.get("search") or " ".join(positional)
    category = values.get("category", ALL_CATEGORIES)

    session = await require_user()
    notes = await list_notes(session.store, session.user, category=category, query=query, order=order)

    heading = "NOTES" if category == ALL_CATEGORIES else category.upper()
    print(format_notes(notes, heading=heading))
    return 0


async def cmd_show(args: list[str]) -> int:
    from notekeeper.display import format_note
    from notekeeper.notebook import find_note

    if not args:
        print("Usage: notekeeper show <id>", file=sys.stderr)
        return 1

    session = await require_user()
    note = await find_note(session.store, session.user, args[0])
    print(format_note(note))
    return 0


async def cmd_edit(args: list[str]) -> int:
    """Edit a note's content, title or category."""
    from notekeeper.display import format_note
    from notekeeper.notebook import edit_note

    values, positional = parse_options(args, {
        "--content": "content",
        "--title": "title", "-t": "title",
        "--category": "category", "-c": "category",
    })
    if not positional or not values:
        print("Usage: notekeeper edit <id> [--content <text>] [--title <title>] [--category <name>]", file=sys.stderr)
        return 1

    session = await require_user()
    note = await edit_note(
        session.store,
        session.user,
        positional[0],
        content=values.get("content"),
        title=values.get("title"),
        category=values.get("category"),
    )
    print(format_note(note))
    return 0


async def cmd_rm(args: list[str]) -> int:
    from notekeeper.display import short_id
    from notekeeper.notebook import remove_note

    if not args:
        print("Usage: notekeeper rm <id>", file=sys.stderr)
        return 1

    session = await require_user()
    note = await remove_note(session.store, session.user, args[0])
    print(f"Deleted: {short_id(note.id)}")
    return 0


async def cmd_stats() -> int:
    """Show notebook statistics."""
    from notekeeper.display import format_stats

    session = await require_user()
    stats = await session.store.get_stats(session.user.id)
    print(format_stats(session.user, stats))
    return 0


# -- categories -----------------------------------------------------------

async def cmd_categories() -> int:
    from notekeeper.display import format_categories

    session = await require_user()
    categories = await session.store.get_categories(session.user.id)
    print(format_categories(categories))
    return 0


async def cmd_category(args: list[str]) -> int:
    """Add or delete a category."""
    from notekeeper.notebook import create_category, remove_category

    if len(args) < 2 or args[0] not in ("add", "rm"):
        print("Usage: notekeeper category add|rm <name>", file=sys.stderr)
        return 1

    action, name = args[0], " ".join(args[1:])
    session = await require_user()

    if action == "add":
        category = await create_category(session.store, session.user, name)
        print(f"Added category: {category.name}")
    else:
        category = await remove_category(session.store, session.user, name)
        print(f"Deleted category: {category.name}")
    return 0


def main() -> int:
    """Main entry point."""
    from notekeeper.config import setup_logging

    args = sys.argv[1:]

    if not args:
        print_help()
        return 0

    first_arg, rest = args[0], args[1:]

    if first_arg in ("--help", "-h", "help"):
        print_help()
        return 0

    if first_arg in ("--version", "-v", "version"):
        print_version()
        return 0

    setup_logging()

    commands = {
        "register": lambda: cmd_register(rest),
        "login": lambda: cmd_login(rest),
        "logout": cmd_logout,
        "whoami": cmd_whoami,
        "account": lambda: cmd_account(rest),
        "passwd": cmd_passwd,
        "add": lambda: cmd_add(rest),
        "list": lambda: cmd_list(rest),
        "ls": lambda: cmd_list(rest),
        "show": lambda: cmd_show(rest),
        "edit": lambda: cmd_edit(rest),
        "rm": lambda: cmd_rm(rest),
        "stats": cmd_stats,
        "categories": cmd_categories,
        "category": lambda: cmd_category(rest),
    }

    if first_arg not in commands:
        print(f"Unknown command: {first_arg}. See notekeeper --help", file=sys.stderr)
        return 1

    return run(commands[first_arg]())


if __name__ == "__main__":
    sys.exit(main())
