import io
import sys

import pytest

from notekeeper import __version__
from notekeeper.cli import main, parse_options


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["notekeeper", *args])
    return main()


@pytest.fixture
def registered(isolated_home, monkeypatch, capsys):
    assert run_cli(monkeypatch, "register", "a@example.com", "alice", "--password", "secret") == 0
    capsys.readouterr()
    return isolated_home


def test_parse_options():
    values, positional = parse_options(
        ["--title", "T", "hello", "--asc", "world"],
        {"--title": "title"},
        {"--asc": "asc"},
    )
    assert values == {"title": "T", "asc": True}
    assert positional == ["hello", "world"]


def test_help_and_version(monkeypatch, capsys):
    assert run_cli(monkeypatch, "--help") == 0
    assert "notekeeper" in capsys.readouterr().out

    assert run_cli(monkeypatch, "--version") == 0
    assert __version__ in capsys.readouterr().out


def test_unknown_command(isolated_home, monkeypatch, capsys):
    assert run_cli(monkeypatch, "frobnicate") == 1
    assert "Unknown command" in capsys.readouterr().err


def test_commands_need_login(isolated_home, monkeypatch, capsys):
    assert run_cli(monkeypatch, "list") == 1
    assert "Not logged in" in capsys.readouterr().err


def test_register_and_whoami(registered, monkeypatch, capsys):
    assert run_cli(monkeypatch, "whoami") == 0
    assert "alice <a@example.com>" in capsys.readouterr().out
    assert (registered / "data" / "notekeeper.db").exists()


def test_register_duplicate(registered, monkeypatch, capsys):
    assert run_cli(monkeypatch, "register", "a@example.com", "bob", "--password", "x") == 1
    assert "Registration failed" in capsys.readouterr().err


def test_add_list_search(registered, monkeypatch, capsys):
    assert run_cli(monkeypatch, "add", "--category", "Personal", "Buy", "milk") == 0
    assert run_cli(monkeypatch, "add", "--category", "Work", "Write report") == 0
    capsys.readouterr()

    assert run_cli(monkeypatch, "list", "--search", "milk") == 0
    out = capsys.readouterr().out
    assert "Buy milk" in out
    assert "Write report" not in out

    assert run_cli(monkeypatch, "list", "--category", "Work") == 0
    out = capsys.readouterr().out
    assert "Write report" in out
    assert "Buy milk" not in out


def test_add_requires_content(registered, monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))
    assert run_cli(monkeypatch, "add") == 1
    assert "content is required" in capsys.readouterr().err


def test_edit_show_rm(registered, monkeypatch, capsys):
    run_cli(monkeypatch, "add", "hello")
    short = capsys.readouterr().out.split()[0]

    assert run_cli(monkeypatch, "edit", short, "--title", "Greeting") == 0
    assert run_cli(monkeypatch, "show", short) == 0
    out = capsys.readouterr().out
    assert "Greeting" in out
    assert "edited" in out

    assert run_cli(monkeypatch, "rm", short) == 0
    assert run_cli(monkeypatch, "show", short) == 1
    assert "not found" in capsys.readouterr().err


def test_categories(registered, monkeypatch, capsys):
    assert run_cli(monkeypatch, "category", "add", "Reading") == 0
    assert run_cli(monkeypatch, "category", "add", "reading") == 1
    assert "already exists" in capsys.readouterr().err

    assert run_cli(monkeypatch, "category", "rm", "Study") == 0
    capsys.readouterr()
    assert run_cli(monkeypatch, "categories") == 0
    out = capsys.readouterr().out
    assert "Reading" in out
    assert "Study" not in out


def test_logout_and_login(registered, monkeypatch, capsys):
    assert run_cli(monkeypatch, "logout") == 0
    assert run_cli(monkeypatch, "whoami") == 1

    assert run_cli(monkeypatch, "login", "a@example.com", "--password", "wrong") == 1
    assert "Invalid email or password" in capsys.readouterr().err
    assert run_cli(monkeypatch, "login", "a@example.com", "--password", "secret") == 0


def test_account_update(registered, monkeypatch, capsys):
    assert run_cli(monkeypatch, "account", "--username", "alicia") == 0
    assert "alicia <a@example.com>" in capsys.readouterr().out


def test_stats(registered, monkeypatch, capsys):
    run_cli(monkeypatch, "add", "--category", "Study", "flashcards")
    capsys.readouterr()

    assert run_cli(monkeypatch, "stats") == 0
    out = capsys.readouterr().out
    assert "Total notes: 1" in out
    assert "Study: 1" in out


def test_parse_options_rejects_missing_value():
    with pytest.raises(ValueError, match="Missing value for --title"):
        parse_options(["note", "--title"], {"--title": "title"})


def test_trailing_flag_is_not_filed_as_content(registered, monkeypatch, capsys):
    assert run_cli(monkeypatch, "add", "note", "--title") == 1
    assert "Missing value for --title" in capsys.readouterr().err

    run_cli(monkeypatch, "list")
    assert "No notes found" in capsys.readouterr().out
