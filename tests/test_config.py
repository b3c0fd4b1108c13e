"""Tests for git-config backed settings."""

from pathlib import Path

import pytest
from git import Repo

from kansync.config import KANSYNC_DEFAULTS, is_git_repo, read_config, write_config_key


@pytest.fixture
def temp_repo(tmp_path):
    """Create a temporary git repository."""
    repo_path = tmp_path / "repo"
    repo_path.mkdir()
    repo = Repo.init(repo_path)
    # Create an initial commit so the repo is valid
    (repo_path / "README.md").write_text("# Test")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    return repo_path


def test_is_git_repo(temp_repo, tmp_path):
    assert is_git_repo(temp_repo)
    plain = tmp_path / "plain"
    plain.mkdir()
    assert not is_git_repo(plain)


def test_read_config_defaults(temp_repo):
    config = read_config(temp_repo)
    assert config["drag_threshold"] == KANSYNC_DEFAULTS["drag-threshold"]
    assert config["poll_interval_ms"] == 200
    assert Path(config["database"]).resolve() == (temp_repo / ".kansync.db").resolve()


def test_read_config_from_subdirectory(temp_repo):
    sub = temp_repo / "src"
    sub.mkdir()
    config = read_config(sub)
    assert Path(config["database"]).resolve() == (temp_repo / ".kansync.db").resolve()


def test_write_and_read_typed_values(temp_repo):
    write_config_key(temp_repo, "note_delay_ms", "750")
    write_config_key(temp_repo, "database", "/var/lib/kansync/board.db")

    config = read_config(temp_repo)
    assert config["note_delay_ms"] == 750
    assert config["database"] == "/var/lib/kansync/board.db"


def test_user_falls_back_to_email(temp_repo):
    repo = Repo(temp_repo)
    with repo.config_writer("repository") as writer:
        writer.set_value("user", "email", "alice@example.com")
    assert read_config(temp_repo)["user"] == "alice@example.com"

    write_config_key(temp_repo, "user", "board-bot")
    assert read_config(temp_repo)["user"] == "board-bot"


def test_write_unknown_key(temp_repo):
    with pytest.raises(KeyError):
        write_config_key(temp_repo, "colour", "red")


def test_write_bad_int(temp_repo):
    with pytest.raises(ValueError):
        write_config_key(temp_repo, "drag_threshold", "far")
