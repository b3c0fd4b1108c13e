"""Shared fixtures for CLI tests."""

from argparse import Namespace

import pytest
from git import Repo

OWNER = "alice@example.com"


@pytest.fixture
def empty_repo(tmp_path):
    """Create an empty git repo."""
    repo = Repo.init(tmp_path)
    (tmp_path / ".gitkeep").write_text("")
    repo.index.add([".gitkeep"])
    repo.index.commit("Initial commit")
    return tmp_path


@pytest.fixture
def cli_args(empty_repo):
    """Build handler args against a database inside the repo."""
    db = empty_repo / "board.db"

    def _args(**kwargs):
        defaults = {"repo": str(empty_repo), "db": str(db), "user": OWNER, "json": False}
        return Namespace(**{**defaults, **kwargs})

    return _args
