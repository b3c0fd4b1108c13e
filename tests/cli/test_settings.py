"""Tests for 'kansync config' commands."""

import json
from argparse import Namespace
from pathlib import Path

import pytest

from kansync.cli.settings import config_get, config_set


def test_config_get_defaults(empty_repo, capsys):
    args = Namespace(repo=str(empty_repo), json=True, key=None)
    assert config_get(args) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["note_delay_ms"] == 300
    assert Path(data["database"]).resolve() == (empty_repo / ".kansync.db").resolve()


def test_config_set_then_get(empty_repo, capsys):
    assert config_set(Namespace(repo=str(empty_repo), json=False, key="note-delay-ms", value="500")) == 0
    assert "note-delay-ms = 500" in capsys.readouterr().out

    assert config_get(Namespace(repo=str(empty_repo), json=False, key="note-delay-ms")) == 0
    assert capsys.readouterr().out.strip() == "note-delay-ms = 500"


def test_config_set_unknown_key(empty_repo, capsys):
    with pytest.raises(SystemExit, match="1"):
        config_set(Namespace(repo=str(empty_repo), json=False, key="colour", value="red"))
    assert "Unknown setting 'colour'" in capsys.readouterr().err


def test_config_set_bad_value(empty_repo, capsys):
    with pytest.raises(SystemExit, match="1"):
        config_set(Namespace(repo=str(empty_repo), json=False, key="drag-threshold", value="far"))
    assert "Bad value" in capsys.readouterr().err


def test_config_set_outside_repo(tmp_path, capsys):
    outside = tmp_path / "plain"
    outside.mkdir()
    with pytest.raises(SystemExit, match="1"):
        config_set(Namespace(repo=str(outside), json=False, key="user", value="me"))
    assert "not a git repository" in capsys.readouterr().err


def test_config_get_unknown_key(empty_repo, capsys):
    with pytest.raises(SystemExit, match="1"):
        config_get(Namespace(repo=str(empty_repo), json=False, key="colour"))
