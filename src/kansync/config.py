"""Settings stored in git config under a ``[kansync]`` section."""

from pathlib import Path
from typing import Any

from git import GitConfigParser, InvalidGitRepositoryError, NoSuchPathError, Repo

SECTION = "kansync"

KANSYNC_DEFAULTS = {
    "database": ".kansync.db",
    "user": "",
    "note-delay-ms": 300,
    "drag-threshold": 5,
    "poll-interval-ms": 200,
}


def _python_key(git_key: str) -> str:
    """Convert git-style key (hyphenated) to Python-style (underscored)."""
    return git_key.replace("-", "_")


def _git_key(python_key: str) -> str:
    """Convert Python-style key (underscored) to git-style (hyphenated)."""
    return python_key.replace("_", "-")


def _coerce(git_key: str, raw: Any):
    """Type-coerce a kansync value using its default."""
    default = KANSYNC_DEFAULTS.get(git_key)
    if default is None or isinstance(default, str):
        return str(raw)
    if isinstance(default, bool):
        return str(raw).lower() in ("true", "yes", "1")
    if isinstance(default, int):
        return int(raw)
    return raw


def _reader(path: str | Path) -> GitConfigParser:
    """Repository config (with global/system) or, outside a repo, global only."""
    try:
        return Repo(path, search_parent_directories=True).config_reader()
    except (InvalidGitRepositoryError, NoSuchPathError):
        return GitConfigParser(str(Path("~/.gitconfig").expanduser()), read_only=True)


def is_git_repo(path: str | Path) -> bool:
    """Check if path is inside a git repository."""
    try:
        Repo(path, search_parent_directories=True)
        return True
    except (InvalidGitRepositoryError, NoSuchPathError):
        return False


def read_config(path: str | Path = ".") -> dict[str, Any]:
    """Read kansync settings with defaults applied, as python-style keys.

    ``user`` falls back to git's ``user.email``. A relative ``database``
    is resolved against the repository working tree (or ``path``).
    """
    reader = _reader(path)
    config = {_python_key(k): v for k, v in KANSYNC_DEFAULTS.items()}
    if reader.has_section(SECTION):
        for git_k, raw in reader.items(SECTION):
            config[_python_key(git_k)] = _coerce(git_k, raw)
    if not config["user"]:
        config["user"] = reader.get_value("user", "email", "") if reader.has_section("user") else ""

    base = Path(path).resolve()
    if is_git_repo(path):
        base = Path(Repo(path, search_parent_directories=True).working_tree_dir)
    database = Path(config["database"]).expanduser()
    config["database"] = str(database if database.is_absolute() else base / database)
    return config


def write_config_key(path: str | Path, key: str, value) -> None:
    """Write one kansync key to the repository's git config. key is python-style."""
    git_k = _git_key(key)
    if git_k not in KANSYNC_DEFAULTS:
        raise KeyError(key)
    repo = Repo(path, search_parent_directories=True)
    writer = repo.config_writer("repository")
    try:
        if isinstance(value, bool):
            writer.set_value(SECTION, git_k, str(value).lower())
        else:
            writer.set_value(SECTION, git_k, str(_coerce(git_k, value)))
    finally:
        writer.release()
