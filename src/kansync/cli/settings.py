"""Handlers for 'kansync config' commands."""

from git import InvalidGitRepositoryError, NoSuchPathError

from kansync.cli._common import error, output_json
from kansync.config import KANSYNC_DEFAULTS, read_config, write_config_key


def config_get(args) -> int:
    """Show effective settings, or one of them."""
    config = read_config(args.repo)
    if args.key:
        key = args.key.replace("-", "_")
        if key not in config:
            error(f"Unknown setting '{args.key}'. Known: {', '.join(KANSYNC_DEFAULTS)}", args.json)
        config = {key: config[key]}
    if args.json:
        output_json(config)
    else:
        for key, value in config.items():
            print(f"{key.replace('_', '-')} = {value}")
    return 0


def config_set(args) -> int:
    """Write one setting to the repository's git config."""
    try:
        write_config_key(args.repo, args.key.replace("-", "_"), args.value)
    except KeyError:
        error(f"Unknown setting '{args.key}'. Known: {', '.join(KANSYNC_DEFAULTS)}", args.json)
    except ValueError as e:
        error(f"Bad value for {args.key}: {e}", args.json)
    except (InvalidGitRepositoryError, NoSuchPathError):
        error(f"{args.repo} is not a git repository", args.json)
    print(f"{args.key.replace('_', '-')} = {args.value}")
    return 0
