"""Handler for 'kansync web'."""

import shlex
import shutil
import sys
from pathlib import Path

from textual_serve.server import Server


def web(args) -> int:
    """Serve the board TUI in a browser."""
    repo_path = str(Path(args.repo).resolve())

    kansync = shutil.which("kansync")
    if kansync is None:
        print("error: kansync not found on PATH", file=sys.stderr)
        return 1

    parts = [kansync, "--repo", repo_path]
    if args.db:
        parts += ["--db", str(Path(args.db).resolve())]
    if args.user:
        parts += ["--user", args.user]
    server = Server(shlex.join(parts), host=args.host, port=args.port, title="kansync")

    print(f"serving {repo_path} at http://{args.host}:{args.port}")
    server.serve()
    return 0
