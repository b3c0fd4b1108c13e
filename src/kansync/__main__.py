"""Entry point for kansync CLI."""

import sys


def main():
    from kansync.cli import build_parser
    from kansync.cli._common import error, load_settings

    parser = build_parser()
    args = parser.parse_args()

    # No subcommand = TUI mode
    if args.noun is None:
        from kansync.ui import KansyncApp

        settings = load_settings(args)
        if not settings["user"]:
            error("no user: pass --user or set git config user.email", args.json)
        app = KansyncApp(settings)
        app.run()
        return

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
