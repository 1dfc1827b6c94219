import argparse
import os

import cli
from logging_config import setup_logging

STRICT_ENV = "AUTOMATA_STRICT"


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Interactive DFA / regular grammar terminal"
    )
    parser.add_argument("file", nargs="?", help="Record file to load at start")
    parser.add_argument(
        "--log-level",
        default=None,
        help="DEBUG, INFO, WARNING or ERROR (default: $AUTOMATA_LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Write JSON logs to this directory (default: $AUTOMATA_LOG_DIR)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=env_flag(STRICT_ENV),
        help="Reject repeated (state, symbol) transitions instead of overwriting",
    )
    return parser


def run(argv=None):
    args = build_arg_parser().parse_args(argv)
    setup_logging(log_level=args.log_level, log_dir=args.log_dir)
    cli.main(args.file, strict=args.strict)


if __name__ == "__main__":
    run()
