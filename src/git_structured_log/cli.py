#!/usr/bin/env python3
"""CLI interface for git-structured-log."""

import argparse
import os
import sys

from .common.env import env
from .common.logger import setup_logging
from .emitter import print_commits
from .errors import StructuredLogError
from .formats import parse_format_list
from .git_utils import Repository

USAGE = (
    "git-structured-log <exclusive start of range>..<inclusive end of range> "
    "<comma-separated list of format flags>"
)


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="git-structured-log",
        usage=USAGE,
        add_help=False,
        description="Print one JSON object per commit in a revision range.",
    )
    parser.add_argument(
        "revision_range",
        help="Range to walk, e.g. v1.0..HEAD",
    )
    parser.add_argument(
        "formats",
        help="Comma-separated format codes, e.g. H,an,aI,s",
    )
    return parser


def run(revision_range: str, formats_input: str) -> int:
    """Format the history of the configured repository to stdout.

    Returns:
        Exit code (0 for success, 1 for errors)
    """
    repo = None
    try:
        repo = Repository.open(env.repository_path())
        print_commits(repo, revision_range, parse_format_list(formats_input), sys.stdout)
        sys.stdout.flush()
    except StructuredLogError as e:
        print(f"fatal: {e}", file=sys.stderr)
        return 1
    except BrokenPipeError:
        # Reader went away; point stdout at devnull so the final flush succeeds
        os.dup2(os.open(os.devnull, os.O_WRONLY), sys.stdout.fileno())
        return 1
    finally:
        if repo is not None:
            repo.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)
    setup_logging()
    return run(args.revision_range, args.formats)


if __name__ == "__main__":
    sys.exit(main())
