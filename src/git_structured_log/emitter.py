"""Assemble one JSON object per commit and write it as a JSON Lines record."""

import json
from collections import Counter
from typing import Any, TextIO

from .common.logger import get_logger
from .formats import FormatContext, interpret, needs_reference_index
from .git_utils import Repository
from .models import Commit
from .refs import ReferenceIndex, build_reference_index

logger = get_logger(__name__)


def build_record(codes: list[str], ctx: FormatContext) -> dict[str, Any]:
    """
    Evaluate every requested code for one commit, in request order.

    A repeated code keeps the position of its first occurrence and the
    value of its last. The first failing code aborts the whole record.
    """
    record: dict[str, Any] = {}
    for code in codes:
        record[code] = interpret(code, ctx)
    return record


def format_record(record: dict[str, Any]) -> str:
    """Serialize a record as a single line of compact JSON."""
    return json.dumps(record, ensure_ascii=False, separators=(",", ":"))


def warn_duplicates(codes: list[str]) -> None:
    duplicates = [code for code, count in Counter(codes).items() if count > 1]
    if duplicates:
        logger.warning(
            f"Format codes requested more than once: {', '.join(duplicates)}; "
            "the last occurrence wins"
        )


def format_commit(codes: list[str], commit: Commit, repo, refs: ReferenceIndex) -> str:
    return format_record(build_record(codes, FormatContext(commit, repo, refs)))


def print_commits(
    repo: Repository,
    revision_range: str,
    codes: list[str],
    out: TextIO,
) -> int:
    """
    Write one record per commit of ``revision_range`` to ``out``.

    The reference index is only built when ``D`` is requested. Records
    already written stay written if a later commit fails.

    Returns:
        Number of records written
    """
    warn_duplicates(codes)

    refs = build_reference_index(repo) if needs_reference_index(codes) else ReferenceIndex()

    count = 0
    for oid in repo.walk(revision_range):
        commit = repo.read_commit(oid)
        out.write(format_commit(codes, commit, repo, refs) + "\n")
        count += 1

    logger.info(f"Wrote {count} records")
    return count
