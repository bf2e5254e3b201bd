"""
Format codes: which commit field each code selects and how it becomes JSON.

Codes follow git's ``--pretty=format`` placeholders without the ``%``.
Supported codes form the closed FormatCode enumeration; codes that git
knows but that cannot be reproduced faithfully (mailmaps, human dates,
decorations, notes, signatures) are rejected with a hint instead of being
approximated.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from .errors import EncodingError, GitError, UnsupportedFormatError
from .models import Commit, ObjectId, Signature
from .refs import ReferenceIndex


class FormatCode(str, Enum):
    """Format codes that produce a value."""

    HASH = "H"
    SHORT_HASH = "h"
    TREE = "T"
    SHORT_TREE = "t"
    PARENTS = "P"
    SHORT_PARENTS = "p"
    AUTHOR_NAME = "an"
    AUTHOR_EMAIL = "ae"
    AUTHOR_TIME = "at"
    AUTHOR_ISO = "aI"
    COMMIT_TIME = "ct"
    COMMIT_ISO = "cI"
    REF_NAMES = "D"
    SUMMARY = "s"
    MESSAGE = "B"


MAILMAP = "Mailmaps not currently supported, consider using `an`/`ae` instead of `aN`/`aE`"
AUTHOR_DATES = "Formatted dates not supported, use `aI` and format the date yourself"
COMMIT_DATES = "Formatted dates not supported, use `cI` and format the date yourself"

REJECTED_CODES: dict[str, str] = {
    "aN": MAILMAP,
    "aE": MAILMAP,
    "ad": AUTHOR_DATES,
    "aD": AUTHOR_DATES,
    "ar": AUTHOR_DATES,
    "ai": AUTHOR_DATES,
    "cd": COMMIT_DATES,
    "cD": COMMIT_DATES,
    "cr": COMMIT_DATES,
    "ci": COMMIT_DATES,
    "d": "Formatted ref names not supported, use `D` and format the names yourself",
    "b": "Body not supported, use `B` and extract the body yourself",
    "N": "Notes not currently supported",
    "GG": "Signatures not currently supported",
    "G?": "Signatures not currently supported",
    "GS": "Signatures not currently supported",
    "GK": "Signatures not currently supported",
}

UNKNOWN_CODE = "Not found"


def oid_to_hex(oid: ObjectId) -> str:
    """Lowercase hex, two zero-padded digits per byte, in byte order."""
    return "".join(f"{byte:02x}" for byte in oid)


def to_iso8601(seconds: int, offset_minutes: int) -> str:
    """
    Render a git timestamp in RFC 3339 form with its own UTC offset.

    e.g., (1700000000, 120) -> '2023-11-15T00:13:20+02:00'

    The stored offset is used, never the local one, and a zero offset is
    written as '+00:00'.
    """
    try:
        tz = timezone(timedelta(minutes=offset_minutes))
        return datetime.fromtimestamp(seconds, tz=tz).isoformat()
    except (ValueError, OverflowError, OSError) as e:
        raise GitError(f"timestamp {seconds} {offset_minutes:+d}min cannot be represented") from e


def decode_text(value: bytes, what: str) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(f"{what} contains invalid UTF8") from e


class FormatContext:
    """What a format code may look at for the commit being formatted."""

    def __init__(self, commit: Commit, repo, refs: ReferenceIndex):
        self.commit = commit
        self.repo = repo
        self.refs = refs

    def short(self, oid: ObjectId) -> str:
        return self.repo.abbreviate([oid])[0]


def _signature_iso(sig: Signature) -> str:
    return to_iso8601(sig.seconds, sig.offset_minutes)


HANDLERS: dict[FormatCode, Callable[[FormatContext], Any]] = {
    FormatCode.HASH: lambda ctx: oid_to_hex(ctx.commit.id),
    FormatCode.SHORT_HASH: lambda ctx: ctx.short(ctx.commit.id),
    FormatCode.TREE: lambda ctx: oid_to_hex(ctx.commit.tree_id),
    FormatCode.SHORT_TREE: lambda ctx: ctx.short(ctx.commit.tree_id),
    FormatCode.PARENTS: lambda ctx: [oid_to_hex(oid) for oid in ctx.commit.parent_ids],
    FormatCode.SHORT_PARENTS: lambda ctx: ctx.repo.abbreviate(list(ctx.commit.parent_ids)),
    FormatCode.AUTHOR_NAME: lambda ctx: decode_text(ctx.commit.author.name, "Author name"),
    FormatCode.AUTHOR_EMAIL: lambda ctx: decode_text(ctx.commit.author.email, "Author email"),
    FormatCode.AUTHOR_TIME: lambda ctx: ctx.commit.author.seconds,
    FormatCode.AUTHOR_ISO: lambda ctx: _signature_iso(ctx.commit.author),
    FormatCode.COMMIT_TIME: lambda ctx: ctx.commit.committer.seconds,
    FormatCode.COMMIT_ISO: lambda ctx: _signature_iso(ctx.commit.committer),
    FormatCode.REF_NAMES: lambda ctx: ctx.refs.take(ctx.commit.id),
    FormatCode.SUMMARY: lambda ctx: decode_text(ctx.commit.summary, "Commit header"),
    FormatCode.MESSAGE: lambda ctx: decode_text(ctx.commit.message, "Commit message"),
}


def parse_format_list(formats_input: str) -> list[str]:
    """
    Split the comma-separated format argument.

    Codes are taken literally: no whitespace trimming, duplicates kept.
    """
    return formats_input.split(",")


def needs_reference_index(codes: list[str]) -> bool:
    return FormatCode.REF_NAMES.value in codes


def interpret(code: str, ctx: FormatContext) -> Any:
    """
    Produce the JSON value for one format code.

    Args:
        code: Format code exactly as requested
        ctx: Commit being formatted plus its repository and reference index

    Returns:
        str, int or list[str], depending on the code

    Raises:
        UnsupportedFormatError: If the code is rejected or unknown
        EncodingError: If a requested text field is not valid UTF-8
        GitError: If a short hash cannot be produced
    """
    try:
        handler = HANDLERS[FormatCode(code)]
    except ValueError:
        raise UnsupportedFormatError(code, REJECTED_CODES.get(code, UNKNOWN_CODE)) from None
    return handler(ctx)
