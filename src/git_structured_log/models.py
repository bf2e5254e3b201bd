"""Data models for commits read from a repository."""

import re
from dataclasses import dataclass, field

# Raw object identifier: 20 bytes for SHA-1 repositories, 32 for SHA-256
ObjectId = bytes

WHITESPACE_RUN = re.compile(rb"\s+")


@dataclass(frozen=True)
class Signature:
    """Author or committer identity with its timestamp.

    Name and email are kept as raw bytes; they are decoded only when a
    format code asks for them.
    """

    name: bytes
    email: bytes
    seconds: int
    offset_minutes: int


@dataclass(frozen=True)
class Commit:
    """A commit object as stored in the repository."""

    id: ObjectId
    tree_id: ObjectId
    author: Signature
    committer: Signature
    message: bytes
    parent_ids: tuple[ObjectId, ...] = field(default_factory=tuple)

    @property
    def summary(self) -> bytes:
        """
        First paragraph of the message on one line.

        Whitespace runs that span a line break become a single space;
        other runs, including indentation of the first line, are kept.
        Trailing whitespace is dropped.
        """
        paragraph = self.message.split(b"\n\n", 1)[0].rstrip()
        return WHITESPACE_RUN.sub(
            lambda m: b" " if b"\n" in m.group() else m.group(),
            paragraph,
        )
