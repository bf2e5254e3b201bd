"""Parse raw commit objects as printed by ``git cat-file commit``."""

from .errors import GitError
from .models import Commit, ObjectId, Signature


def parse_signature(line: bytes) -> Signature:
    """
    Parse an author or committer header value.

    Format: ``Name <email> <seconds> <+|-HHMM>``

    Args:
        line: Header value without the ``author ``/``committer `` prefix

    Returns:
        Signature with name and email left as bytes

    Raises:
        ValueError: If the line does not follow the format above
    """
    email_start = line.rfind(b"<")
    email_end = line.find(b">", email_start)
    if email_start < 0 or email_end < 0:
        raise ValueError(f"signature without email: {line!r}")

    name = line[:email_start].strip()
    email = line[email_start + 1 : email_end]

    # Format: <seconds> <+|-HHMM>
    seconds, offset = line[email_end + 1 :].split()
    sign = -1 if offset.startswith(b"-") else 1
    digits = offset.lstrip(b"+-")
    if len(digits) != 4 or not digits.isdigit():
        raise ValueError(f"bad timezone offset: {offset!r}")
    offset_minutes = sign * (int(digits[:2]) * 60 + int(digits[2:]))

    return Signature(
        name=name,
        email=email,
        seconds=int(seconds),
        offset_minutes=offset_minutes,
    )


def parse_commit(oid: ObjectId, raw: bytes) -> Commit:
    """
    Build a Commit from the raw object body.

    Headers run until the first empty line; everything after it is the
    message. Headers we do not use (encoding, gpgsig, mergetag, ...) are
    skipped along with their space-prefixed continuation lines.

    Args:
        oid: Identifier the object was read under
        raw: Object body

    Returns:
        Parsed commit

    Raises:
        GitError: If a required header is missing or malformed
    """
    header, _, message = raw.partition(b"\n\n")

    tree_id = None
    parent_ids: list[ObjectId] = []
    author = None
    committer = None

    try:
        for line in header.split(b"\n"):
            if line.startswith(b" "):
                continue

            key, _, value = line.partition(b" ")
            if key == b"tree":
                tree_id = bytes.fromhex(value.decode("ascii"))
            elif key == b"parent":
                parent_ids.append(bytes.fromhex(value.decode("ascii")))
            elif key == b"author":
                author = parse_signature(value)
            elif key == b"committer":
                committer = parse_signature(value)
    except ValueError as e:
        raise GitError(f"malformed commit object {oid.hex()}: {e}") from e

    if tree_id is None or author is None or committer is None:
        raise GitError(f"malformed commit object {oid.hex()}")

    return Commit(
        id=oid,
        tree_id=tree_id,
        author=author,
        committer=committer,
        message=message.lstrip(b"\n"),
        parent_ids=tuple(parent_ids),
    )
