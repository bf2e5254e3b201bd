"""Index of reference names by the commit they point at."""

from .common.logger import get_logger
from .models import ObjectId

logger = get_logger(__name__)

# Checked in order; the first matching prefix is stripped
SHORTHAND_PREFIXES = ("refs/heads/", "refs/tags/", "refs/remotes/", "refs/")


def shorthand(refname: bytes) -> str | None:
    """
    Display name for a full reference name.

    e.g., b'refs/heads/main' -> 'main'
    e.g., b'refs/remotes/origin/HEAD' -> 'origin/HEAD'

    Returns:
        Short name, or None if the name is not valid UTF-8
    """
    try:
        name = refname.decode("utf-8")
    except UnicodeDecodeError:
        return None

    for prefix in SHORTHAND_PREFIXES:
        if name.startswith(prefix):
            return name[len(prefix) :]
    return name


class ReferenceIndex:
    """
    Short reference names grouped by target commit.

    Names for a commit keep the order in which references were added.
    Entries are removed as they are read: a history walk visits each
    commit at most once, so nothing is lost and the index shrinks as the
    walk proceeds. Reading the same commit twice returns an empty list
    the second time.
    """

    def __init__(self):
        self._names: dict[ObjectId, list[str]] = {}

    def add(self, target: ObjectId, name: str) -> None:
        self._names.setdefault(target, []).append(name)

    def take(self, target: ObjectId) -> list[str]:
        """Remove and return the names pointing at ``target``."""
        return self._names.pop(target, [])

    def __len__(self) -> int:
        return len(self._names)


def build_reference_index(repo) -> ReferenceIndex:
    """
    Map every reference in ``repo`` to the commit it peels to.

    References whose short name cannot be determined are skipped.

    Args:
        repo: Repository providing references() and peel_to_commits()

    Returns:
        Populated index

    Raises:
        ResolutionError: If a reference does not lead to a commit
    """
    named: list[tuple[bytes, str]] = []
    for refname in repo.references():
        name = shorthand(refname)
        if name is None:
            logger.warning(f"Skipping reference with undecodable name {refname!r}")
            continue
        named.append((refname, name))

    index = ReferenceIndex()
    targets = repo.peel_to_commits([refname for refname, _ in named])
    for (_, name), target in zip(named, targets):
        index.add(target, name)

    logger.info(f"Indexed {len(named)} references across {len(index)} commits")
    return index
