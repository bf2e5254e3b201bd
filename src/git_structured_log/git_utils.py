"""Git access through the git command-line program."""

import subprocess
from collections.abc import Iterator
from pathlib import Path

from .commit_parser import parse_commit
from .common.env import env
from .common.logger import get_logger
from .errors import GitError, ResolutionError
from .models import Commit, ObjectId

logger = get_logger(__name__)


def _stderr_text(e: subprocess.CalledProcessError) -> str:
    return (e.stderr or b"").decode("utf-8", errors="replace").strip()


class CatFile:
    """
    Long-lived ``git cat-file --batch`` process for reading objects.

    One process serves every read in a run instead of one process per
    object. It is started on first use and restarted if it has exited.
    """

    def __init__(self, path: Path, git: str):
        self.path = path
        self.git = git
        self.proc: subprocess.Popen | None = None

    def _start(self) -> subprocess.Popen:
        cmd = [self.git, "cat-file", "--batch"]
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            return subprocess.Popen(
                cmd,
                cwd=self.path,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
            )
        except FileNotFoundError as e:
            raise GitError(f"cannot run {self.git} in {self.path}: {e.strerror}") from e

    def get(self, oid: ObjectId) -> tuple[bytes, bytes] | None:
        """
        Read one object.

        Returns:
            (type, data), or None if the object does not exist

        Raises:
            GitError: If the process dies or answers out of protocol
        """
        if self.proc is None or self.proc.poll() is not None:
            self.proc = self._start()

        try:
            self.proc.stdin.write(oid.hex().encode("ascii") + b"\n")
            self.proc.stdin.flush()
            header = self.proc.stdout.readline()
        except BrokenPipeError as e:
            raise GitError("git cat-file exited unexpectedly") from e

        # Format: <oid> <type> <size>, or <oid> missing
        fields = header.split()
        if len(fields) == 2 and fields[1] == b"missing":
            return None
        if len(fields) != 3 or not fields[2].isdigit():
            raise GitError(f"unexpected git cat-file header {header!r}")

        size = int(fields[2])
        data = self.proc.stdout.read(size)
        if len(data) != size or self.proc.stdout.read(1) != b"\n":
            raise GitError(f"short read from git cat-file for {oid.hex()}")
        return fields[1], data

    def close(self) -> None:
        self.proc, proc = None, self.proc
        if proc:
            try:
                proc.stdout.close()
            finally:
                proc.stdin.close()
            proc.wait()


class Repository:
    """
    Handle on a git repository.

    Methods run git in the repository directory and translate its output
    into identifiers, commits or names. Commit objects are read through
    one long-lived CatFile process; call close() when done.
    """

    def __init__(self, path: Path, git: str | None = None):
        self.path = path
        self.git = git or env.git_executable()
        self.objects = CatFile(path, self.git)
        self._short_hashes: dict[ObjectId, str] = {}

    @classmethod
    def open(cls, path: Path, git: str | None = None) -> "Repository":
        """
        Open the repository containing ``path``.

        Raises:
            ResolutionError: If ``path`` is not inside a git repository
        """
        if not path.is_dir():
            raise ResolutionError(f"could not find repository at '{path}'")

        repo = cls(path, git)
        try:
            repo._run(["rev-parse", "--git-dir"])
        except ResolutionError as e:
            raise ResolutionError(f"could not find repository at '{path}'") from e
        logger.info(f"Opened repository at {path}")
        return repo

    def _run(self, args: list[str], input: bytes | None = None) -> bytes:
        """
        Run a git command and return its raw standard output.

        Raises:
            ResolutionError: If git exits with a non-zero status
            GitError: If git cannot be started at all
        """
        cmd = [self.git, *args]
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=self.path,
                input=input,
                capture_output=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise GitError(f"cannot run {self.git} in {self.path}: {e.strerror}") from e
        except subprocess.CalledProcessError as e:
            raise ResolutionError(_stderr_text(e) or f"{' '.join(cmd)} failed") from e
        return result.stdout

    def walk(self, revision_range: str) -> Iterator[ObjectId]:
        """
        Yield the commits of ``revision_range`` lazily.

        Uses: git rev-list <range>

        Order is git's default, newest first, and no commit is yielded
        twice. The sequence cannot be resumed; call walk() again to restart.

        Raises:
            ResolutionError: If git cannot resolve the range
        """
        cmd = [self.git, "rev-list", "--end-of-options", revision_range]
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            proc = subprocess.Popen(
                cmd,
                cwd=self.path,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise GitError(f"cannot run {self.git} in {self.path}: {e.strerror}") from e

        with proc:
            for line in proc.stdout:
                yield bytes.fromhex(line.strip().decode("ascii"))

            stderr = proc.stderr.read()
            if proc.wait() != 0:
                message = stderr.decode("utf-8", errors="replace").strip()
                raise ResolutionError(message or f"cannot resolve range '{revision_range}'")

    def read_commit(self, oid: ObjectId) -> Commit:
        """
        Read and parse one commit object.

        Uses: the repository's long-lived git cat-file --batch process

        Raises:
            ResolutionError: If the object is missing or not a commit
        """
        found = self.objects.get(oid)
        if found is None:
            raise ResolutionError(f"commit {oid.hex()} not found")

        object_type, data = found
        if object_type != b"commit":
            kind = object_type.decode("ascii")
            raise ResolutionError(f"object {oid.hex()} is a {kind}, not a commit")
        return parse_commit(oid, data)

    def abbreviate(self, oids: list[ObjectId]) -> list[str]:
        """
        Shortest unambiguous prefixes for ``oids``, in the same order.

        Uses: git rev-parse --short <hash>, once per object not seen before

        ``--short`` accepts a single revision, so each object is resolved
        on its own. Results are kept for the rest of the run.

        Raises:
            GitError: If git's output cannot be used as a short hash
        """
        return [self._short_hash(oid) for oid in oids]

    def _short_hash(self, oid: ObjectId) -> str:
        if oid in self._short_hashes:
            return self._short_hashes[oid]

        try:
            out = self._run(["rev-parse", "--short", oid.hex()])
        except ResolutionError as e:
            raise GitError(f"git returned a bad shorthash: {e}") from e

        try:
            short_hash = out.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            raise GitError("git returned a bad shorthash") from e

        if not short_hash or not oid.hex().startswith(short_hash):
            raise GitError("git returned a bad shorthash")

        self._short_hashes[oid] = short_hash
        return short_hash

    def close(self) -> None:
        """Stop the object reader; the handle can still be reused afterwards."""
        self.objects.close()

    def references(self) -> list[bytes]:
        """
        Full names of every reference, in git's enumeration order.

        Uses: git for-each-ref --format=%(refname)

        Names are returned undecoded; refs are not required to be UTF-8.
        """
        out = self._run(["for-each-ref", "--format=%(refname)"])
        return [line for line in out.split(b"\n") if line]

    def peel_to_commits(self, refnames: list[bytes]) -> list[ObjectId]:
        """
        Resolve each reference to the commit it ultimately points at.

        Uses: git cat-file --batch-check, fed ``<refname>^{commit}`` lines

        Annotated tags are peeled until a commit is reached.

        Raises:
            ResolutionError: If a reference does not lead to a commit
        """
        if not refnames:
            return []

        request = b"".join(name + b"^{commit}\n" for name in refnames)
        out = self._run(["cat-file", "--batch-check=%(objectname) %(objecttype)"], input=request)

        targets = []
        for refname, line in zip(refnames, out.split(b"\n")):
            fields = line.split()
            if len(fields) != 2 or fields[1] != b"commit":
                name = refname.decode("utf-8", errors="replace")
                raise ResolutionError(f"reference '{name}' does not point at a commit")
            targets.append(bytes.fromhex(fields[0].decode("ascii")))

        if len(targets) != len(refnames):
            raise GitError("git cat-file returned fewer objects than requested")
        return targets
