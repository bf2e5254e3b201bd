"""
Fixtures that build throwaway git repositories.

Commits are created with ``git commit-tree`` and fixed dates so hashes and
walk order are stable between runs.
"""

import os
import subprocess

import pytest

EMPTY_TREE_INPUT = b""


def _git(repo_path, *args, input=None, date=None) -> str:
    """Run git in ``repo_path`` and return stripped stdout."""
    env = dict(os.environ)
    if date is not None:
        env["GIT_AUTHOR_DATE"] = date
        env["GIT_COMMITTER_DATE"] = date

    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        input=input,
        capture_output=True,
        check=True,
        env=env,
    )
    return result.stdout.decode("utf-8").strip()


def _commit(repo_path, message, parents=(), date="1700000000 +0200") -> str:
    """Create a commit on the empty tree and return its full hash."""
    tree = _git(repo_path, "hash-object", "-t", "tree", "-w", "--stdin", input=EMPTY_TREE_INPUT)
    parent_args = [arg for parent in parents for arg in ("-p", parent)]
    return _git(repo_path, "commit-tree", tree, *parent_args, "-m", message, date=date)


@pytest.fixture
def git():
    """Run a git command: git(repo_path, *args, input=None, date=None) -> stdout."""
    return _git


@pytest.fixture
def git_commit():
    """Create an empty-tree commit: git_commit(repo_path, message, parents, date) -> hash."""
    return _commit


@pytest.fixture
def temp_git_repo(tmp_path):
    """
    Create a temporary git repository with proper git config.
    Returns the repo path.
    """
    repo_path = tmp_path / "test_repo"
    repo_path.mkdir()

    _git(repo_path, "init")
    _git(repo_path, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(repo_path, "config", "user.name", "Test User")
    _git(repo_path, "config", "user.email", "test@example.com")
    _git(repo_path, "config", "commit.gpgsign", "false")
    _git(repo_path, "config", "tag.gpgsign", "false")

    return repo_path


@pytest.fixture
def linear_repo(temp_git_repo):
    """
    Repository with history A (root) -> B -> C, main at C.

    Returns (repo_path, {"A": hash, "B": hash, "C": hash}).
    """
    a = _commit(temp_git_repo, "First commit", date="1700000000 +0200")
    b = _commit(temp_git_repo, "Second commit\n\nWith a body.", parents=[a], date="1700000100 +0200")
    c = _commit(temp_git_repo, "Third commit", parents=[b], date="1700000200 -0530")
    _git(temp_git_repo, "update-ref", "refs/heads/main", c)

    return temp_git_repo, {"A": a, "B": b, "C": c}


class FakeRepository:
    """In-memory stand-in for Repository used by unit tests."""

    def __init__(self, commits=(), refs=None):
        self.commits = {c.id: c for c in commits}
        self.order = [c.id for c in commits]
        self.refs = refs or {}
        self.references_listed = False

    def walk(self, revision_range):
        yield from self.order

    def read_commit(self, oid):
        return self.commits[oid]

    def abbreviate(self, oids):
        return [oid.hex()[:7] for oid in oids]

    def references(self):
        self.references_listed = True
        return list(self.refs)

    def peel_to_commits(self, refnames):
        return [self.refs[name] for name in refnames]


@pytest.fixture
def fake_repo_factory():
    """Build a FakeRepository from commits and a {refname: target} mapping."""
    return FakeRepository


@pytest.fixture
def make_commit():
    """
    Factory for Commit objects with sensible defaults.

    Identifiers are given as a single repeated hex byte, e.g. "0a".
    """
    from git_structured_log.models import Commit, Signature

    def _make(
        oid="c0",
        tree="7e",
        parents=(),
        name=b"Ada Lovelace",
        email=b"ada@example.com",
        author_time=(1700000000, 120),
        commit_time=(1700000100, 0),
        message=b"Subject line\n\nBody text.\n",
    ):
        return Commit(
            id=bytes.fromhex(oid * 20),
            tree_id=bytes.fromhex(tree * 20),
            parent_ids=tuple(bytes.fromhex(p * 20) for p in parents),
            author=Signature(name, email, *author_time),
            committer=Signature(b"Committer", b"c@example.com", *commit_time),
            message=message,
        )

    return _make
