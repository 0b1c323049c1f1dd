"""Shared fakes for the list_commits tests."""

import datetime
import os
import shutil
import subprocess
from pathlib import Path

import pytest

from scm_commit_mcp.commit_source import Commit, Page, Person, RepositoryNotFoundError

ARTHUR = Person("Arthur Dent", "dent@hog.org")
TRILLIAN = Person("Trillian McMillan", "trish@hog.org")


def make_commit(commit_id: str, when: str, author: Person, description: str, **kwargs) -> Commit:
    """Commit at an ISO-8601 instant like '1985-05-23T21:00:00Z'."""
    moment = datetime.datetime.fromisoformat(when.replace("Z", "+00:00"))
    return Commit(commit_id, int(moment.timestamp()) * 1000, author, description, **kwargs)


class FakeLogCommand:
    """In-memory log command serving slices of a commit list."""

    def __init__(self, commits, total: int | None = None):
        self.commits = list(commits)
        self.total = total
        self.calls = []
        self.start_changeset = None
        self.branch = None
        self.ancestor_changeset = None
        self.path = None

    def set_start_changeset(self, revision):
        self.start_changeset = revision
        return self

    def set_branch(self, branch):
        self.branch = branch
        return self

    def set_ancestor_changeset(self, revision):
        self.ancestor_changeset = revision
        return self

    def set_path(self, path):
        self.path = path
        return self

    def fetch_page(self, start: int, limit: int) -> Page:
        self.calls.append((start, limit))
        total = len(self.commits) if self.total is None else self.total
        return Page(tuple(self.commits[start:start + limit]), total)


class FakeRepository:
    namespace = "hitchhiker"
    name = "HeartOfGold"

    def __init__(self, log_command: FakeLogCommand, revisions: dict[str, str] | None = None):
        self._log_command = log_command
        self.revisions = revisions or {}

    def log_command(self) -> FakeLogCommand:
        return self._log_command

    def resolve(self, revision: str) -> str | None:
        return self.revisions.get(revision)


class FakeRepositoryManager:
    def __init__(self, repository: FakeRepository):
        self.repository = repository

    def open(self, namespace: str, name: str) -> FakeRepository:
        if (namespace, name) != (self.repository.namespace, self.repository.name):
            raise RepositoryNotFoundError(namespace, name)
        return self.repository


@pytest.fixture
def simple_commits():
    """Two commits, newest first."""
    commit1 = make_commit(
        "23",
        "1985-05-23T21:00:00Z",
        ARTHUR,
        "Escape from Earth\n\nJust followed some old friend of mine.\n",
        tags=("1.0",),
    )
    commit2 = make_commit(
        "42",
        "1985-06-01T16:00:00Z",
        TRILLIAN,
        "Fix improbability drive\n\nThe drive got stuck due to some depressed robot.\n",
        parents=("23",),
    )
    return [commit2, commit1]


@pytest.fixture
def many_commits():
    """99 commits by Arthur followed by one by Trillian."""
    commits = [
        make_commit(str(i), f"1985-05-23T21:{i // 60:02d}:{i % 60:02d}Z", ARTHUR, f"Commit nr. {i}")
        for i in range(1, 100)
    ]
    commits.append(make_commit("100", "1985-05-23T21:00:00Z", TRILLIAN, "Commit nr. 100"))
    return commits


def _git(repo_path: Path, *args: str, **env: str) -> str:
    result = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
        cwd=repo_path,
        capture_output=True,
        text=True,
        check=True,
        env={**os.environ, **env},
    )
    return result.stdout.strip()


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture
def repositories_root(tmp_path):
    """Repository root containing hitchhiker/HeartOfGold with three commits.

    History (newest first): "Add config" (HEAD of main, by Trillian with a
    co-author), "Add main.py", "Initial commit" (tagged v1.0).
    """
    repo_path = tmp_path / "hitchhiker" / "HeartOfGold"
    repo_path.mkdir(parents=True)

    _git(repo_path, "init")
    _git(repo_path, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(repo_path, "config", "user.email", "dent@hog.org")
    _git(repo_path, "config", "user.name", "Arthur Dent")

    dates = ["1985-05-23T21:00:00+00:00", "1985-05-24T21:00:00+00:00", "1985-06-01T16:00:00+00:00"]

    (repo_path / "README.md").write_text("# Heart of Gold")
    _git(repo_path, "add", ".")
    _git(repo_path, "commit", "-m", "Initial commit", GIT_AUTHOR_DATE=dates[0], GIT_COMMITTER_DATE=dates[0])
    _git(repo_path, "tag", "v1.0")

    (repo_path / "main.py").write_text("print('hello')")
    _git(repo_path, "add", ".")
    _git(repo_path, "commit", "-m", "Add main.py", GIT_AUTHOR_DATE=dates[1], GIT_COMMITTER_DATE=dates[1])

    (repo_path / "config.json").write_text('{"key": "value"}')
    _git(repo_path, "add", ".")
    _git(
        repo_path,
        "commit",
        "--author",
        "Trillian McMillan <trish@hog.org>",
        "-m",
        "Add config\n\nCo-authored-by: Ford Prefect <ford@hog.org>",
        GIT_AUTHOR_DATE=dates[2],
        GIT_COMMITTER_DATE=dates[2],
    )

    empty_path = tmp_path / "hitchhiker" / "Empty"
    empty_path.mkdir()
    _git(empty_path, "init")

    yield tmp_path


@pytest.fixture
def git_revision(repositories_root):
    """Resolve a revision of the HeartOfGold test repository."""
    repo_path = repositories_root / "hitchhiker" / "HeartOfGold"
    return lambda revision: _git(repo_path, "rev-parse", revision)
