"""Commit model and the git-backed commit source."""

import datetime
import logging
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

# Timeout constants (seconds)
TIMEOUT_FAST = 5       # Quick lookups (rev-parse)
TIMEOUT_DEFAULT = 30   # git log / rev-list

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)

# One record per commit, fields separated by unit separators
LOG_FORMAT = "%x1e%H%x1f%an%x1f%ae%x1f%cn%x1f%ce%x1f%ct%x1f%P%x1f%D%x1f%B"
_RECORD_SEPARATOR = "\x1e"
_FIELD_SEPARATOR = "\x1f"

TRAILER_PATTERN = re.compile(
    r"^(Co-authored-by|Reviewed-by|Signed-off-by|Committed-by):\s*(.+?)\s*<([^>]*)>\s*$",
    re.MULTILINE | re.IGNORECASE,
)


class CommitSourceError(Exception):
    """Reading commits from the repository failed."""


class RepositoryNotFoundError(CommitSourceError):
    """The requested repository does not exist."""

    def __init__(self, namespace: str, name: str):
        self.namespace = namespace
        self.name = name
        super().__init__(f"Repository not found: {namespace}/{name}")


@dataclass(frozen=True)
class Person:
    """Author or contributor of a commit."""

    name: str
    mail: str | None = None

    def __str__(self) -> str:
        if self.mail:
            return f"{self.name} <{self.mail}>"
        return self.name

    def to_dict(self) -> dict:
        return {"name": self.name, "mail": self.mail}


@dataclass(frozen=True)
class Contributor:
    """Additional person involved in a commit, e.g. a co-author."""

    type: str
    person: Person

    def to_dict(self) -> dict:
        return {"type": self.type, "person": self.person.to_dict()}


@dataclass(frozen=True)
class Commit:
    """A single commit. `date` is milliseconds since the epoch."""

    id: str
    date: int
    author: Person
    description: str
    parents: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    branches: tuple[str, ...] = ()
    contributors: tuple[Contributor, ...] = ()

    @property
    def committed_at(self) -> datetime.datetime:
        return _EPOCH + datetime.timedelta(milliseconds=self.date)

    @property
    def summary(self) -> str:
        return self.description.split("\n")[0]


@dataclass(frozen=True)
class Page:
    """A slice of history together with the total size known at fetch time."""

    commits: tuple[Commit, ...] = ()
    total: int = 0


class CommitSource(Protocol):
    """Anything that hands out pages of commits."""

    def fetch_page(self, start: int, limit: int) -> Page: ...


def _safe_int(value: str, default: int = 0) -> int:
    """Safely parse int from string."""
    try:
        return int(value.strip())
    except (ValueError, AttributeError):
        return default


def _parse_refs(decoration: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Split a `%D` decoration into tags and branch names."""
    tags = []
    branches = []
    for ref in (r.strip() for r in decoration.split(",")):
        if not ref or ref == "HEAD":
            continue
        if ref.startswith("tag: "):
            tags.append(ref[len("tag: "):])
        elif ref.startswith("HEAD -> "):
            branches.append(ref[len("HEAD -> "):])
        else:
            branches.append(ref)
    return tuple(tags), tuple(branches)


def _parse_contributors(body: str, author: Person, committer: Person) -> tuple[Contributor, ...]:
    contributors = [
        Contributor(match.group(1).capitalize(), Person(match.group(2), match.group(3) or None))
        for match in TRAILER_PATTERN.finditer(body)
    ]
    if committer != author and not any(c.type == "Committed-by" for c in contributors):
        contributors.append(Contributor("Committed-by", committer))
    return tuple(contributors)


def parse_log(output: str) -> list[Commit]:
    """Parse `git log` output written with LOG_FORMAT."""
    commits = []
    for record in output.split(_RECORD_SEPARATOR):
        if not record.strip():
            continue
        parts = record.split(_FIELD_SEPARATOR, 8)
        if len(parts) < 9:
            logger.warning(f"skipping malformed log record: {record[:80]!r}")
            continue
        commit_id, author_name, author_mail, committer_name, committer_mail, timestamp, parents, refs, body = parts
        author = Person(author_name, author_mail or None)
        committer = Person(committer_name, committer_mail or None)
        tags, branches = _parse_refs(refs)
        commits.append(
            Commit(
                id=commit_id,
                date=_safe_int(timestamp) * 1000,
                author=author,
                description=body.rstrip("\n"),
                parents=tuple(parents.split()),
                tags=tags,
                branches=branches,
                contributors=_parse_contributors(body, author, committer),
            )
        )
    return commits


class GitRepository:
    """A git repository below the configured repository root."""

    def __init__(self, namespace: str, name: str, path: Path):
        self.namespace = namespace
        self.name = name
        self.path = path

    def __repr__(self) -> str:
        return f"GitRepository({self.namespace}/{self.name})"

    def run_git(self, *args: str, timeout: int = TIMEOUT_DEFAULT) -> subprocess.CompletedProcess:
        """Run a git command, raising CommitSourceError on any failure."""
        try:
            return subprocess.run(
                ["git", *args],
                cwd=self.path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.error(f"timeout {timeout}s: git {args[0]}")
            raise CommitSourceError(f"git {args[0]} timed out after {timeout}s") from e
        except subprocess.CalledProcessError as e:
            raise CommitSourceError(f"git {args[0]} failed: {(e.stderr or '').strip()}") from e
        except OSError as e:
            raise CommitSourceError(f"could not run git: {e}") from e

    def resolve(self, revision: str) -> str | None:
        """Return the commit id a revision points to, or None if it does not exist."""
        if revision.startswith("-"):
            return None
        try:
            result = self.run_git(
                "rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}", timeout=TIMEOUT_FAST
            )
        except CommitSourceError:
            return None
        return result.stdout.strip() or None

    def has_commits(self) -> bool:
        return self.resolve("HEAD") is not None

    def log_command(self) -> "GitLogCommand":
        return GitLogCommand(self)


class GitLogCommand:
    """Configurable `git log` query, paged through `fetch_page`."""

    def __init__(self, repository: GitRepository):
        self.repository = repository
        self.start_changeset: str | None = None
        self.branch: str | None = None
        self.ancestor_changeset: str | None = None
        self.path: str | None = None

    def set_start_changeset(self, revision: str | None) -> "GitLogCommand":
        self.start_changeset = revision
        return self

    def set_branch(self, branch: str | None) -> "GitLogCommand":
        self.branch = branch
        return self

    def set_ancestor_changeset(self, revision: str | None) -> "GitLogCommand":
        self.ancestor_changeset = revision
        return self

    def set_path(self, path: str | None) -> "GitLogCommand":
        self.path = path
        return self

    def revision_range(self) -> str | None:
        """The revision expression to log, None for an empty repository."""
        start = self.start_changeset or self.branch
        if not start:
            if not self.repository.has_commits():
                return None
            start = "HEAD"
        if self.ancestor_changeset:
            return f"{self.ancestor_changeset}..{start}"
        return start

    def fetch_page(self, start: int, limit: int) -> Page:
        revision = self.revision_range()
        if revision is None:
            return Page((), 0)

        path_args = ["--", self.path] if self.path else ["--"]
        # caller supplied revisions must never be read as options
        total = _safe_int(
            self.repository.run_git("rev-list", "--count", "--end-of-options", revision, *path_args).stdout
        )
        if start >= total:
            return Page((), total)

        result = self.repository.run_git(
            "log",
            f"--format={LOG_FORMAT}",
            "--decorate-refs=refs/heads/",
            "--decorate-refs=refs/tags/",
            f"--skip={start}",
            f"--max-count={limit}",
            "--end-of-options",
            revision,
            *path_args,
        )
        commits = tuple(parse_log(result.stdout))
        logger.debug(f"fetched {len(commits)} commits of {total} from {self.repository} at {start}")
        return Page(commits, total)


@dataclass
class GitRepositoryManager:
    """Opens repositories laid out as `<root>/<namespace>/<name>`."""

    root: Path = field(default_factory=Path.cwd)

    def __post_init__(self):
        self.root = Path(self.root).expanduser()

    def open(self, namespace: str, name: str) -> GitRepository:
        path = (self.root / namespace / name).resolve()
        if not self._is_repository(path):
            raise RepositoryNotFoundError(namespace, name)
        return GitRepository(namespace, name, path)

    @staticmethod
    def _is_repository(path: Path) -> bool:
        if (path / ".git").exists():
            return True
        # bare repository
        return (path / "HEAD").is_file() and (path / "objects").is_dir()
