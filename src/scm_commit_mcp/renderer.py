"""Text rendering of tool results."""

import datetime
from dataclasses import dataclass, field
from typing import Any, Iterable

from .commit_source import Commit

STATUS_SUCCESS = "SUCCESS"
DIVIDER = "-" * 57 + "\n"


@dataclass
class ToolResult:
    """Outcome of a tool call: text content plus optional structured data, or an error."""

    error: bool
    message: str | None = None
    content: list[str] = field(default_factory=list)
    structured_content: dict[str, Any] | None = None

    @classmethod
    def ok(cls, content: str | list[str], structured_content: dict[str, Any] | None = None) -> "ToolResult":
        if isinstance(content, str):
            content = [content]
        return cls(error=False, content=content, structured_content=structured_content)

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls(error=True, message=message)


class ResultRenderer:
    """
    Builds the text of a successful result.

    Layout:
        STATUS: [<status>] <status text>
        INFO: <info text>               (optional, at most once)
        ---------------------------------------------------------
        <body>

    In postponed mode the status line is added last, once it is known, but
    still rendered first.
    """

    def __init__(self, status: str | None = None, status_text: str | None = None):
        self._status_line = _status_line(status, status_text) if status is not None else None
        self._info_line: str | None = None
        self._body: list[str] = []

    @classmethod
    def success(cls, status_text: str) -> "ResultRenderer":
        return cls(STATUS_SUCCESS, status_text)

    @classmethod
    def postponed(cls) -> "ResultRenderer":
        return cls()

    def with_info_text(self, info_text: str) -> "ResultRenderer":
        if self._info_line is not None:
            raise RuntimeError("Info is already set")
        if self._body:
            raise RuntimeError("Result is already set")
        self._info_line = f"INFO: {info_text}\n"
        return self

    def append(self, part: Any) -> "ResultRenderer":
        self._body.append(str(part))
        return self

    def with_success(self, status_text: str) -> "ResultRenderer":
        return self.with_status(STATUS_SUCCESS, status_text)

    def with_status(self, status: str, status_text: str) -> "ResultRenderer":
        self._status_line = _status_line(status, status_text)
        return self

    def render(self, structured_content: dict[str, Any] | None = None) -> ToolResult:
        return ToolResult.ok(str(self), structured_content)

    def __str__(self) -> str:
        parts = [self._status_line or "", self._info_line or ""]
        if self._body:
            parts.append(DIVIDER)
            parts.extend(self._body)
        return "".join(parts)


def _status_line(status: str, status_text: str | None) -> str:
    return f"STATUS: [{status}] {status_text}\n"


def format_instant(moment: datetime.datetime) -> str:
    """ISO-8601 UTC with a Z suffix; milliseconds only when not zero."""
    moment = moment.astimezone(datetime.timezone.utc)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += f".{moment.microsecond // 1000:03d}"
    return text + "Z"


def format_header(commit: Commit) -> str:
    refs = [f"tag: {tag}" for tag in commit.tags] + list(commit.branches)
    if refs:
        return f"commit {commit.id} ({', '.join(refs)})"
    return f"commit {commit.id}"


def render_commit_log(commits: Iterable[Commit]) -> str:
    """Render commits like `git log` does, one block per commit."""
    blocks = []
    for commit in commits:
        blocks.append(
            f"{format_header(commit)}\n"
            f"Author: {commit.author}\n"
            f"Date: {format_instant(commit.committed_at)}\n"
            "\n"
            f"    {commit.summary}\n"
            "\n"
        )
    return "".join(blocks)
