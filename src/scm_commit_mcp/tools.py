"""Input model of the list_commits tool."""

import datetime

from pydantic import BaseModel, Field, field_validator

# Letters, digits, '.', '-' and '_', not starting with a dot
REPOSITORY_NAMESPACE_REGEX = r"^[A-Za-z0-9][A-Za-z0-9._-]*$"
REPOSITORY_NAME_REGEX = REPOSITORY_NAMESPACE_REGEX

DEFAULT_LIMIT = 20


class ListCommitsInput(BaseModel):
    """Input for list_commits tool."""

    namespace: str = Field(
        min_length=1,
        pattern=REPOSITORY_NAMESPACE_REGEX,
        description="The namespace of the repository",
    )
    name: str = Field(
        min_length=1,
        pattern=REPOSITORY_NAME_REGEX,
        description="The name of the repository",
    )
    revision: str | None = Field(
        default=None,
        description="The revision to list the commits for. This can be either a 'real' revision, "
        "a branch, or a tag.\nIf this is omitted, the default branch of the repository will be taken.",
    )
    commit_message_filter: str | None = Field(
        default=None,
        description="Filter for commits that contain this string in the commit message. "
        "This filter is case insensitive.",
    )
    author_filter: str | None = Field(
        default=None,
        description="Filter for commits whose author contains this string. This filter is case insensitive.",
    )
    committed_before: datetime.datetime | None = Field(
        default=None,
        description="Filter for commits committed before this timestamp "
        "(ISO 8601 format, e.g. 2024-01-01T10:00:00Z).",
    )
    committed_after: datetime.datetime | None = Field(
        default=None,
        description="Filter for commits committed after this timestamp "
        "(ISO 8601 format, e.g. 2024-01-01T10:00:00Z).",
    )
    include_details: bool = Field(
        default=False,
        description="If set to `true`, details for the commits will be sent as structured data.\n"
        "If `false`, only the commit log like `git log` would produce will be returned.",
    )
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, description="The maximum number of commits to read.")

    @field_validator("name")
    @classmethod
    def _no_git_suffix(cls, value: str) -> str:
        if value.endswith(".git"):
            raise ValueError("must not end with '.git'")
        return value

    @field_validator("revision")
    @classmethod
    def _no_option_revision(cls, value: str | None) -> str | None:
        if value is not None and value.startswith("-"):
            raise ValueError("must not start with '-'")
        return value

    @field_validator("committed_before", "committed_after")
    @classmethod
    def _assume_utc(cls, value: datetime.datetime | None) -> datetime.datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value


LIST_COMMITS_DESCRIPTION = """List commits for a revision of a repository, newest first.

Works like `git log`: every commit is shown with its id, tags and branches,
author, date and the first line of its message.

Filters for author, commit message and commit time can be combined; `limit`
caps the number of returned commits. The status line tells whether all
matching commits were found or only the first ones.

Set include_details=true to get the complete message, parents, tags and
contributors of each commit as structured data."""
