"""Extensions shipped with the server."""

from pathlib import PurePosixPath

from pydantic import BaseModel, Field

from .commit_source import Commit, GitLogCommand, GitRepository
from .extensions import CompositeInput, Emit, FilterExtension


class RangeInput(BaseModel):
    """Input for the range extension."""

    since: str | None = Field(
        default=None,
        description="Only list commits that are not reachable from this revision, "
        "like `git log <since>..<revision>`.",
    )


class PathInput(BaseModel):
    """Input for the path extension."""

    path: str | None = Field(
        default=None,
        description="Only list commits touching this file or directory (relative to the repository root).",
    )


class MergesInput(BaseModel):
    """Input for the merges extension."""

    exclude: bool = Field(default=False, description="If set to true, merge commits are left out.")


class RangeExtension(FilterExtension):
    """Restricts the history to commits after a given revision."""

    namespace = "range"
    input_model = RangeInput

    def configure(
        self, repository: GitRepository, log_command: GitLogCommand, composite: CompositeInput
    ) -> str | None:
        range_input = self.get_extension_input(composite)
        if range_input is None or not range_input.since:
            return None
        if repository.resolve(range_input.since) is None:
            return f"Could not find revision '{range_input.since}' in repository {repository.namespace}/{repository.name}."
        log_command.set_ancestor_changeset(range_input.since)
        return None


class PathExtension(FilterExtension):
    """Restricts the history to commits touching a path."""

    namespace = "path"
    input_model = PathInput

    def configure(
        self, repository: GitRepository, log_command: GitLogCommand, composite: CompositeInput
    ) -> str | None:
        path_input = self.get_extension_input(composite)
        if path_input is None or not path_input.path:
            return None
        path = PurePosixPath(path_input.path)
        if path.is_absolute() or ".." in path.parts:
            return f"The path '{path_input.path}' has to be relative to the repository root."
        log_command.set_path(str(path))
        return None


class MergeCommitExtension(FilterExtension):
    """Marks merge commits in the details and optionally filters them out."""

    namespace = "merges"
    input_model = MergesInput

    def include_commit(self, repository: GitRepository, commit: Commit, composite: CompositeInput) -> bool:
        merges_input = self.get_extension_input(composite)
        if merges_input is None or not merges_input.exclude:
            return True
        return len(commit.parents) < 2

    def enhance_structured_result(
        self, repository: GitRepository, commit: Commit, composite: CompositeInput, emit: Emit
    ) -> None:
        emit("merge", len(commit.parents) > 1)


def default_extensions() -> tuple[FilterExtension, ...]:
    """Extensions registered at startup, in registration order."""
    return (RangeExtension(), PathExtension(), MergeCommitExtension())
