"""The list_commits tool: filtered, paged commit history of a repository."""

import logging
from typing import Any, Callable, Sequence

from .commit_source import (
    Commit,
    CommitSource,
    CommitSourceError,
    GitRepository,
    GitRepositoryManager,
    RepositoryNotFoundError,
)
from .extensions import CompositeInput, FilterExtension
from .renderer import ResultRenderer, ToolResult, render_commit_log
from .schema import compose_input_schema, parse_composite_input
from .streamer import DEFAULT_CHUNK_SIZE, CommitStreamer, FilterResult
from .tools import LIST_COMMITS_DESCRIPTION, ListCommitsInput

logger = logging.getLogger(__name__)

NO_MATCHES_MESSAGE = "None of the commits match your input."
READ_ERROR_MESSAGE = (
    "Something went wrong reading the commits. Please check the namespace and the name of the repository."
)
DETAILS_INFO = (
    "Detailed metadata (complete commit message labeled as 'description', parents, and contributors) "
    "for each commit is available in the structured data block under their respective revisions."
)


def build_base_predicate(base_input: ListCommitsInput) -> Callable[[Commit], bool]:
    """AND of the author, message and time filters that are set."""
    checks: list[Callable[[Commit], bool]] = []

    if base_input.author_filter:
        author_filter = base_input.author_filter.lower()
        checks.append(lambda commit: author_filter in str(commit.author).lower())
    if base_input.commit_message_filter:
        message_filter = base_input.commit_message_filter.lower()
        checks.append(lambda commit: message_filter in commit.description.lower())
    if base_input.committed_before is not None:
        before = base_input.committed_before
        checks.append(lambda commit: commit.committed_at < before)
    if base_input.committed_after is not None:
        after = base_input.committed_after
        checks.append(lambda commit: commit.committed_at > after)

    return lambda commit: all(check(commit) for check in checks)


class ListCommitsTool:
    """
    Lists commits of a repository, filtered by the base input and all extensions.

    Extensions are consulted in the order given here, both for configuring
    the log command and for grafting their fields into the schema.
    """

    name = "list_commits"
    description = LIST_COMMITS_DESCRIPTION

    def __init__(
        self,
        repository_manager: GitRepositoryManager,
        extensions: Sequence[FilterExtension] = (),
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.repository_manager = repository_manager
        self.extensions = tuple(extensions)
        self.chunk_size = chunk_size

    def input_schema(self) -> dict:
        return compose_input_schema(ListCommitsInput, self.extensions)

    def parse(self, arguments: dict[str, Any]) -> CompositeInput:
        return parse_composite_input(arguments, ListCommitsInput, self.extensions)

    def execute(self, composite: CompositeInput) -> ToolResult:
        logger.debug(f"executing request {composite}")
        base_input: ListCommitsInput = composite.base_input

        try:
            repository = self.repository_manager.open(base_input.namespace, base_input.name)
            return self._list_commits(composite, repository)
        except RepositoryNotFoundError:
            logger.debug(f"repository {base_input.namespace}/{base_input.name} not found")
            return ToolResult.failure(f"Could not find repository '{base_input.namespace}/{base_input.name}'.")
        except CommitSourceError:
            logger.debug("got exception while executing request", exc_info=True)
            return ToolResult.failure(READ_ERROR_MESSAGE)

    def _list_commits(self, composite: CompositeInput, repository: GitRepository) -> ToolResult:
        base_input: ListCommitsInput = composite.base_input
        log_command = repository.log_command().set_start_changeset(base_input.revision)
        if base_input.revision:
            log_command.set_branch(base_input.revision)

        for extension in self.extensions:
            if error := extension.configure(repository, log_command, composite):
                logger.debug(f"extension {extension.namespace!r} rejected request: {error}")
                return ToolResult.failure(error)

        filter_result = self._apply_filters(composite, repository, log_command)
        logger.debug(f"found {len(filter_result.matches)} commits")

        if not filter_result.matches:
            return ResultRenderer.success(NO_MATCHES_MESSAGE).render()

        renderer = ResultRenderer.postponed()
        structured_content = None
        if base_input.include_details:
            renderer.with_info_text(DETAILS_INFO)
            structured_content = self._create_structured_content(composite, repository, filter_result)

        renderer.append(render_commit_log(filter_result.matches))

        found = len(filter_result.matches)
        if filter_result.exhausted:
            renderer.with_success(f"Found all {found} commits of {filter_result.overall_count} in total.")
        else:
            renderer.with_success(f"Found the first {found} commits of {filter_result.overall_count} in total.")
        return renderer.render(structured_content)

    def _apply_filters(
        self, composite: CompositeInput, repository: GitRepository, log_command: CommitSource
    ) -> FilterResult:
        base_predicate = build_base_predicate(composite.base_input)

        def predicate(commit: Commit) -> bool:
            return base_predicate(commit) and all(
                extension.include_commit(repository, commit, composite) for extension in self.extensions
            )

        streamer = CommitStreamer(log_command, self.chunk_size)
        return streamer.fetch_filtered(predicate, composite.base_input.limit)

    def _create_structured_content(
        self, composite: CompositeInput, repository: GitRepository, filter_result: FilterResult
    ) -> dict[str, dict]:
        structured_content = {}
        for commit in filter_result.matches:
            details: dict[str, Any] = {
                "author": commit.author.to_dict(),
                "description": commit.description,
                "contributors": [contributor.to_dict() for contributor in commit.contributors],
                "parents": list(commit.parents),
                "tags": list(commit.tags),
            }
            for extension in self.extensions:
                extension.enhance_structured_result(repository, commit, composite, details.__setitem__)
            structured_content[commit.id] = details
        return structured_content
