"""Extension point for the list_commits tool."""

from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import BaseModel

from .commit_source import Commit, GitLogCommand, GitRepository

Emit = Callable[[str, Any], None]


@dataclass
class CompositeInput:
    """Base input of a request plus the parsed input of each configured extension."""

    base_input: Any
    extension_inputs: dict[str, Any] = field(default_factory=dict)

    def extension_input(self, namespace: str) -> Any | None:
        return self.extension_inputs.get(namespace)

    def add_extension_input(self, namespace: str, extension_input: Any) -> None:
        self.extension_inputs[namespace] = extension_input


class FilterExtension:
    """
    Contributes fields, filters and result data to list_commits.

    Every capability is optional and does nothing by default. Extensions are
    shared between requests and must not keep per-request state; everything
    a call needs is passed in with the CompositeInput.
    """

    #: Prefix of this extension's fields in the tool schema, e.g. "range" -> "range_since"
    namespace: str = ""

    #: Model with the fields this extension accepts, None if it takes no input
    input_model: type[BaseModel] | None = None

    def include_commit(self, repository: GitRepository, commit: Commit, composite: CompositeInput) -> bool:
        """Whether the commit belongs in the result. Called for every examined commit."""
        return True

    def configure(
        self, repository: GitRepository, log_command: GitLogCommand, composite: CompositeInput
    ) -> str | None:
        """
        Adjust the log command before any commit is read.

        Returns:
            An error message if the request cannot be processed, else None
        """
        return None

    def enhance_structured_result(
        self, repository: GitRepository, commit: Commit, composite: CompositeInput, emit: Emit
    ) -> None:
        """Add entries to the detail record of a commit by calling emit(key, value)."""

    def get_extension_input(self, composite: CompositeInput) -> BaseModel | None:
        """This extension's input from the request, None if absent or of a foreign type."""
        if self.input_model is None:
            return None
        extension_input = composite.extension_input(self.namespace)
        if isinstance(extension_input, self.input_model):
            return extension_input
        return None
