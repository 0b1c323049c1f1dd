"""scm-commit-mcp - MCP server listing the commit history of repositories."""

__version__ = "0.1.0"

from .commit_source import (
    Commit,
    CommitSource,
    CommitSourceError,
    Contributor,
    GitLogCommand,
    GitRepository,
    GitRepositoryManager,
    Page,
    Person,
    RepositoryNotFoundError,
)
from .config import Config, RepositoryConfig, ServerConfig, get_config, reload_config
from .extensions import CompositeInput, FilterExtension
from .list_commits import ListCommitsTool
from .renderer import ResultRenderer, ToolResult, render_commit_log
from .schema import InputValidationError, merge_schemas, parse_composite_input
from .streamer import CommitStreamer, FilterResult

__all__ = [
    # Version
    "__version__",
    # Commit source
    "Commit",
    "CommitSource",
    "CommitSourceError",
    "Contributor",
    "GitLogCommand",
    "GitRepository",
    "GitRepositoryManager",
    "Page",
    "Person",
    "RepositoryNotFoundError",
    # Query engine
    "CommitStreamer",
    "FilterResult",
    "ListCommitsTool",
    # Extensions
    "CompositeInput",
    "FilterExtension",
    "InputValidationError",
    "merge_schemas",
    "parse_composite_input",
    # Rendering
    "ResultRenderer",
    "ToolResult",
    "render_commit_log",
    # Config
    "Config",
    "RepositoryConfig",
    "ServerConfig",
    "get_config",
    "reload_config",
]
