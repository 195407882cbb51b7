"""Tool dispatch layer.

This module:
- builds the runtime (config + logger) from the host environment
- resolves the GitHub token and validates arguments for every call
- runs the matching documentation/issues operation
- renders every outcome, success or failure, as text content blocks

A tool call never raises: failures come back as a single
"Error handling <tool>: <message>" block.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from mcp.types import TextContent

from .config import ServerConfig, load_config_from_env
from .credentials import resolve_github_token
from .docs import TerragruntDocs
from .errors import SafeError, tool_error_text
from .github_client import GitHubClient
from .issues import GitHubIssue, TerragruntIssues
from .logs import build_logger
from .safety import redact_arguments
from .schemas import (
    GET_ALL_OPEN_ISSUES,
    LIST_ALL_DOCS_BY_CATEGORY,
    LIST_DOC_CATEGORIES,
    READ_ALL_DOCS_FROM_CATEGORY,
    READ_DOCUMENT_FROM_CATEGORY,
    TOOL_METADATA,
    CategoryArgs,
    DocumentArgs,
    NoArgs,
    OpenIssuesArgs,
    ValidatedArgs,
    validate_tool_arguments,
)

logger = logging.getLogger(__name__)

NO_CATEGORIES_TEXT = "No documentation categories found."
NO_ISSUES_TEXT = "No open issues found."


@dataclass(frozen=True, slots=True)
class Runtime:
    """Per-server dependencies shared across tool calls.

    Nothing here is mutable: each call resolves its own token and builds its own clients.
    """

    config: ServerConfig
    log: logging.Logger
    # None means "read os.environ at call time".
    environ: Mapping[str, str] | None = None
    transport: httpx.AsyncBaseTransport | None = None
    github_factory: Callable[[str], GitHubClient] | None = None

    def github_client(self, token: str) -> GitHubClient:
        if self.github_factory is not None:
            return self.github_factory(token)
        return GitHubClient(
            token=token,
            limits=self.config.limits,
            api_base_url=self.config.repo.api_base_url,
            transport=self.transport,
            log=self.log,
        )

    def docs(self, github: GitHubClient) -> TerragruntDocs:
        return TerragruntDocs(
            github=github,
            owner=self.config.repo.owner,
            repo=self.config.repo.repo,
            docs_path=self.config.repo.docs_path,
            log=self.log,
        )

    def issues(self, github: GitHubClient) -> TerragruntIssues:
        return TerragruntIssues(
            github=github,
            owner=self.config.repo.owner,
            repo=self.config.repo.repo,
            per_page=self.config.limits.issues_per_page,
            max_pages=self.config.limits.issues_max_pages,
            log=self.log,
        )


_RUNTIME: Runtime | None = None


def initialize_runtime_from_env() -> Runtime:
    """Initialize and cache runtime from environment.

    Called at server startup (fail-fast), and can also be used lazily.
    """
    global _RUNTIME  # pylint: disable=global-statement
    if _RUNTIME is not None:
        return _RUNTIME

    config = load_config_from_env()
    _RUNTIME = Runtime(config=config, log=build_logger(config.logging))
    return _RUNTIME


def _text(text: str) -> TextContent:
    return TextContent(type="text", text=text)


async def _tool_list_doc_categories(runtime: Runtime, github: GitHubClient, _args: NoArgs) -> list[TextContent]:
    categories = await runtime.docs(github).get_doc_categories()
    if not categories:
        return [_text(NO_CATEGORIES_TEXT)]
    return [_text(f"{c.name}: {c.html_url}") for c in categories]


async def _tool_list_all_docs_by_category(
    runtime: Runtime, github: GitHubClient, args: CategoryArgs
) -> list[TextContent]:
    docs = await runtime.docs(github).list_documents_in_category(args.category)
    if not docs:
        return [_text(f'No documents found in category "{args.category}"')]
    return [_text(f"{d.name}: {d.html_url}") for d in docs]


async def _tool_read_document_from_category(
    runtime: Runtime, github: GitHubClient, args: DocumentArgs
) -> list[TextContent]:
    doc = await runtime.docs(github).get_document_from_category(args.category, args.document)
    return [_text(doc.content)]


async def _tool_read_all_docs_from_category(
    runtime: Runtime, github: GitHubClient, args: CategoryArgs
) -> list[TextContent]:
    merged = await runtime.docs(github).get_all_documents_merged_from_category(args.category)
    return [_text(merged)]


def format_issues(issues: list[GitHubIssue]) -> str:
    formatted = "\n".join(f"#{issue.number}: {issue.title}" for issue in issues)
    return formatted or NO_ISSUES_TEXT


async def _tool_get_all_open_issues(
    runtime: Runtime, github: GitHubClient, args: OpenIssuesArgs
) -> list[TextContent]:
    client = runtime.issues(github)
    issues = await client.get_all_open_issues() if args.all else await client.get_open_issues()
    return [_text(format_issues(issues))]


ToolFunc = Callable[[Runtime, GitHubClient, Any], Awaitable[list[TextContent]]]

_TOOL_FUNCS: dict[str, ToolFunc] = {
    LIST_DOC_CATEGORIES: _tool_list_doc_categories,
    LIST_ALL_DOCS_BY_CATEGORY: _tool_list_all_docs_by_category,
    READ_DOCUMENT_FROM_CATEGORY: _tool_read_document_from_category,
    READ_ALL_DOCS_FROM_CATEGORY: _tool_read_all_docs_from_category,
    GET_ALL_OPEN_ISSUES: _tool_get_all_open_issues,
}


async def dispatch_tool(
    name: str,
    arguments: dict[str, Any] | None,
    runtime: Runtime | None = None,
) -> list[TextContent]:
    """Dispatch a tool call.

    Steps run in order and stop at the first failure: tool lookup, token
    resolution, argument validation, the remote call, formatting.
    Always returns at least one text block.
    """
    if name not in TOOL_METADATA or name not in _TOOL_FUNCS:
        (runtime.log if runtime is not None else logger).warning("Unknown tool requested: %s", name)
        return [_text(f"Unknown tool: {name}")]

    log = logger
    try:
        if runtime is None:
            runtime = initialize_runtime_from_env()
        log = runtime.log

        if isinstance(arguments, dict):
            log.debug("Tool %s called with %s", name, redact_arguments(arguments))

        token = resolve_github_token(runtime.environ)
        args: ValidatedArgs = validate_tool_arguments(name, arguments)

        github = runtime.github_client(token)
        result = await _TOOL_FUNCS[name](runtime, github, args)
        log.info("Tool %s succeeded (%s content blocks)", name, len(result))
        return result

    except SafeError as err:
        log.warning("Tool %s failed: [%s] %s", name, err.code, err.message)
        return [_text(tool_error_text(name, err))]
    except Exception as exc:  # pylint: disable=broad-exception-caught
        log.exception("Tool %s failed unexpectedly", name)
        return [_text(tool_error_text(name, exc))]
