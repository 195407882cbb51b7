"""Dispatcher success paths and text formatting."""

from __future__ import annotations

import base64
import logging
from typing import Any

import pytest
import terragrunt_docs_mcp.tools as tools
from terragrunt_docs_mcp.config import LimitsConfig, ServerConfig
from terragrunt_docs_mcp.issues import GitHubIssue

TOKEN = "ghp_" + "a" * 36
CONTENTS = "/repos/gruntwork-io/terragrunt/contents/docs/_docs"
ISSUES = "/repos/gruntwork-io/terragrunt/issues"
HTML = "https://github.com/gruntwork-io/terragrunt"


def _encoded(text: str) -> dict[str, Any]:
    return {"type": "file", "encoding": "base64", "content": base64.b64encode(text.encode()).decode()}


def _issue(number: int, **extra: Any) -> dict[str, Any]:
    return {"number": number, "title": f"Issue {number}", "state": "open", **extra}


ROUTES: dict[tuple[str, str], Any] = {
    ("GET", CONTENTS): [
        {"type": "dir", "name": "01_getting-started", "path": "docs/_docs/01_getting-started",
         "html_url": f"{HTML}/tree/main/docs/_docs/01_getting-started"},
        {"type": "dir", "name": "cli", "path": "docs/_docs/cli", "html_url": f"{HTML}/tree/main/docs/_docs/cli"},
        {"type": "dir", "name": "06_empty", "path": "docs/_docs/06_empty"},
    ],
    ("GET", f"{CONTENTS}/01_getting-started"): [
        {"type": "file", "name": "quick-start.md", "path": "docs/_docs/01_getting-started/quick-start.md",
         "html_url": f"{HTML}/blob/main/docs/_docs/01_getting-started/quick-start.md"},
    ],
    ("GET", f"{CONTENTS}/01_getting-started/quick-start.md"): _encoded("# Quick start"),
    ("GET", f"{CONTENTS}/cli"): [
        {"type": "file", "name": "getting-started.md", "path": "docs/_docs/cli/getting-started.md",
         "html_url": f"{HTML}/blob/main/docs/_docs/cli/getting-started.md"},
        {"type": "file", "name": "options.md", "path": "docs/_docs/cli/options.md",
         "html_url": f"{HTML}/blob/main/docs/_docs/cli/options.md"},
    ],
    ("GET", f"{CONTENTS}/cli/getting-started.md"): _encoded("# CLI getting started"),
    ("GET", f"{CONTENTS}/cli/options.md"): _encoded("# CLI options"),
    ("GET", f"{CONTENTS}/06_empty"): [],
}


class DummyGitHub:
    """Routes by (method, path); issue pages are looked up by the page parameter."""

    def __init__(self, routes: dict[tuple[str, str], Any], issue_pages: dict[int, list[Any]] | None = None) -> None:
        self._routes = routes
        self._issue_pages = issue_pages or {}
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []

    async def request_json(self, **kwargs: Any) -> object:
        method, path, params = str(kwargs.get("method")), str(kwargs.get("path")), kwargs.get("params")
        self.calls.append((method, path, params))
        if path == ISSUES:
            return self._issue_pages.get(int(params["page"]), [])
        if (method, path) not in self._routes:
            raise AssertionError(f"Unexpected call: {(method, path)}")
        return self._routes[(method, path)]


def _runtime(
    *,
    issue_pages: dict[int, list[Any]] | None = None,
    limits: LimitsConfig | None = None,
    environ: dict[str, str] | None = None,
) -> tuple[tools.Runtime, DummyGitHub, list[str]]:
    github = DummyGitHub(ROUTES, issue_pages)
    tokens: list[str] = []

    def factory(token: str) -> DummyGitHub:
        tokens.append(token)
        return github

    rt = tools.Runtime(
        config=ServerConfig(limits=limits or LimitsConfig()),
        log=logging.getLogger("tests.tools"),
        environ={"GITHUB_TOKEN": TOKEN} if environ is None else environ,
        github_factory=factory,  # type: ignore[arg-type]
    )
    return rt, github, tokens


def _texts(result: list[Any]) -> list[str]:
    assert result
    assert all(block.type == "text" for block in result)
    return [block.text for block in result]


@pytest.mark.asyncio
async def test_list_doc_categories_one_block_per_category() -> None:
    rt, _, tokens = _runtime()

    out = _texts(await tools.dispatch_tool("list-doc-categories", {}, runtime=rt))

    assert out == [
        f"Getting Started: {HTML}/tree/main/docs/_docs/01_getting-started",
        f"Cli: {HTML}/tree/main/docs/_docs/cli",
        "Empty: ",
    ]
    assert tokens == [TOKEN]


@pytest.mark.asyncio
async def test_list_doc_categories_accepts_none_arguments() -> None:
    rt, _, _ = _runtime()

    out = _texts(await tools.dispatch_tool("list-doc-categories", None, runtime=rt))

    assert len(out) == 3


@pytest.mark.asyncio
async def test_list_docs_by_category() -> None:
    rt, _, _ = _runtime()

    out = _texts(await tools.dispatch_tool("list-all-docs-by-category", {"category": "cli"}, runtime=rt))

    assert out == [
        f"getting-started.md: {HTML}/blob/main/docs/_docs/cli/getting-started.md",
        f"options.md: {HTML}/blob/main/docs/_docs/cli/options.md",
    ]


@pytest.mark.asyncio
async def test_list_docs_of_empty_category() -> None:
    rt, _, _ = _runtime()

    out = _texts(await tools.dispatch_tool("list-all-docs-by-category", {"category": "empty"}, runtime=rt))

    assert out == ['No documents found in category "empty"']


@pytest.mark.asyncio
async def test_read_document_returns_markdown() -> None:
    rt, _, _ = _runtime()

    out = _texts(
        await tools.dispatch_tool(
            "read-document-from-category", {"category": "cli", "document": "getting-started"}, runtime=rt
        )
    )

    assert out == ["# CLI getting started"]


@pytest.mark.asyncio
async def test_arguments_are_trimmed() -> None:
    rt, _, _ = _runtime()

    out = _texts(
        await tools.dispatch_tool(
            "read-document-from-category", {"category": "  cli ", "document": " options\n"}, runtime=rt
        )
    )

    assert out == ["# CLI options"]


@pytest.mark.asyncio
async def test_read_all_docs_merges_category() -> None:
    rt, _, _ = _runtime()

    out = _texts(await tools.dispatch_tool("read-all-docs-from-category", {"category": "cli"}, runtime=rt))

    assert len(out) == 1
    assert out[0].startswith("# Cli Documentation\n\n")
    assert "\n\n## getting-started\n\n# CLI getting started" in out[0]
    assert "\n\n## options\n\n# CLI options" in out[0]
    assert out[0].count("\n\n---\n") == 1


@pytest.mark.asyncio
async def test_open_issues_first_page_only_by_default() -> None:
    pages = {1: [_issue(1), _issue(2, pull_request={})], 2: [_issue(3)]}
    rt, github, _ = _runtime(issue_pages=pages, limits=LimitsConfig(issues_per_page=2))

    out = _texts(await tools.dispatch_tool("get-all-open-issues", {}, runtime=rt))

    assert out == ["#1: Issue 1"]
    assert len(github.calls) == 1


@pytest.mark.asyncio
async def test_open_issues_all_pages() -> None:
    pages = {1: [_issue(1), _issue(2)], 2: [_issue(3)]}
    rt, github, _ = _runtime(issue_pages=pages, limits=LimitsConfig(issues_per_page=2))

    out = _texts(await tools.dispatch_tool("get-all-open-issues", {"all": True}, runtime=rt))

    assert out == ["#1: Issue 1\n#2: Issue 2\n#3: Issue 3"]
    assert [params["page"] for _, _, params in github.calls] == ["1", "2"]


@pytest.mark.asyncio
async def test_no_open_issues() -> None:
    rt, _, _ = _runtime(issue_pages={})

    out = _texts(await tools.dispatch_tool("get-all-open-issues", {"all": False}, runtime=rt))

    assert out == ["No open issues found."]


@pytest.mark.asyncio
async def test_rotated_token_is_used_on_next_call() -> None:
    environ = {"GITHUB_TOKEN": TOKEN}
    rt, _, tokens = _runtime(environ=environ)
    rotated = "github_pat_" + "b" * 30

    _ = await tools.dispatch_tool("list-doc-categories", {}, runtime=rt)
    environ["GITHUB_TOKEN"] = rotated
    _ = await tools.dispatch_tool("list-doc-categories", {}, runtime=rt)

    assert tokens == [TOKEN, rotated]


@pytest.mark.asyncio
async def test_fallback_token_variable_is_used() -> None:
    classic = "0123456789abcdef0123456789abcdef01234567"
    rt, _, tokens = _runtime(environ={"GITHUB_PERSONAL_ACCESS_TOKEN": classic})

    _ = await tools.dispatch_tool("list-doc-categories", {}, runtime=rt)

    assert tokens == [classic]


def test_format_issues() -> None:
    issue = GitHubIssue(
        number=42,
        title="Support for X",
        state="open",
        html_url=f"{HTML}/issues/42",
        labels=(),
        author=None,
        created_at=None,
        updated_at=None,
    )

    assert tools.format_issues([issue]) == "#42: Support for X"
    assert tools.format_issues([]) == "No open issues found."
