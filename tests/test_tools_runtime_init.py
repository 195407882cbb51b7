"""Runtime initialization and the real client path through the dispatcher."""

from __future__ import annotations

import base64
import dataclasses

import httpx
import pytest
import terragrunt_docs_mcp.tools as tools
from terragrunt_docs_mcp.logs import LOGGER_NAME

TOKEN = "ghp_" + "r" * 36


def test_initialize_runtime_from_env_caches_runtime(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TERRAGRUNT_MCP_REPO_OWNER", "acme")
    monkeypatch.setenv("TERRAGRUNT_MCP_REPO_NAME", "terragrunt-fork")
    monkeypatch.setenv("LOG_FILE_ENABLED", "false")
    monkeypatch.setattr(tools, "_RUNTIME", None)

    r1 = tools.initialize_runtime_from_env()
    r2 = tools.initialize_runtime_from_env()

    assert r1 is r2
    assert r1.config.repo.owner == "acme"
    assert r1.config.repo.html_url == "https://github.com/acme/terragrunt-fork"
    assert r1.log.name == LOGGER_NAME
    assert r1.environ is None


@pytest.mark.asyncio
async def test_dispatch_through_real_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(tools, "_RUNTIME", None)
    monkeypatch.delenv("TERRAGRUNT_MCP_REPO_OWNER", raising=False)
    monkeypatch.delenv("TERRAGRUNT_MCP_REPO_NAME", raising=False)
    monkeypatch.delenv("TERRAGRUNT_MCP_DOCS_PATH", raising=False)
    monkeypatch.delenv("TERRAGRUNT_MCP_API_BASE_URL", raising=False)
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        base = "/repos/gruntwork-io/terragrunt/contents/docs/_docs"
        if request.url.path == base:
            return httpx.Response(200, json=[{"type": "dir", "name": "cli", "path": "docs/_docs/cli"}])
        if request.url.path == f"{base}/cli":
            return httpx.Response(200, json=[{"type": "file", "name": "options.md", "path": "docs/_docs/cli/options.md"}])
        if request.url.path == f"{base}/cli/options.md":
            body = base64.b64encode(b"# Options").decode()
            return httpx.Response(200, json={"type": "file", "encoding": "base64", "content": body})
        return httpx.Response(404, json={"message": "Not Found"})

    runtime = dataclasses.replace(
        tools.initialize_runtime_from_env(),
        environ={"GITHUB_TOKEN": TOKEN},
        transport=httpx.MockTransport(handler),
    )

    out = await tools.dispatch_tool(
        "read-document-from-category", {"category": "cli", "document": "options"}, runtime=runtime
    )

    assert [block.text for block in out] == ["# Options"]
    assert len(seen) == 3
    assert all(r.headers["Authorization"] == f"Bearer {TOKEN}" for r in seen)
