"""Terragrunt documentation client.

Categories are the directories directly under the documentation root of the
Terragrunt repository (``docs/_docs`` by default); documents are the markdown
files inside a category directory. Everything is read through the GitHub
contents API with the token of the current tool call.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from .errors import SafeError, category_not_found, document_not_found, remote_unavailable
from .github_client import GitHubClient
from .matching import find_best_match

logger = logging.getLogger(__name__)

_ORDER_PREFIX_RE = re.compile(r"^\d+_")
_MARKDOWN_SUFFIX = ".md"


@dataclass(frozen=True, slots=True)
class DocCategory:
    """A documentation category (one directory under the docs root)."""

    name: str
    path: str
    url: str
    html_url: str


@dataclass(frozen=True, slots=True)
class DocFileSummary:
    """A markdown file in a category, without its content."""

    name: str
    path: str
    html_url: str
    download_url: str
    sha: str


@dataclass(frozen=True, slots=True)
class DocFile:
    """A markdown file with its decoded content."""

    name: str
    path: str
    content: str
    html_url: str
    download_url: str
    size: int
    sha: str


def format_category_name(folder_name: str) -> str:
    """Turn a folder name like "01_getting-started" into "Getting Started"."""
    without_prefix = _ORDER_PREFIX_RE.sub("", folder_name)
    words = re.sub(r"[-_]", " ", without_prefix).split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def document_stem(name: str) -> str:
    return name[: -len(_MARKDOWN_SUFFIX)] if name.endswith(_MARKDOWN_SUFFIX) else name


def _str_field(item: dict[str, Any], key: str) -> str:
    value = item.get(key)
    return value if isinstance(value, str) else ""


class TerragruntDocs:
    """Read-only access to the Terragrunt documentation tree."""

    def __init__(
        self,
        *,
        github: GitHubClient,
        owner: str = "gruntwork-io",
        repo: str = "terragrunt",
        docs_path: str = "docs/_docs",
        log: logging.Logger | None = None,
    ) -> None:
        self._github = github
        self._owner = owner
        self._repo = repo
        self._docs_path = docs_path.strip("/")
        self._log = log or logger

    def _contents_path(self, path: str) -> str:
        return f"/repos/{self._owner}/{self._repo}/contents/{quote(path, safe='/')}"

    async def _list_directory(self, path: str) -> list[dict[str, Any]]:
        data = await self._github.request_json(method="GET", path=self._contents_path(path))
        if not isinstance(data, list):
            raise remote_unavailable(f"Unexpected contents response for {path}: expected a directory listing")
        return [item for item in data if isinstance(item, dict)]

    async def get_doc_categories(self) -> list[DocCategory]:
        """List documentation categories in source order.

        An empty documentation root yields an empty list.
        """
        contents = await self._list_directory(self._docs_path)
        categories = [
            DocCategory(
                name=format_category_name(_str_field(item, "name")),
                path=_str_field(item, "path"),
                url=_str_field(item, "url"),
                html_url=_str_field(item, "html_url"),
            )
            for item in contents
            if item.get("type") == "dir"
        ]
        self._log.debug("Found %s documentation categories", len(categories))
        return categories

    async def _resolve_category(self, category: str) -> DocCategory:
        categories = await self.get_doc_categories()
        result = find_best_match(category, [c.name for c in categories])
        if result.match is None:
            raise category_not_found(category, result.suggestions)
        if result.score < 1.0:
            self._log.info('Category "%s" resolved to "%s"', category, result.match)
        return next(c for c in categories if c.name == result.match)

    async def _list_markdown(self, category: DocCategory) -> list[DocFileSummary]:
        contents = await self._list_directory(category.path)
        return [
            DocFileSummary(
                name=_str_field(item, "name"),
                path=_str_field(item, "path"),
                html_url=_str_field(item, "html_url"),
                download_url=_str_field(item, "download_url"),
                sha=_str_field(item, "sha"),
            )
            for item in contents
            if item.get("type") == "file" and _str_field(item, "name").endswith(_MARKDOWN_SUFFIX)
        ]

    async def list_documents_in_category(self, category: str) -> list[DocFileSummary]:
        """List the markdown documents of a category.

        Raises:
            SafeError: CategoryNotFound if the category cannot be resolved.
        """
        resolved = await self._resolve_category(category)
        return await self._list_markdown(resolved)

    async def _fetch_document(self, summary: DocFileSummary) -> DocFile:
        data = await self._github.request_json(method="GET", path=self._contents_path(summary.path))
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise remote_unavailable(f"Unexpected contents response for {summary.path}: expected a file")

        raw = data.get("content")
        if not isinstance(raw, str):
            raise remote_unavailable(f"GitHub returned no content for {summary.path}")
        if data.get("encoding") == "base64":
            try:
                content = base64.b64decode(raw, validate=False).decode("utf-8", errors="replace")
            except (binascii.Error, UnicodeDecodeError) as exc:
                raise remote_unavailable(f"GitHub returned undecodable content for {summary.path}") from exc
        else:
            content = raw

        size = data.get("size")
        return DocFile(
            name=_str_field(data, "name") or summary.name,
            path=_str_field(data, "path") or summary.path,
            content=content,
            html_url=_str_field(data, "html_url") or summary.html_url,
            download_url=_str_field(data, "download_url") or summary.download_url,
            size=size if isinstance(size, int) else len(content.encode("utf-8")),
            sha=_str_field(data, "sha") or summary.sha,
        )

    @staticmethod
    def _pick_document(document: str, files: list[DocFileSummary], category: DocCategory) -> DocFileSummary:
        for f in files:
            if document in (f.name, document_stem(f.name)):
                return f

        stems = [document_stem(f.name) for f in files]
        result = find_best_match(document_stem(document), stems)
        if result.match is None:
            raise document_not_found(document, category.name, result.suggestions)
        return files[stems.index(result.match)]

    async def get_document_from_category(self, category: str, document: str) -> DocFile:
        """Fetch one document of a category with its content.

        The exact file name (with or without ".md") wins; otherwise the closest
        name is used.

        Raises:
            SafeError: CategoryNotFound or DocumentNotFound.
        """
        resolved = await self._resolve_category(category)
        files = await self._list_markdown(resolved)
        summary = self._pick_document(document, files, resolved)
        return await self._fetch_document(summary)

    async def _merged_section(self, summary: DocFileSummary) -> str:
        stem = document_stem(summary.name)
        try:
            doc = await self._fetch_document(summary)
        except SafeError as err:
            self._log.warning("Failed to fetch %s while merging: %s", summary.path, err.message)
            return f"\n\n## {stem} (Error)\n\nFailed to fetch document: {err.message}"
        return f"\n\n## {stem}\n\n{doc.content}"

    async def get_all_documents_merged_from_category(self, category: str) -> str:
        """Fetch every document of a category and merge them into one text.

        Each document becomes a "## <name>" section under a category header. A
        document that fails to fetch is replaced by an error section rather than
        failing the whole merge.
        """
        resolved = await self._resolve_category(category)
        files = await self._list_markdown(resolved)
        if not files:
            return f'No documents found in category "{category}"'

        sections = await asyncio.gather(*(self._merged_section(f) for f in files))
        header = f"# {resolved.name} Documentation\n\n"
        return header + "\n\n---\n".join(sections)
