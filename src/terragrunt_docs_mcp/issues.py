"""Terragrunt GitHub issues client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .errors import remote_unavailable
from .github_client import GitHubClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GitHubIssue:
    number: int
    title: str
    state: str
    html_url: str
    labels: tuple[str, ...]
    author: str | None
    created_at: str | None
    updated_at: str | None


def _parse_issue(item: dict[str, Any]) -> GitHubIssue | None:
    # The issues endpoint also returns pull requests.
    if "pull_request" in item:
        return None
    number = item.get("number")
    title = item.get("title")
    if not isinstance(number, int) or not isinstance(title, str):
        return None

    labels: list[str] = []
    for label in item.get("labels") or []:
        if isinstance(label, dict) and isinstance(label.get("name"), str):
            labels.append(label["name"])
        elif isinstance(label, str):
            labels.append(label)

    user = item.get("user")
    author = user.get("login") if isinstance(user, dict) else None

    return GitHubIssue(
        number=number,
        title=title,
        state=str(item.get("state") or "open"),
        html_url=str(item.get("html_url") or ""),
        labels=tuple(labels),
        author=author if isinstance(author, str) else None,
        created_at=item.get("created_at"),
        updated_at=item.get("updated_at"),
    )


class TerragruntIssues:
    """Read-only access to open issues of the Terragrunt repository."""

    def __init__(
        self,
        *,
        github: GitHubClient,
        owner: str = "gruntwork-io",
        repo: str = "terragrunt",
        per_page: int = 30,
        max_pages: int = 10,
        log: logging.Logger | None = None,
    ) -> None:
        self._github = github
        self._owner = owner
        self._repo = repo
        self._per_page = per_page
        self._max_pages = max_pages
        self._log = log or logger

    async def _fetch_page(self, *, per_page: int, page: int) -> list[dict[str, Any]]:
        data = await self._github.request_json(
            method="GET",
            path=f"/repos/{self._owner}/{self._repo}/issues",
            params={"state": "open", "per_page": str(per_page), "page": str(page)},
        )
        if not isinstance(data, list):
            raise remote_unavailable("Unexpected issues response")
        return [item for item in data if isinstance(item, dict)]

    def _parse_page(self, items: list[dict[str, Any]], page: int) -> list[GitHubIssue]:
        issues: list[GitHubIssue] = []
        for item in items:
            issue = _parse_issue(item)
            if issue is not None:
                issues.append(issue)
        skipped = len(items) - len(issues)
        if skipped:
            self._log.debug("Skipped %s pull requests or malformed items on issues page %s", skipped, page)
        return issues

    async def get_open_issues(self, *, per_page: int | None = None, page: int = 1) -> list[GitHubIssue]:
        """Get a single page of open issues."""
        items = await self._fetch_page(per_page=per_page or self._per_page, page=page)
        return self._parse_page(items, page)

    async def get_all_open_issues(self) -> list[GitHubIssue]:
        """Get open issues across pages, in source order.

        Stops at the first short page or after `max_pages` pages. Items are passed
        through as returned; nothing is re-sorted or de-duplicated. Any page failure
        fails the whole call.
        """
        all_issues: list[GitHubIssue] = []
        for page in range(1, self._max_pages + 1):
            items = await self._fetch_page(per_page=self._per_page, page=page)
            all_issues.extend(self._parse_page(items, page))
            if len(items) < self._per_page:
                return all_issues

        self._log.warning(
            "Stopped fetching open issues after %s pages (%s issues); more may exist",
            self._max_pages,
            len(all_issues),
        )
        return all_issues
