"""GitHub REST client wrapper.

Provides:
- bearer auth with the token resolved for the current tool call
- no-redirect behavior and finite timeouts
- safe error translation (a single attempt; failures are reported, never retried)
"""

from __future__ import annotations

import logging

import httpx

from .config import LimitsConfig
from .errors import config_error, remote_unavailable

logger = logging.getLogger(__name__)


class GitHubClient:
    """Minimal GitHub REST client."""

    def __init__(
        self,
        *,
        token: str,
        limits: LimitsConfig,
        api_base_url: str = "https://api.github.com",
        transport: httpx.AsyncBaseTransport | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        """Create a GitHub REST client for one tool call.

        Args:
            token: Validated GitHub token.
            limits: Timeouts.
            api_base_url: Base URL of the REST API; must be https.
            transport: Optional httpx transport for tests.
            log: Logger to use instead of the module logger.
        """
        self._token = token
        self._limits = limits
        self._api_base_url = api_base_url.rstrip("/")
        self._transport = transport
        self._log = log or logger

        if not self._api_base_url.startswith("https://"):
            raise config_error("Only https GitHub API endpoints are allowed")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    async def request_json(
        self,
        *,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
    ) -> object:
        """Make a request and return decoded JSON.

        GitHub APIs may return either an object (dict) or an array (list).

        Raises:
            SafeError: RemoteUnavailable on transport errors, HTTP errors or invalid JSON.
        """
        url = f"{self._api_base_url}/{path.lstrip('/')}"
        timeout = httpx.Timeout(
            timeout=self._limits.total_timeout_s,
            connect=self._limits.connect_timeout_s,
        )

        self._log.debug("GitHub %s %s params=%s", method, path, params or {})

        async with httpx.AsyncClient(
            follow_redirects=False,
            timeout=timeout,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.request(method, url, headers=self._headers(), params=params)
            except httpx.HTTPError as exc:
                self._log.warning("GitHub %s %s failed: %s", method, path, type(exc).__name__)
                raise remote_unavailable(f"Network request failed: {type(exc).__name__}") from exc

        if resp.status_code >= 400:
            safe_hint = None
            try:
                err_payload = resp.json()
                if isinstance(err_payload, dict) and isinstance(err_payload.get("message"), str):
                    safe_hint = err_payload.get("message")
            except ValueError:
                safe_hint = None

            self._log.warning("GitHub %s %s returned status %s", method, path, resp.status_code)
            message = f"GitHub request failed (status={resp.status_code})"
            if safe_hint:
                message = f"{message}: {safe_hint}"
            raise remote_unavailable(message, hint=safe_hint, status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise remote_unavailable("GitHub returned invalid JSON") from exc
