"""GitHub token resolution.

The token is read from the host environment on every tool call and never cached,
so rotating it takes effect on the next call without restarting the server.
It is never accepted as a tool argument.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping

from .errors import invalid_credential_format, missing_credential

# Checked in order; the first non-empty value wins.
TOKEN_ENV_VARS: tuple[str, ...] = ("GITHUB_TOKEN", "GH_TOKEN", "GITHUB_PERSONAL_ACCESS_TOKEN")

_PREFIXED_TOKEN_RE = re.compile(r"^[a-z]+_[A-Za-z0-9_]{16,}$")
_CLASSIC_TOKEN_RE = re.compile(r"^[0-9a-f]{40}$")


def looks_like_github_token(value: str) -> bool:
    """Return True if value has one of the two accepted token shapes."""
    return bool(_PREFIXED_TOKEN_RE.fullmatch(value) or _CLASSIC_TOKEN_RE.fullmatch(value))


def resolve_github_token(environ: Mapping[str, str] | None = None) -> str:
    """Return the validated GitHub token from the environment.

    Raises:
        SafeError: MissingCredential if no variable is set, InvalidCredentialFormat
            if the value found has neither accepted shape.
    """
    env = os.environ if environ is None else environ
    token = next((env.get(name) for name in TOKEN_ENV_VARS if env.get(name)), None)
    if not token:
        raise missing_credential()
    if not looks_like_github_token(token):
        raise invalid_credential_format()
    return token
