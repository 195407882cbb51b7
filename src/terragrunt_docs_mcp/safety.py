"""Safety helpers.

Credentials are only ever read from the host environment. If an agent-provided
argument appears to be a credential, the call is rejected and the suspected
secret value is never echoed back or logged.
"""

from __future__ import annotations

import re
from typing import Any

_CRED_FIELD_NAMES = {
    "token",
    "github_token",
    "githubtoken",
    "access_token",
    "authorization",
    "password",
    "jwt",
}

_TOKEN_PREFIXES = (
    "ghp_",
    "gho_",
    "ghu_",
    "ghs_",
    "ghr_",
    "github_pat_",
)

_HEX40_RE = re.compile(r"^[0-9a-f]{40}$")
_JWT_LIKE_RE = re.compile(r"^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+$")
_BEARER_RE = re.compile(r"^bearer\s+(\S+)$", re.IGNORECASE)
# Opaque bearer credential: one long run of token characters with at least one digit.
_OPAQUE_TOKEN_RE = re.compile(r"^(?=[^\d]*\d)[A-Za-z0-9._~+/=-]{20,}$")


def _looks_like_bare_token(value: str) -> bool:
    if value.lower().startswith(_TOKEN_PREFIXES):
        return True
    if _HEX40_RE.match(value):
        return True
    return len(value) >= 40 and bool(_JWT_LIKE_RE.match(value))


def looks_like_secret_value(value: str) -> bool:
    """Return True if the value looks like a credential.

    Matching rules:
    - well-known GitHub token prefix at start (after leading whitespace)
    - "Bearer <credential>", case-insensitively, where the credential is token-shaped
    - classic 40-character hex token
    - JWT-looking value (conservative)
    """
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    bearer = _BEARER_RE.match(trimmed)
    if bearer:
        credential = bearer.group(1)
        return _looks_like_bare_token(credential) or bool(_OPAQUE_TOKEN_RE.match(credential))
    return _looks_like_bare_token(trimmed)


def looks_like_credential_field_name(field_name: str) -> bool:
    """Return True if a key name looks like a credential field."""
    if not isinstance(field_name, str):
        return False
    return field_name.strip().lower() in _CRED_FIELD_NAMES


def find_secret_violations(obj: Any, *, path: str = "") -> list[str]:
    """Collect violations for credential-like keys or values, without echoing values."""
    violations: list[str] = []
    if isinstance(obj, dict):
        for k, v in obj.items():
            key = str(k)
            where = f"{path}.{key}" if path else key
            if looks_like_credential_field_name(key):
                violations.append(f"Field '{where}' looks like a credential field and is not allowed")
                continue
            violations.extend(find_secret_violations(v, path=where))
    elif isinstance(obj, list):
        for i, item in enumerate(obj):
            violations.extend(find_secret_violations(item, path=f"{path}[{i}]"))
    elif isinstance(obj, str) and looks_like_secret_value(obj):
        violations.append(f"Field '{path or '<value>'}' contains a credential-like value, which is not allowed")
    return violations


def redact_text(text: str) -> str:
    """Return a redacted representation safe for logs."""
    if not isinstance(text, str):
        return "<non-string>"
    if looks_like_secret_value(text):
        return "<redacted>"
    return text


def _redact_value(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: "<redacted>" if looks_like_credential_field_name(str(k)) else _redact_value(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_redact_value(item) for item in value]
    if isinstance(value, str):
        return redact_text(value)
    return value


def redact_arguments(arguments: dict[str, Any]) -> dict[str, Any]:
    """Copy of tool arguments with credential-like keys and values replaced, at any depth."""
    return _redact_value(arguments)
