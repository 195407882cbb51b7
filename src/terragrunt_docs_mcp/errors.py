"""Safe error types and text helpers.

Every failure a tool can hit is a SafeError. Its message is returned to agents
verbatim, so it must never include secrets (tokens, Authorization headers).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SafeError(Exception):
    """An error safe to expose to agents."""

    code: str
    message: str
    hint: str | None = None
    status_code: int | None = None
    details: tuple[str, ...] = ()

    def __str__(self) -> str:
        return self.message


def missing_credential() -> SafeError:
    """No token in any of the supported environment variables."""
    return SafeError(
        code="MissingCredential",
        message="GitHub token is not set in the environment (GITHUB_TOKEN or GH_TOKEN or GITHUB_PERSONAL_ACCESS_TOKEN)",
    )


def invalid_credential_format() -> SafeError:
    """A token is present but matches neither accepted shape."""
    return SafeError(
        code="InvalidCredentialFormat",
        message="The GitHub token must be a valid GitHub Personal Access Token.",
    )


def validation_error(violations: Iterable[str]) -> SafeError:
    """Aggregate all argument violations into a single error."""
    details = tuple(violations)
    return SafeError(
        code="ValidationError",
        message="Invalid arguments: " + "; ".join(details),
        details=details,
    )


def _did_you_mean(suggestions: Sequence[str]) -> str:
    return ", ".join(suggestions) or "(no suggestions)"


def category_not_found(category: str, suggestions: Sequence[str] = ()) -> SafeError:
    return SafeError(
        code="CategoryNotFound",
        message=f'Category "{category}" not found. Did you mean: {_did_you_mean(suggestions)}?',
        details=tuple(suggestions),
    )


def document_not_found(document: str, category: str, suggestions: Sequence[str] = ()) -> SafeError:
    return SafeError(
        code="DocumentNotFound",
        message=(
            f'Document "{document}" not found in category "{category}". '
            f"Did you mean: {_did_you_mean(suggestions)}?"
        ),
        details=tuple(suggestions),
    )


def remote_unavailable(message: str, *, hint: str | None = None, status_code: int | None = None) -> SafeError:
    """Error for transport failures and unusable GitHub responses."""
    return SafeError(code="RemoteUnavailable", message=message, hint=hint, status_code=status_code)


def unknown_tool(name: str) -> SafeError:
    return SafeError(code="UnknownTool", message=f"Unknown tool: {name}")


def config_error(message: str) -> SafeError:
    """Error for invalid host configuration (fatal at startup)."""
    return SafeError(code="Config", message=message)


def tool_error_text(tool_name: str, err: BaseException) -> str:
    """Render a failure as the text block returned to agents."""
    message = err.message if isinstance(err, SafeError) else str(err)
    return f"Error handling {tool_name}: {message}"
