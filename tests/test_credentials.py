"""Credential resolution tests."""

from __future__ import annotations

import pytest
from terragrunt_docs_mcp.credentials import TOKEN_ENV_VARS, looks_like_github_token, resolve_github_token
from terragrunt_docs_mcp.errors import SafeError

PREFIXED_TOKEN = "ghp_" + "A1b2C3d4E5f6G7h8I9j0"
CLASSIC_TOKEN = "0123456789abcdef0123456789abcdef01234567"


@pytest.mark.parametrize("env_var", TOKEN_ENV_VARS)
def test_each_source_alone_resolves(env_var: str) -> None:
    assert resolve_github_token({env_var: PREFIXED_TOKEN}) == PREFIXED_TOKEN


def test_priority_order_first_non_empty_wins() -> None:
    env = {
        "GITHUB_TOKEN": "",
        "GH_TOKEN": "gho_" + "x" * 20,
        "GITHUB_PERSONAL_ACCESS_TOKEN": CLASSIC_TOKEN,
    }
    assert resolve_github_token(env) == "gho_" + "x" * 20

    env["GITHUB_TOKEN"] = PREFIXED_TOKEN
    assert resolve_github_token(env) == PREFIXED_TOKEN


def test_missing_token_message() -> None:
    with pytest.raises(SafeError) as exc:
        resolve_github_token({})

    assert exc.value.code == "MissingCredential"
    assert exc.value.message == (
        "GitHub token is not set in the environment (GITHUB_TOKEN or GH_TOKEN or GITHUB_PERSONAL_ACCESS_TOKEN)"
    )


@pytest.mark.parametrize("env_var", TOKEN_ENV_VARS)
@pytest.mark.parametrize(
    "bad_token",
    [
        "not-a-token",
        "ghp_short",
        "GHP_" + "a" * 20,
        "0123456789ABCDEF0123456789ABCDEF01234567",
        "0123456789abcdef",
        PREFIXED_TOKEN + "\n",
    ],
)
def test_invalid_format_from_any_source(env_var: str, bad_token: str) -> None:
    with pytest.raises(SafeError) as exc:
        resolve_github_token({env_var: bad_token})

    assert exc.value.code == "InvalidCredentialFormat"
    assert bad_token.strip() not in exc.value.message


def test_accepted_shapes() -> None:
    assert looks_like_github_token(PREFIXED_TOKEN)
    assert looks_like_github_token("github_pat_" + "A" * 30)
    assert looks_like_github_token(CLASSIC_TOKEN)
    assert not looks_like_github_token("")


def test_reads_process_environment_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in TOKEN_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GITHUB_PERSONAL_ACCESS_TOKEN", CLASSIC_TOKEN)

    assert resolve_github_token() == CLASSIC_TOKEN
