"""Tool registry and argument validation.

This module:
- defines the tools exposed to agents (public contract surface)
- validates raw tool arguments against each tool's declared input schema
- turns valid arguments into per-tool typed records

No schema has a token field: the GitHub token comes from the host environment only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from .errors import unknown_tool, validation_error
from .safety import find_secret_violations

LIST_DOC_CATEGORIES = "list-doc-categories"
LIST_ALL_DOCS_BY_CATEGORY = "list-all-docs-by-category"
READ_DOCUMENT_FROM_CATEGORY = "read-document-from-category"
READ_ALL_DOCS_FROM_CATEGORY = "read-all-docs-from-category"
GET_ALL_OPEN_ISSUES = "get-all-open-issues"

_CATEGORY_PROPERTY: dict[str, Any] = {
    "type": "string",
    "minLength": 1,
    "description": (
        "The category of documentation to get the document from "
        "(e.g. 'getting-started', 'features', 'reference', 'community', 'troubleshooting')."
    ),
}

_DOCUMENT_PROPERTY: dict[str, Any] = {
    "type": "string",
    "minLength": 1,
    "description": "The documentation file to read (e.g. 'quick-start', 'terminology', 'cli-options').",
}

TOOL_METADATA: dict[str, dict[str, Any]] = {
    LIST_DOC_CATEGORIES: {
        "description": (
            "Retrieve the list of documentation categories available in the official Terragrunt "
            "documentation, each with a name and link.\n\n"
            "Call this FIRST whenever the category needed by the other documentation tools is unknown, "
            "or to recover after another tool reports an unknown category.\n\n"
            "Related tools: 'list-all-docs-by-category', 'read-document-from-category', "
            "'read-all-docs-from-category'."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {},
            "additionalProperties": False,
        },
    },
    LIST_ALL_DOCS_BY_CATEGORY: {
        "description": (
            "List all documentation files within a specific Terragrunt documentation category, "
            "each with a name and link.\n\n"
            "This is the SECOND STEP after 'list-doc-categories' when the document name is unknown. "
            "Category names are matched leniently ('getting started', 'Getting Started' and "
            "'01_getting-started' are equivalent)."
        ),
        "inputSchema": {
            "type": "object",
            "required": ["category"],
            "properties": {
                "category": _CATEGORY_PROPERTY,
            },
            "additionalProperties": False,
        },
    },
    READ_DOCUMENT_FROM_CATEGORY: {
        "description": (
            "Read a specific documentation file from a specific Terragrunt documentation category "
            "and return its raw markdown content.\n\n"
            "This is the FINAL STEP when both the category and the document name are known. "
            "Use 'list-all-docs-by-category' first if the document name is uncertain."
        ),
        "inputSchema": {
            "type": "object",
            "required": ["category", "document"],
            "properties": {
                "category": _CATEGORY_PROPERTY,
                "document": _DOCUMENT_PROPERTY,
            },
            "additionalProperties": False,
        },
    },
    READ_ALL_DOCS_FROM_CATEGORY: {
        "description": (
            "Retrieve every documentation file in a Terragrunt documentation category and merge them "
            "into a single response, one labeled section per document.\n\n"
            "Use this for overviews or summaries of a whole category. For a single page prefer "
            "'read-document-from-category', which returns far less text."
        ),
        "inputSchema": {
            "type": "object",
            "required": ["category"],
            "properties": {
                "category": _CATEGORY_PROPERTY,
            },
            "additionalProperties": False,
        },
    },
    GET_ALL_OPEN_ISSUES: {
        "description": (
            "Retrieve open issues from the official Terragrunt GitHub repository as '#<number>: <title>' "
            "lines. Pull requests are not included.\n\n"
            "By default only the first page is returned; set 'all' to true to follow pagination "
            "(bounded by the server's page limit)."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "all": {
                    "type": "boolean",
                    "default": False,
                    "description": "Whether to retrieve all open issues instead of only the first page.",
                },
            },
            "additionalProperties": False,
        },
    },
}


@dataclass(frozen=True, slots=True)
class NoArgs:
    """Arguments of a tool that takes none."""


@dataclass(frozen=True, slots=True)
class CategoryArgs:
    category: str


@dataclass(frozen=True, slots=True)
class DocumentArgs:
    category: str
    document: str


@dataclass(frozen=True, slots=True)
class OpenIssuesArgs:
    all: bool = False


ValidatedArgs = Union[NoArgs, CategoryArgs, DocumentArgs, OpenIssuesArgs]

_ARGS_TYPES: dict[str, type] = {
    LIST_DOC_CATEGORIES: NoArgs,
    LIST_ALL_DOCS_BY_CATEGORY: CategoryArgs,
    READ_DOCUMENT_FROM_CATEGORY: DocumentArgs,
    READ_ALL_DOCS_FROM_CATEGORY: CategoryArgs,
    GET_ALL_OPEN_ISSUES: OpenIssuesArgs,
}

_TYPE_CHECKS: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "boolean": (bool,),
}


def _schema_violations(schema: dict[str, Any], arguments: dict[str, Any]) -> list[str]:
    props: dict[str, Any] = schema.get("properties", {})
    required: list[str] = schema.get("required", [])
    violations: list[str] = []

    for k in required:
        if k not in arguments or arguments[k] is None:
            violations.append(f"Missing required field: {k}")

    if schema.get("additionalProperties", True) is False:
        extras = sorted(str(k) for k in arguments if k not in props)
        if extras:
            violations.append(f"Unexpected fields are not allowed: {', '.join(extras)}")

    for k, spec in props.items():
        if k not in arguments or arguments[k] is None:
            continue
        expected = spec.get("type")
        v = arguments[k]
        accepted = _TYPE_CHECKS.get(expected)
        if accepted is None:
            continue
        if not isinstance(v, accepted):
            violations.append(f"Field '{k}' must be a {expected}")
            continue

        if expected == "string":
            min_len = spec.get("minLength")
            if isinstance(min_len, int) and len(v.strip()) < min_len:
                violations.append(f"Field '{k}' must not be empty")

    return violations


def validate_tool_arguments(tool_name: str, arguments: dict[str, Any] | None) -> ValidatedArgs:
    """Validate tool arguments and build the tool's typed argument record.

    Every violation found is reported, not just the first.
    It is not a full JSON Schema implementation: it enforces required fields,
    additionalProperties=false, basic JSON types and string minLength.

    Raises:
        SafeError: UnknownTool or ValidationError.
    """
    if tool_name not in TOOL_METADATA:
        raise unknown_tool(tool_name)

    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise validation_error(["Arguments must be an object"])

    schema = TOOL_METADATA[tool_name]["inputSchema"]
    violations = _schema_violations(schema, arguments)
    violations.extend(find_secret_violations(arguments))
    if violations:
        raise validation_error(violations)

    props: dict[str, Any] = schema.get("properties", {})
    values: dict[str, Any] = {}
    for k, spec in props.items():
        v = arguments.get(k)
        if v is None:
            if "default" in spec:
                values[k] = spec["default"]
            continue
        values[k] = v.strip() if isinstance(v, str) else v

    return _ARGS_TYPES[tool_name](**values)
