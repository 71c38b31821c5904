"""
Utility functions and exceptions for Obsidian GitHub MCP Server.

Contains the error taxonomy shared by the vault, search and tool layers,
plus helpers for normalizing vault-relative paths.
"""

import re
from typing import Any

# Pre-compiled regex patterns
SLASHES_PATTERN = re.compile(r'/+')
DRIVE_PATTERN = re.compile(r'^[A-Za-z]:')

MARKDOWN_SUFFIX = ".md"


# ============== Exceptions ==============

class VaultError(Exception):
    """Base class for errors reported back to the MCP client."""
    pass


class ArgumentValidationError(VaultError):
    """Raised when tool arguments do not match the tool schema."""
    pass


class PathValidationError(ArgumentValidationError):
    """Raised when a vault path is malformed or tries to escape the vault."""
    pass


class NoteNotFoundError(VaultError):
    """Raised when a path is absent from the repository or is not a file."""

    def __init__(self, path: str, reason: str = "not found"):
        self.path = path
        super().__init__(f"{path or 'root'} {reason}")


class RemoteFetchError(VaultError):
    """Raised when a GitHub API call fails."""

    def __init__(
        self,
        detail: str,
        *,
        status_code: int | None = None,
        path: str | None = None,
        payload: Any = None,
    ):
        self.status_code = status_code
        self.path = path
        self.payload = payload
        status_hint = f" (status={status_code})" if status_code is not None else ""
        path_hint = f" [{path}]" if path is not None else ""
        super().__init__(f"{detail}{status_hint}{path_hint}")


class SearchPartialFailure(VaultError):
    """One note could not be fetched during a search. Logged and skipped."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Skipped {path}: {cause}")


class SearchTimeoutError(VaultError):
    """Raised when a search exceeds its deadline."""
    pass


# ============== Path Helpers ==============

def normalize_vault_path(path_str: str | None) -> str:
    """Normalize a vault-relative path.

    Converts backslashes to slashes, collapses repeated slashes and strips
    leading/trailing slashes. An empty result means the vault root.

    Raises:
        PathValidationError: If the path contains '..' segments or a drive letter
    """
    if not path_str:
        return ""

    path = SLASHES_PATTERN.sub("/", path_str.strip().replace("\\", "/")).strip("/")

    if DRIVE_PATTERN.match(path):
        raise PathValidationError("Absolute paths are not allowed")

    if any(part == ".." for part in path.split("/")):
        raise PathValidationError("Path traversal detected: '..' is not allowed")

    return path


def join_repo_path(*parts: str) -> str:
    """Join path fragments with single slashes, skipping empty fragments."""
    joined = "/".join(part for part in parts if part)
    return SLASHES_PATTERN.sub("/", joined).strip("/")


def is_markdown_name(name: str) -> bool:
    """Check for the literal '.md' suffix (case-sensitive)."""
    return name.endswith(MARKDOWN_SUFFIX)
