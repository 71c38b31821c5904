"""
GitHub contents API client for Obsidian GitHub MCP Server.

Wraps ``GET /repos/{owner}/{repo}/contents/{path}`` with an async httpx client
and maps HTTP failures onto the server's error taxonomy.
"""

from typing import Any
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError

from .config import DEFAULT_GITHUB_API_URL
from .models import RepoEntry
from .utils import NoteNotFoundError, RemoteFetchError

logger = structlog.get_logger(__name__)

GITHUB_JSON = "application/vnd.github+json"
GITHUB_RAW = "application/vnd.github.raw+json"
GITHUB_API_VERSION = "2022-11-28"


def _coerce_error_detail(payload: Any, fallback: str) -> str:
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str) and message:
            return message
    if isinstance(payload, str) and payload:
        return payload
    return fallback


class GitHubContentClient:
    """
    Async client for the GitHub repository contents API.

    Usage:
        async with GitHubContentClient(token, "octocat", "notes") as client:
            entries = await client.get_content("Projects")
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        *,
        ref: str | None = None,
        base_url: str = DEFAULT_GITHUB_API_URL,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.owner = owner
        self.repo = repo
        self.ref = ref
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = {
            "Accept": GITHUB_JSON,
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": "obsidian-github-mcp",
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(follow_redirects=True)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "GitHubContentClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _url(self, path: str) -> str:
        encoded = quote(path.strip("/"), safe="/")
        return f"{self.base_url}/repos/{quote(self.owner)}/{quote(self.repo)}/contents/{encoded}"

    async def _request(self, path: str, accept: str = GITHUB_JSON) -> httpx.Response:
        params = {"ref": self.ref} if self.ref else None
        headers = {**self._headers, "Accept": accept}
        try:
            response = await self._client.get(
                self._url(path),
                headers=headers,
                params=params,
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise RemoteFetchError(f"GitHub request failed: {exc}", path=path) from exc

        if response.status_code == 404:
            raise NoteNotFoundError(path)

        if response.status_code >= 400:
            try:
                payload: Any = response.json()
            except ValueError:
                payload = response.text
            detail = _coerce_error_detail(payload, f"HTTP {response.status_code} error")
            raise RemoteFetchError(
                f"GitHub API error: {detail}",
                status_code=response.status_code,
                path=path,
                payload=payload,
            )

        return response

    async def get_content(self, path: str = "") -> list[RepoEntry] | RepoEntry:
        """Fetch the contents API record(s) at a repository path.

        Returns a list of entries for a directory and a single entry (with
        base64 content for files) otherwise.

        Raises:
            NoteNotFoundError: If nothing exists at the path
            RemoteFetchError: If the request or response decoding fails
        """
        response = await self._request(path)
        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteFetchError("GitHub returned invalid JSON", path=path) from exc

        try:
            if isinstance(payload, list):
                return [RepoEntry.model_validate(item) for item in payload]
            return RepoEntry.model_validate(payload)
        except ValidationError as exc:
            raise RemoteFetchError(f"Unexpected GitHub payload: {exc}", path=path) from exc

    async def get_raw(self, path: str) -> bytes:
        """Fetch the raw bytes of a file, for bodies the JSON API omits (over 1MB)."""
        response = await self._request(path, accept=GITHUB_RAW)
        logger.debug("raw_content_fetched", path=path, size=len(response.content))
        return response.content
