"""
Pytest configuration and fixtures for obsidian-github-mcp tests.

The GitHub contents API is faked with httpx.MockTransport over an in-memory
repository, so the real client, vault, search and dispatcher run end to end.
"""

import base64
import textwrap

import httpx
import pytest

OWNER = "octocat"
REPO = "notes"

# Repository files; the vault lives under "vault/"
REPO_FILES = {
    "README.md": "This python repository is not part of the vault.\n",
    "vault/Welcome.md": "# Welcome\n\nThis vault holds my Python notes.\n",
    "vault/Projects/Python Tips.md": (
        "# Python Tips\n\nUse python virtual environments.\nPython is great.\n"
    ),
    "vault/Projects/roadmap.md": "# Roadmap\n\nShip the search feature this year.\n",
    "vault/Projects/diagram.png": b"\x89PNG\r\n\x1a\n",
    "vault/Archive/2023/old.md": "An old python note.\n",
    "vault/Empty/.gitkeep": "",
}


class ManualClock:
    """Clock for cache tests; time only moves when advanced."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGitHub:
    """In-memory stand-in for the GitHub repository contents API."""

    def __init__(self, files: dict, owner: str = OWNER, repo: str = REPO):
        self.owner = owner
        self.repo = repo
        self.files = {
            path: data.encode("utf-8") if isinstance(data, str) else data
            for path, data in files.items()
        }
        self.requests: list[tuple[str, str]] = []
        self.errors: dict[str, int] = {}
        self.disconnected: set[str] = set()
        self.large_files: set[str] = set()

    def fetch_count(self, path: str) -> int:
        return sum(1 for requested, _ in self.requests if requested == path)

    def _children(self, folder: str) -> list[dict]:
        prefix = f"{folder}/" if folder else ""
        seen: list[str] = []
        entries: list[dict] = []
        for path, data in self.files.items():
            if not path.startswith(prefix):
                continue
            name, _, rest = path[len(prefix):].partition("/")
            if name in seen:
                continue
            seen.append(name)
            entries.append({
                "name": name,
                "path": prefix + name,
                "type": "dir" if rest else "file",
                "size": 0 if rest else len(data),
            })
        return entries

    def _file_record(self, path: str) -> dict:
        data = self.files[path]
        large = path in self.large_files
        encoded = base64.b64encode(data).decode("ascii")
        return {
            "name": path.rsplit("/", 1)[-1],
            "path": path,
            "type": "file",
            "size": len(data),
            # GitHub wraps base64 bodies at 60 characters
            "content": "" if large else "\n".join(textwrap.wrap(encoded, 60)) + "\n",
            "encoding": "none" if large else "base64",
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        base = f"/repos/{self.owner}/{self.repo}/contents"
        assert request.url.path.startswith(base)
        assert request.headers["Authorization"] == "Bearer test-token"

        path = request.url.path[len(base):].strip("/")
        accept = request.headers.get("Accept", "")
        self.requests.append((path, accept))

        if path in self.disconnected:
            raise httpx.ConnectError("connection refused", request=request)
        if path in self.errors:
            return httpx.Response(self.errors[path], json={"message": "API rate limit exceeded"})

        if path in self.files:
            if accept.endswith("raw+json"):
                return httpx.Response(200, content=self.files[path])
            return httpx.Response(200, json=self._file_record(path))

        children = self._children(path)
        if children:
            return httpx.Response(200, json=children)
        return httpx.Response(404, json={"message": "Not Found"})


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def github():
    return FakeGitHub(REPO_FILES)


@pytest.fixture
async def http_client(github):
    async with httpx.AsyncClient(transport=httpx.MockTransport(github.handler)) as client:
        yield client


@pytest.fixture
def make_vault(http_client, clock):
    """Factory building a GitHubVault over the fake API."""
    from obsidian_github_mcp.cache import ContentCache
    from obsidian_github_mcp.github import GitHubContentClient
    from obsidian_github_mcp.vault import GitHubVault

    def _make(vault_path: str = "vault", ttl: float = 300, **kwargs):
        client = GitHubContentClient(
            "test-token",
            OWNER,
            REPO,
            base_url="https://api.github.test",
            http_client=http_client,
        )
        cache = ContentCache(ttl=ttl, clock=clock)
        return GitHubVault(client, cache, vault_path, **kwargs)

    return _make


@pytest.fixture
def vault(make_vault):
    """A GitHubVault rooted at the 'vault' folder of the fake repository."""
    return make_vault()


@pytest.fixture
def spec_vault(http_client, clock, github):
    """A two-note vault at the repository root: a.md and b/c.md."""
    from obsidian_github_mcp.cache import ContentCache
    from obsidian_github_mcp.github import GitHubContentClient
    from obsidian_github_mcp.vault import GitHubVault

    github.files = {
        "a.md": b"Hello world",
        "b/c.md": b"another hello",
    }
    client = GitHubContentClient(
        "test-token", OWNER, REPO, base_url="https://api.github.test", http_client=http_client
    )
    return GitHubVault(client, ContentCache(ttl=300, clock=clock), "")
