"""
Remote vault access for Obsidian GitHub MCP Server.

Contains the GitHubVault class, which resolves vault-relative paths inside the
repository, walks the vault tree, and fetches note bodies through the content
cache.
"""

import asyncio
import base64
import binascii

import structlog

from .cache import CacheKey, ContentCache
from .github import GitHubContentClient
from .models import NoteRef, RepoEntry, VaultWalk
from .utils import (
    NoteNotFoundError,
    RemoteFetchError,
    VaultError,
    join_repo_path,
    normalize_vault_path,
)

logger = structlog.get_logger(__name__)


class GitHubVault:
    """A Markdown vault stored under ``vault_path`` in a GitHub repository.

    Every remote call goes through a semaphore capped at
    ``max_concurrent_fetches``. File bodies are cached per
    ``(owner, repo, path)``; concurrent fetches of one path share a lock so
    only the first caller hits GitHub.
    """

    def __init__(
        self,
        client: GitHubContentClient,
        cache: ContentCache,
        vault_path: str = "",
        *,
        strict_walk: bool = False,
        max_concurrent_fetches: int = 8,
    ):
        self.client = client
        self.cache = cache
        self.vault_path = normalize_vault_path(vault_path)
        self.strict_walk = strict_walk
        self._semaphore = asyncio.Semaphore(max_concurrent_fetches)
        self._fetch_locks: dict[CacheKey, asyncio.Lock] = {}
        # Callers holding or waiting on each lock; the lock is dropped at zero
        self._lock_users: dict[CacheKey, int] = {}

    def repo_path(self, path: str) -> str:
        """Map a normalized vault-relative path to its repository path."""
        return join_repo_path(self.vault_path, path)

    def cache_key(self, path: str) -> CacheKey:
        return CacheKey(self.client.owner, self.client.repo, path)

    async def _get_content(self, path: str) -> list[RepoEntry] | RepoEntry:
        async with self._semaphore:
            try:
                return await self.client.get_content(self.repo_path(path))
            except NoteNotFoundError as exc:
                raise NoteNotFoundError(path) from exc

    async def list_directory(self, path: str = "") -> list[RepoEntry]:
        """List the immediate children of a vault folder.

        A path that names a single file yields a one-element list.

        Raises:
            PathValidationError: If the path is malformed
            NoteNotFoundError: If the folder does not exist
            RemoteFetchError: If GitHub cannot be reached
        """
        return await self._list(normalize_vault_path(path))

    async def _list(self, path: str) -> list[RepoEntry]:
        contents = await self._get_content(path)
        if isinstance(contents, list):
            return contents
        return [contents]

    async def enumerate_markdown_files(self) -> VaultWalk:
        """Recursively collect every ``.md`` file in the vault, depth first.

        Entries keep the order GitHub lists them in. A failure listing the
        vault root always propagates. A failure listing a sub-folder
        propagates in strict mode; otherwise the folder is recorded in
        ``skipped_folders`` and contributes no notes.
        """
        walk = VaultWalk()

        async def process_directory(dir_path: str) -> None:
            try:
                # Repository paths are listed verbatim
                entries = await self._list(dir_path)
            except VaultError as e:
                if not dir_path or self.strict_walk:
                    raise
                logger.warning("folder_listing_skipped", folder=dir_path, error=str(e))
                walk.skipped_folders.append(dir_path)
                return

            for entry in entries:
                entry_path = join_repo_path(dir_path, entry.name)
                if entry.is_markdown:
                    walk.notes.append(NoteRef(path=entry_path, name=entry.name))
                elif entry.is_dir:
                    await process_directory(entry_path)

        await process_directory("")
        logger.debug(
            "vault_enumerated",
            notes=len(walk.notes),
            skipped_folders=len(walk.skipped_folders),
        )
        return walk

    async def get_file_content(self, path: str) -> str:
        """Return the UTF-8 text of a note, from cache when fresh.

        Raises:
            PathValidationError: If the path is malformed
            NoteNotFoundError: If the path is absent or not a file
            RemoteFetchError: If GitHub cannot be reached or the body cannot be decoded
        """
        path = normalize_vault_path(path)
        if not path:
            raise NoteNotFoundError(path, "is not a file")
        return await self._read_cached(path)

    async def read_note(self, ref: NoteRef) -> str:
        """Return the text of a note found by the walker.

        ``ref.path`` is used verbatim: it already is the repository's own
        spelling, which normalization could alter.
        """
        return await self._read_cached(ref.path)

    async def _read_cached(self, path: str) -> str:
        key = self.cache_key(path)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("cache_hit", path=path)
            return cached

        lock = self._fetch_locks.get(key)
        if lock is None:
            lock = self._fetch_locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                # Another caller may have filled the entry while we waited.
                cached = self.cache.get(key)
                if cached is not None:
                    return cached

                content = await self._fetch_file(path)
                self.cache.put(key, content)
                logger.debug("note_fetched", path=path, chars=len(content))
                return content
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._fetch_locks[key]

    async def _fetch_file(self, path: str) -> str:
        entry = await self._get_content(path)
        if isinstance(entry, list) or entry.type != "file":
            raise NoteNotFoundError(path, "is not a file")

        if entry.encoding == "base64" and entry.content is not None:
            try:
                raw = base64.b64decode(entry.content)
            except (binascii.Error, ValueError) as exc:
                raise RemoteFetchError("Invalid base64 content", path=path) from exc
        else:
            # GitHub leaves the inline body empty for files over 1MB.
            raw = await self._get_raw(path)

        return raw.decode("utf-8", errors="replace")

    async def _get_raw(self, path: str) -> bytes:
        async with self._semaphore:
            try:
                return await self.client.get_raw(self.repo_path(path))
            except NoteNotFoundError as exc:
                raise NoteNotFoundError(path) from exc
