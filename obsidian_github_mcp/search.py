"""
Search functions for Obsidian GitHub MCP Server.

Contains the note scorer and the vault-wide search built on top of it.
"""

import asyncio

import structlog

from .models import NoteRef, SearchReport, SearchResult
from .utils import SearchPartialFailure, SearchTimeoutError, VaultError
from .vault import GitHubVault

logger = structlog.get_logger(__name__)

NAME_MATCH_SCORE = 10
SNIPPET_BEFORE = 100
SNIPPET_AFTER = 200
FALLBACK_SNIPPET_LENGTH = 200


def score_note(query: str, name: str, content: str) -> tuple[int, str] | None:
    """Score one note against a query.

    Matching is case-insensitive and literal: a name containing the query
    adds 10, and every non-overlapping occurrence in the content adds 1.

    Returns:
        ``(score, snippet)`` or None when the note does not match
    """
    query_lower = query.lower()
    if not query_lower.strip():
        return None

    content_lower = content.lower()

    score = 0
    if query_lower in name.lower():
        score += NAME_MATCH_SCORE
    score += content_lower.count(query_lower)

    if score == 0:
        return None

    # Name-only matches (find() == -1) take the snippet from the top of the note
    match_idx = content_lower.find(query_lower)
    start = max(0, match_idx - SNIPPET_BEFORE)
    end = min(len(content), match_idx + SNIPPET_AFTER)
    snippet = content[start:end].strip()
    if not snippet:
        snippet = content[:FALLBACK_SNIPPET_LENGTH] + "..."

    return score, snippet


async def _score_ref(vault: GitHubVault, ref: NoteRef, query: str) -> SearchResult | None:
    try:
        content = await vault.read_note(ref)
    except VaultError as e:
        raise SearchPartialFailure(ref.path, e) from e

    scored = score_note(query, ref.name, content)
    if scored is None:
        return None
    score, snippet = scored
    return SearchResult(path=ref.path, name=ref.name, snippet=snippet, score=score)


async def _search(vault: GitHubVault, query: str, limit: int) -> SearchReport:
    walk = await vault.enumerate_markdown_files()

    outcomes = await asyncio.gather(
        *(_score_ref(vault, ref, query) for ref in walk.notes),
        return_exceptions=True,
    )

    results: list[SearchResult] = []
    skipped: list[str] = []
    for ref, outcome in zip(walk.notes, outcomes):
        if isinstance(outcome, SearchPartialFailure):
            logger.warning("note_fetch_failed", path=ref.path, error=str(outcome.cause))
            skipped.append(ref.path)
        elif isinstance(outcome, BaseException):
            raise outcome
        elif outcome is not None:
            results.append(outcome)

    # Stable: ties keep enumeration order
    results.sort(key=lambda r: r.score, reverse=True)
    final_results = results[:limit]

    logger.info(
        "search_completed",
        query=query,
        scanned=len(walk.notes),
        matched=len(results),
        returned=len(final_results),
        skipped_notes=len(skipped),
        skipped_folders=len(walk.skipped_folders),
    )
    return SearchReport(
        query=query,
        results=final_results,
        skipped_notes=skipped,
        skipped_folders=walk.skipped_folders,
    )


async def search_notes(
    vault: GitHubVault,
    query: str,
    limit: int = 10,
    timeout: float | None = None,
) -> SearchReport:
    """Search every note in the vault by filename and content.

    Notes that cannot be fetched are skipped and listed in the report.

    Raises:
        SearchTimeoutError: If the search does not finish within ``timeout`` seconds
        VaultError: If the vault root cannot be listed (or any folder, in strict mode)
    """
    if limit < 1:
        return SearchReport(query=query, results=[])

    try:
        return await asyncio.wait_for(_search(vault, query, limit), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise SearchTimeoutError(f"Search for '{query}' timed out after {timeout:g}s") from exc
