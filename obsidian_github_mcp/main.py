"""
Main entry point for Obsidian GitHub MCP Server.

This module provides the main() function and server initialization.
"""

import asyncio
import sys

from mcp.server.stdio import stdio_server
from pydantic import ValidationError

from .cache import ContentCache
from .config import REQUIRED_ENV_VARS, Settings, get_settings
from .github import GitHubContentClient
from .logging import configure_logging, get_logger
from .tools import create_server
from .vault import GitHubVault

logger = get_logger(__name__)


def load_settings() -> Settings | None:
    """Load settings, logging which required variables are missing on failure."""
    try:
        return get_settings()
    except ValidationError as e:
        missing = sorted({
            str(err["loc"][0]).upper()
            for err in e.errors()
            if err["loc"] and str(err["loc"][0]).upper() in REQUIRED_ENV_VARS
        })
        logger.error("missing_configuration", missing=missing, errors=e.error_count())
        return None


async def serve(settings: Settings) -> None:
    """Run the MCP server on stdio until the client disconnects."""
    cache = ContentCache(ttl=settings.cache_ttl, max_entries=settings.cache_max_entries)

    async with GitHubContentClient(
        settings.github_token.get_secret_value(),
        settings.repo_owner,
        settings.repo_name,
        ref=settings.github_ref,
        base_url=settings.github_api_url,
        timeout=settings.request_timeout,
    ) as client:
        vault = GitHubVault(
            client,
            cache,
            settings.vault_path,
            strict_walk=settings.strict_walk,
            max_concurrent_fetches=settings.max_concurrent_fetches,
        )
        server = create_server(vault, search_timeout=settings.search_timeout)

        logger.info(
            "server_starting",
            repo=f"{settings.repo_owner}/{settings.repo_name}",
            vault_path=settings.vault_path or "/",
            ref=settings.github_ref,
        )
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())


def main():
    """Main entry point."""
    configure_logging()

    settings = load_settings()
    if settings is None:
        sys.exit(1)

    configure_logging(settings.log_level)
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
