# Obsidian GitHub MCP Server
#
# Modular package structure:
# - config.py: Settings loaded from the environment
# - logging.py: structlog configuration
# - utils.py: Exceptions and vault path helpers
# - models.py: Pydantic models for entries, notes, results and tool arguments
# - github.py: GitHubContentClient for the repository contents API
# - cache.py: ContentCache class for TTL caching of note bodies
# - vault.py: GitHubVault class (tree walking and cache-aware file fetch)
# - search.py: Note scoring and vault search
# - tools.py: MCP tool dispatcher, rendering and server factory
# - main.py: Entry point and server initialization

__version__ = "1.0.0"
