"""
Pydantic models for Obsidian GitHub MCP Server.

Contains data models for repository entries, note references, search results,
and the argument schemas of the three MCP tools.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils import is_markdown_name


class RepoEntry(BaseModel):
    """Model for one record of the GitHub repository contents API."""

    model_config = ConfigDict(extra="ignore")

    name: str
    path: str
    type: Literal["file", "dir", "symlink", "submodule"]
    size: int = 0
    content: str | None = None
    encoding: str | None = None

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"

    @property
    def is_markdown(self) -> bool:
        return self.type == "file" and is_markdown_name(self.name)


class NoteRef(BaseModel):
    """Model for a Markdown note found in the vault."""

    model_config = ConfigDict(frozen=True)

    path: str
    name: str


class VaultWalk(BaseModel):
    """Model for the outcome of a recursive vault enumeration."""

    notes: list[NoteRef] = []
    skipped_folders: list[str] = []


class SearchResult(BaseModel):
    """Model for a search result."""

    path: str
    name: str
    snippet: str
    score: int = Field(ge=0)


class SearchReport(BaseModel):
    """Model for the outcome of a search call."""

    query: str
    results: list[SearchResult]
    skipped_notes: list[str] = []
    skipped_folders: list[str] = []


# ============== Tool Arguments ==============

class SearchNotesArgs(BaseModel):
    """Arguments of the search_notes tool."""

    model_config = ConfigDict(extra="ignore")

    query: str = Field(min_length=1, description="Search query to find notes")
    limit: int = Field(default=10, ge=1, description="Maximum number of results to return")

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("query must not be blank")
        return v


class GetNoteArgs(BaseModel):
    """Arguments of the get_note tool."""

    model_config = ConfigDict(extra="ignore")

    path: str = Field(min_length=1, description="Path to the specific note file")


class ListNotesArgs(BaseModel):
    """Arguments of the list_notes tool."""

    model_config = ConfigDict(extra="ignore")

    folder: str | None = Field(default=None, description="Specific folder to list notes from")
