"""Repository layer - data access abstraction."""

from src.codestack.repositories.filters import (
    Predicate,
    SnippetQuery,
    build_snippet_query,
    total_pages,
)
from src.codestack.repositories.snippet import SnippetRepository

__all__ = [
    "Predicate",
    "SnippetQuery",
    "SnippetRepository",
    "build_snippet_query",
    "total_pages",
]
