"""Request/response schemas."""

from src.codestack.schemas.pagination import PaginatedResponse, PaginationMeta
from src.codestack.schemas.snippet import (
    UPDATABLE_FIELDS,
    ModificationCodeRequest,
    SnippetCreate,
    SnippetCreated,
    SnippetRead,
    SnippetSummary,
    SnippetUpdate,
    VerifyModificationCodeResponse,
)

__all__ = [
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    # Snippets
    "UPDATABLE_FIELDS",
    "ModificationCodeRequest",
    "SnippetCreate",
    "SnippetCreated",
    "SnippetRead",
    "SnippetSummary",
    "SnippetUpdate",
    "VerifyModificationCodeResponse",
]
