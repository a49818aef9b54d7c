"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.codestack.api.dependencies.db import DBSession
from src.codestack.repositories import SnippetRepository


def get_snippet_repository(session: DBSession) -> SnippetRepository:
    """Get snippet repository bound to the request session."""
    return SnippetRepository(session)


SnippetRepo = Annotated[SnippetRepository, Depends(get_snippet_repository)]
