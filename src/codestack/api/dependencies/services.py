"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.codestack.api.dependencies.db import DBSession
from src.codestack.api.dependencies.repositories import SnippetRepo
from src.codestack.services import SnippetService


def get_snippet_service(snippet_repo: SnippetRepo, session: DBSession) -> SnippetService:
    """Get snippet service."""
    return SnippetService(snippet_repo, session)


SnippetServiceDep = Annotated[SnippetService, Depends(get_snippet_service)]
