"""FastAPI dependency injection definitions."""

from src.codestack.api.dependencies.db import DBSession, get_db_session
from src.codestack.api.dependencies.repositories import SnippetRepo, get_snippet_repository
from src.codestack.api.dependencies.services import SnippetServiceDep, get_snippet_service

__all__ = [
    # Database
    "DBSession",
    "get_db_session",
    # Repositories
    "SnippetRepo",
    "get_snippet_repository",
    # Services
    "SnippetServiceDep",
    "get_snippet_service",
]
