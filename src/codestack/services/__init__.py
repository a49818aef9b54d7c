from src.codestack.services.snippet_service import SnippetService
from src.codestack.services.usernames import generate_modification_code, generate_username

__all__ = ["SnippetService", "generate_modification_code", "generate_username"]
