"""Model exports.

Import from here: `from src.codestack.models import Snippet`
"""

from src.codestack.models.snippet import Snippet

__all__ = ["Snippet"]
