"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import SnippetFactory
"""

from tests.factories.base import BaseFactory, utc_now
from tests.factories.snippet import SnippetFactory

__all__ = [
    "BaseFactory",
    "SnippetFactory",
    "utc_now",
]
