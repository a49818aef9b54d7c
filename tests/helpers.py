"""In-memory stand-ins for the storage layer.

``InMemorySnippetRepository`` mirrors ``SnippetRepository`` operation for
operation, interpreting the normalised criteria of a ``SnippetQuery`` the way
the SQL does, so service and API tests run without PostgreSQL.
"""

import random
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.exc import OperationalError

from src.codestack.core.tag_codec import encode_tags
from src.codestack.core.validators import is_valid_uuid
from src.codestack.models import Snippet
from src.codestack.repositories.filters import SnippetQuery

LIST_FIELDS = (
    "id",
    "title",
    "description",
    "username",
    "language",
    "tags",
    "created_at",
    "updated_at",
)
DETAIL_FIELDS = (*LIST_FIELDS, "code")
STORED_FIELDS = (*DETAIL_FIELDS, "modification_code")


def _copy(snippet: Snippet, fields: Sequence[str]) -> Snippet:
    data = {name: getattr(snippet, name) for name in fields}
    data["tags"] = list(snippet.tags or [])
    return Snippet(**data)


class FakeSession:
    """Records transaction calls made by the service."""

    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class InMemorySnippetRepository:
    """Dict-backed snippet repository.

    Put an operation name in ``fail_on`` to make it raise a storage error.
    """

    def __init__(self, snippets: Sequence[Snippet] = ()) -> None:
        self.rows: dict[UUID, Snippet] = {s.id: _copy(s, STORED_FIELDS) for s in snippets}
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    def _matches(self, snippet: Snippet, query: SnippetQuery) -> bool:
        if query.search is not None:
            term = query.search.lower()
            haystacks = (snippet.title, snippet.description or "", snippet.username)
            if not any(term in value.lower() for value in haystacks):
                return False
        if query.language is not None and snippet.language != query.language:
            return False
        serialized = encode_tags(snippet.tags or []).lower()
        if query.tag is not None and query.tag.lower() not in serialized:
            return False
        return True

    def _filtered(self, query: SnippetQuery) -> list[Snippet]:
        return [s for s in self.rows.values() if self._matches(s, query)]

    async def count(self, query: SnippetQuery) -> int:
        self._enter("count")
        return len(self._filtered(query))

    async def page(self, query: SnippetQuery) -> list[Snippet]:
        self._enter("page")
        rows = sorted(
            self._filtered(query),
            key=lambda s: getattr(s, query.sort_field),
            reverse=query.descending,
        )
        window = rows[query.offset : query.offset + query.limit]
        return [_copy(s, LIST_FIELDS) for s in window]

    async def count_all(self) -> int:
        self._enter("count_all")
        return len(self.rows)

    async def get_by_id(self, id: UUID) -> Snippet | None:
        self._enter("get_by_id")
        snippet = self.rows.get(id)
        return _copy(snippet, DETAIL_FIELDS) if snippet is not None else None

    async def get_random(self) -> Snippet | None:
        self._enter("get_random")
        if not self.rows:
            return None
        return _copy(random.choice(list(self.rows.values())), DETAIL_FIELDS)

    async def get_batch(self, ids: Sequence[Any]) -> list[Snippet]:
        self._enter("get_batch")
        wanted = {UUID(value) for value in ids if is_valid_uuid(value)}
        return [_copy(s, DETAIL_FIELDS) for id, s in self.rows.items() if id in wanted]

    async def get_modification_code(self, id: UUID) -> str | None:
        self._enter("get_modification_code")
        snippet = self.rows.get(id)
        return snippet.modification_code if snippet is not None else None

    async def insert(self, snippet: Snippet) -> None:
        self._enter("insert")
        self.rows[snippet.id] = _copy(snippet, STORED_FIELDS)

    async def update_fields(
        self,
        id: UUID,
        changes: Mapping[str, Any],
        updated_at: datetime,
        modification_code: str | None = None,
    ) -> int:
        self._enter("update_fields")
        snippet = self.rows.get(id)
        if snippet is None:
            return 0
        if modification_code is not None and snippet.modification_code != modification_code:
            return 0
        for name, value in changes.items():
            setattr(snippet, name, list(value or []) if name == "tags" else value)
        snippet.updated_at = updated_at
        return 1

    async def delete(self, id: UUID, modification_code: str) -> int:
        self._enter("delete")
        snippet = self.rows.get(id)
        if snippet is None or snippet.modification_code != modification_code:
            return 0
        del self.rows[id]
        return 1

    async def distinct_languages(self) -> list[str]:
        self._enter("distinct_languages")
        return sorted({s.language for s in self.rows.values() if s.language})

    async def distinct_tags(self) -> list[str]:
        self._enter("distinct_tags")
        return sorted({tag for s in self.rows.values() for tag in s.tags or [] if tag})
