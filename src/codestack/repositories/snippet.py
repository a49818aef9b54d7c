"""Repository for the Snippet entity.

Every statement is written out with ``text()`` because tags cross the
database boundary as PostgreSQL array literals: they are encoded with
``encode_tags`` and cast server-side on the way in, and selected as
``tags::text`` and decoded with ``decode_tags`` on the way out.
"""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.codestack.core.tag_codec import decode_tags, encode_tags
from src.codestack.core.validators import is_valid_uuid
from src.codestack.models import Snippet
from src.codestack.repositories.filters import SnippetQuery
from src.codestack.schemas.snippet import UPDATABLE_FIELDS

TABLE = "code_snippets"
TAGS_PARAM = "CAST(CAST(:tags AS TEXT) AS TEXT[])"

LIST_COLUMNS = (
    "id, title, description, username, language, tags::text AS tags, created_at, updated_at"
)
DETAIL_COLUMNS = (
    "id, title, description, username, language, tags::text AS tags, code, created_at, updated_at"
)


def _to_snippet(row: Mapping[str, Any]) -> Snippet:
    data = dict(row)
    data["tags"] = decode_tags(data.get("tags"))
    return Snippet(**data)


class SnippetRepository:
    """Data access for the ``code_snippets`` table.

    Repositories handle data access only. Transaction control (commit)
    is done in the service layer.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def count(self, query: SnippetQuery) -> int:
        """Count snippets matching the query's filters."""
        result = await self.session.execute(
            text(f"SELECT COUNT(*) FROM {TABLE} {query.where_clause}"),
            query.params,
        )
        return int(result.scalar_one())

    async def page(self, query: SnippetQuery) -> list[Snippet]:
        """Fetch one page of list rows (without the code body)."""
        result = await self.session.execute(
            text(
                f"SELECT {LIST_COLUMNS} FROM {TABLE} {query.where_clause} "
                f"{query.order_clause} LIMIT :limit OFFSET :offset"
            ),
            {**query.params, "limit": query.limit, "offset": query.offset},
        )
        return [_to_snippet(row) for row in result.mappings()]

    async def count_all(self) -> int:
        result = await self.session.execute(text(f"SELECT COUNT(*) FROM {TABLE}"))
        return int(result.scalar_one())

    async def get_by_id(self, id: UUID) -> Snippet | None:
        result = await self.session.execute(
            text(f"SELECT {DETAIL_COLUMNS} FROM {TABLE} WHERE id = :id"),
            {"id": id},
        )
        row = result.mappings().first()
        return _to_snippet(row) if row is not None else None

    async def get_random(self) -> Snippet | None:
        """Pick one snippet uniformly at random, or None when the table is empty."""
        result = await self.session.execute(
            text(f"SELECT {DETAIL_COLUMNS} FROM {TABLE} ORDER BY RANDOM() LIMIT 1")
        )
        row = result.mappings().first()
        return _to_snippet(row) if row is not None else None

    async def get_batch(self, ids: Sequence[Any]) -> list[Snippet]:
        """Fetch the snippets whose ids appear in ``ids``.

        Malformed ids are dropped. Missing ids are silently absent from the
        result and the order of the result is not guaranteed.
        """
        valid = [UUID(value) for value in ids if is_valid_uuid(value)]
        if not valid:
            return []

        params = {f"id_{i}": value for i, value in enumerate(valid)}
        placeholders = ", ".join(f":{name}" for name in params)
        result = await self.session.execute(
            text(f"SELECT {DETAIL_COLUMNS} FROM {TABLE} WHERE id IN ({placeholders})"),
            params,
        )
        return [_to_snippet(row) for row in result.mappings()]

    async def get_modification_code(self, id: UUID) -> str | None:
        result = await self.session.execute(
            text(f"SELECT modification_code FROM {TABLE} WHERE id = :id"),
            {"id": id},
        )
        return result.scalar_one_or_none()

    async def insert(self, snippet: Snippet) -> None:
        """Insert a snippet (no commit)."""
        await self.session.execute(
            text(
                f"INSERT INTO {TABLE} (id, title, description, username, language, tags, "
                "code, modification_code, created_at, updated_at) "
                f"VALUES (:id, :title, :description, :username, :language, {TAGS_PARAM}, "
                ":code, :modification_code, :created_at, :updated_at)"
            ),
            {
                "id": snippet.id,
                "title": snippet.title,
                "description": snippet.description,
                "username": snippet.username,
                "language": snippet.language,
                "tags": encode_tags(snippet.tags or []),
                "code": snippet.code,
                "modification_code": snippet.modification_code,
                "created_at": snippet.created_at,
                "updated_at": snippet.updated_at,
            },
        )

    async def update_fields(
        self,
        id: UUID,
        changes: Mapping[str, Any],
        updated_at: datetime,
        modification_code: str | None = None,
    ) -> int:
        """Apply ``changes`` in one UPDATE and return the affected row count.

        Only keys of ``changes`` are written (plus ``updated_at``). When
        ``modification_code`` is given the row must still carry it.

        Raises:
            ValueError: If ``changes`` names a column that cannot be updated.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update columns: {', '.join(sorted(unknown))}")

        assignments: list[str] = []
        params: dict[str, Any] = {"id": id, "updated_at": updated_at}
        for column in UPDATABLE_FIELDS:
            if column not in changes:
                continue
            if column == "tags":
                assignments.append(f"tags = {TAGS_PARAM}")
                params["tags"] = encode_tags(changes["tags"] or [])
            else:
                assignments.append(f"{column} = :{column}")
                params[column] = changes[column]
        assignments.append("updated_at = :updated_at")

        where = "id = :id"
        if modification_code is not None:
            where += " AND modification_code = :modification_code"
            params["modification_code"] = modification_code

        result = await self.session.execute(
            text(f"UPDATE {TABLE} SET {', '.join(assignments)} WHERE {where}"),
            params,
        )
        return result.rowcount  # type: ignore[attr-defined]

    async def delete(self, id: UUID, modification_code: str) -> int:
        """Delete the snippet only if the modification code still matches."""
        result = await self.session.execute(
            text(f"DELETE FROM {TABLE} WHERE id = :id AND modification_code = :modification_code"),
            {"id": id, "modification_code": modification_code},
        )
        return result.rowcount  # type: ignore[attr-defined]

    async def distinct_languages(self) -> list[str]:
        result = await self.session.execute(
            text(
                f"SELECT DISTINCT language FROM {TABLE} "
                "WHERE language IS NOT NULL AND language <> '' ORDER BY language ASC"
            )
        )
        return list(result.scalars())

    async def distinct_tags(self) -> list[str]:
        result = await self.session.execute(
            text(
                f"SELECT DISTINCT t.tag FROM {TABLE} cs, UNNEST(cs.tags) AS t(tag) "
                "WHERE t.tag IS NOT NULL AND t.tag <> '' ORDER BY t.tag ASC"
            )
        )
        return list(result.scalars())
