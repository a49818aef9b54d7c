"""Filter, sort and pagination builder for snippet list queries.

Turns the raw (string) query parameters of a list request into parameterised
SQL fragments. User input only ever reaches the database as bound parameters;
the single piece of text spliced into SQL is a column name from a fixed
allow-list.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Final

from src.codestack.core.config import get_settings

SORTABLE_FIELDS: Final[frozenset[str]] = frozenset(
    {"created_at", "updated_at", "title", "language", "username"}
)
DEFAULT_SORT_FIELD: Final[str] = "created_at"
DEFAULT_PAGE: Final[int] = 1
# Largest OFFSET PostgreSQL accepts (bigint)
MAX_OFFSET: Final[int] = 2**63 - 1


@dataclass(frozen=True)
class Predicate:
    """A single WHERE fragment together with the parameters it binds."""

    sql: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SnippetQuery:
    """Normalised list criteria, ready to be rendered into SQL.

    ``search``, ``language`` and ``tag`` hold the trimmed criteria actually
    applied (``None`` when absent or blank).
    """

    predicates: tuple[Predicate, ...]
    sort_field: str
    descending: bool
    page: int
    per_page: int
    search: str | None = None
    language: str | None = None
    tag: str | None = None

    @property
    def where_clause(self) -> str:
        """``WHERE a AND b ...`` or an empty string when nothing filters."""
        if not self.predicates:
            return ""
        return "WHERE " + " AND ".join(p.sql for p in self.predicates)

    @property
    def order_clause(self) -> str:
        return f"ORDER BY {self.sort_field} {'DESC' if self.descending else 'ASC'}"

    @property
    def limit(self) -> int:
        return self.per_page

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def params(self) -> dict[str, Any]:
        """Bound parameters of every predicate (without limit/offset)."""
        merged: dict[str, Any] = {}
        for predicate in self.predicates:
            merged.update(predicate.params)
        return merged


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _clamp_int(raw: Any, default: int, minimum: int, maximum: int | None = None) -> int:
    """Parse an integer parameter, falling back to ``default`` when unparseable."""
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    value = max(value, minimum)
    if maximum is not None:
        value = min(value, maximum)
    return value


def build_snippet_query(
    search: str | None = None,
    language: str | None = None,
    tag: str | None = None,
    sort_by: str | None = None,
    order: str | None = None,
    page: Any = None,
    per_page: Any = None,
) -> SnippetQuery:
    """Build the normalised query for a snippet list request.

    Never raises: unknown sort fields fall back to ``created_at``, anything
    other than ``asc`` sorts descending, and page numbers are clamped so the
    resulting OFFSET still fits a bigint.
    """
    settings = get_settings()
    predicates: list[Predicate] = []

    search = _clean(search)
    if search is not None:
        predicates.append(
            Predicate(
                "(title ILIKE :search OR description ILIKE :search OR username ILIKE :search)",
                {"search": f"%{search}%"},
            )
        )

    language = _clean(language)
    if language is not None:
        predicates.append(Predicate("language = :language", {"language": language}))

    # Substring match over the serialised array, so "py" also hits "python"
    tag = _clean(tag)
    if tag is not None:
        predicates.append(Predicate("tags::text ILIKE :tag", {"tag": f"%{tag}%"}))

    sort_field = (sort_by or "").strip().lower()
    if sort_field not in SORTABLE_FIELDS:
        sort_field = DEFAULT_SORT_FIELD

    descending = (order or "").strip().lower() != "asc"

    limit = _clamp_int(per_page, settings.default_per_page, 1, settings.max_per_page)
    last_page = MAX_OFFSET // limit + 1

    return SnippetQuery(
        predicates=tuple(predicates),
        sort_field=sort_field,
        descending=descending,
        page=_clamp_int(page, DEFAULT_PAGE, 1, last_page),
        per_page=limit,
        search=search,
        language=language,
        tag=tag,
    )


def total_pages(total_items: int, per_page: int) -> int:
    """Number of pages needed for ``total_items`` (0 for an empty result)."""
    if total_items <= 0:
        return 0
    return math.ceil(total_items / per_page)
