"""Snippet service - validation, sanitization, authorization and transactions."""

import secrets
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.codestack.core.config import Settings, get_settings
from src.codestack.core.exceptions import (
    ForbiddenError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    ResourceExhaustedError,
    ValidationFailedError,
    validation_errors_to_fields,
)
from src.codestack.core.logging import bind_snippet_context, get_logger
from src.codestack.core.sanitize import purify_code, strip_markup
from src.codestack.core.validators import is_valid_modification_code, is_valid_uuid
from src.codestack.models import Snippet
from src.codestack.models.base import utc_now
from src.codestack.repositories import SnippetRepository, build_snippet_query, total_pages
from src.codestack.schemas import (
    ModificationCodeRequest,
    PaginationMeta,
    SnippetCreate,
    SnippetUpdate,
)
from src.codestack.services.usernames import generate_modification_code, generate_username

logger = get_logger(__name__)

# Client-facing messages for storage failures, keyed by operation
STORAGE_ERROR_MESSAGES = {
    "list": "Failed to retrieve snippets due to a database issue.",
    "get": "Failed to retrieve snippet due to a database issue.",
    "random": "Failed to retrieve random snippet due to a database issue.",
    "batch_get": "Failed to retrieve snippets by batch.",
    "languages": "Failed to retrieve languages due to a database issue.",
    "tags": "Failed to retrieve tags due to a database issue.",
    "capacity": "Failed to check snippet capacity due to a database issue.",
    "create": "Failed to create snippet due to a database issue.",
    "update": "Failed to update snippet due to a database issue.",
    "delete": "Failed to delete snippet due to a database issue.",
    "verify": "Database error",
}


def _check_sanitized(values: dict[str, Any]) -> dict[str, list[str]]:
    """Required text fields must still be non-empty once markup is removed."""
    errors: dict[str, list[str]] = {}
    for name in ("title", "code", "language"):
        if name in values and values[name] == "":
            errors[name] = [f"{name.capitalize()} cannot be empty."]
    return errors


def _sanitize_description(value: str | None) -> str | None:
    if value is None:
        return None
    return strip_markup(value) or None


def _sanitize_tags(tags: list[str] | None) -> list[str]:
    cleaned = (strip_markup(tag) for tag in tags or [])
    return [tag for tag in cleaned if tag]


class SnippetService:
    """Snippet use cases. Raises domain exceptions, never HTTP responses."""

    def __init__(
        self,
        snippet_repo: SnippetRepository,
        session: AsyncSession,
        settings: Settings | None = None,
    ):
        self.snippet_repo = snippet_repo
        self.session = session
        self.settings = settings or get_settings()

    @asynccontextmanager
    async def _storage(self, operation: str, snippet_id: str | None = None) -> AsyncIterator[None]:
        """Translate storage failures into InternalError, rolling back first.

        The raw driver message is logged but never surfaced to the caller.
        """
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(
                "Storage operation failed",
                operation=operation,
                snippet_id=snippet_id,
                error=str(e),
            )
            await self.session.rollback()
            raise InternalError(STORAGE_ERROR_MESSAGES[operation]) from e

    @staticmethod
    def _require_uuid(snippet_id: str, message: str = "Invalid snippet ID format") -> uuid.UUID:
        if not is_valid_uuid(snippet_id):
            raise InvalidArgumentError(message)
        bind_snippet_context(snippet_id)
        return uuid.UUID(snippet_id)

    async def _authorize(self, id: uuid.UUID, modification_code: str) -> None:
        """Check that the snippet exists and the supplied code matches its own.

        Raises:
            NotFoundError: If the snippet does not exist
            ForbiddenError: If the modification code does not match
        """
        stored = await self.snippet_repo.get_modification_code(id)
        if stored is None:
            raise NotFoundError("Snippet not found")
        if not secrets.compare_digest(stored, modification_code):
            logger.warning("Modification code mismatch", snippet_id=str(id))
            raise ForbiddenError("Invalid modification code")

    # Reads

    async def list_snippets(
        self,
        search: str | None = None,
        language: str | None = None,
        tag: str | None = None,
        sort_by: str | None = None,
        order: str | None = None,
        page: Any = None,
        per_page: Any = None,
    ) -> tuple[list[Snippet], PaginationMeta]:
        """List one page of snippets with filters, sorting and pagination.

        Count and page run as two independent statements, so the totals may
        disagree slightly with the page contents under concurrent writes.
        """
        query = build_snippet_query(search, language, tag, sort_by, order, page, per_page)
        async with self._storage("list"):
            total_items = await self.snippet_repo.count(query)
            items = await self.snippet_repo.page(query)

        logger.info(
            "Listed snippets",
            search=query.search,
            language=query.language,
            tag=query.tag,
            sort_field=query.sort_field,
            descending=query.descending,
            page=query.page,
            per_page=query.per_page,
            total_items=total_items,
        )
        meta = PaginationMeta(
            current_page=query.page,
            per_page=query.per_page,
            total_pages=total_pages(total_items, query.per_page),
            total_items=total_items,
            items_on_page=len(items),
        )
        return items, meta

    async def get_snippet(self, snippet_id: str) -> Snippet:
        id = self._require_uuid(snippet_id)
        async with self._storage("get", snippet_id):
            snippet = await self.snippet_repo.get_by_id(id)
        if snippet is None:
            raise NotFoundError("Snippet not found")
        return snippet

    async def get_random_snippet(self) -> Snippet:
        async with self._storage("random"):
            snippet = await self.snippet_repo.get_random()
        if snippet is None:
            raise NotFoundError("No snippets available")
        return snippet

    async def batch_get(self, payload: Any) -> list[Snippet]:
        """Fetch several snippets by id in one round trip.

        Malformed ids are skipped and unknown ids are simply absent from the
        result.

        Raises:
            InvalidArgumentError: If ``ids`` is missing or not a list, or if
                a non-empty list contains no well-formed id
        """
        ids = payload.get("ids") if isinstance(payload, dict) else None
        if not isinstance(ids, list):
            raise InvalidArgumentError(
                'Missing or invalid "ids" field. It should be an array of snippet IDs.'
            )
        if not ids:
            return []

        valid = [value for value in ids if is_valid_uuid(value)]
        if not valid:
            raise InvalidArgumentError("No valid snippet IDs provided.")

        async with self._storage("batch_get"):
            snippets = await self.snippet_repo.get_batch(valid)
        logger.info(
            "Batch fetched snippets", requested=len(ids), valid=len(valid), found=len(snippets)
        )
        return snippets

    async def list_languages(self) -> list[str]:
        async with self._storage("languages"):
            return await self.snippet_repo.distinct_languages()

    async def list_tags(self) -> list[str]:
        async with self._storage("tags"):
            return await self.snippet_repo.distinct_tags()

    # Writes

    async def create_snippet(self, payload: Any) -> Snippet:
        """Create a snippet and return it together with its modification code.

        The capacity check runs before field validation, so a full store
        answers 503 even for an invalid body.

        Raises:
            ResourceExhaustedError: If the snippet cap has been reached
            ValidationFailedError: If any field is invalid (all reported at once)
            InternalError: On storage failure or if the new row cannot be re-read
        """
        limit = self.settings.max_snippets
        async with self._storage("capacity"):
            current = await self.snippet_repo.count_all()
        if current >= limit:
            logger.warning(
                "Snippet creation denied: limit reached", current_count=current, limit=limit
            )
            raise ResourceExhaustedError(
                f"The maximum number of snippets ({limit}) has been reached. "
                "Please try again later after some snippets have been removed."
            )

        try:
            data = SnippetCreate.model_validate(payload)
        except ValidationError as e:
            errors = validation_errors_to_fields(e.errors())
            logger.warning("Snippet creation validation failed", errors=errors)
            raise ValidationFailedError(errors) from e

        values: dict[str, Any] = {
            "title": strip_markup(data.title),
            "description": _sanitize_description(data.description),
            "code": purify_code(data.code),
            "language": strip_markup(data.language),
            "tags": _sanitize_tags(data.tags),
            "username": strip_markup(data.username) if data.username is not None else "",
        }
        errors = _check_sanitized(values)
        if errors:
            logger.warning("Snippet creation validation failed after sanitization", errors=errors)
            raise ValidationFailedError(errors)

        now = utc_now()
        modification_code = generate_modification_code()
        snippet = Snippet(
            id=uuid.uuid4(),
            title=values["title"],
            description=values["description"],
            username=values["username"] or generate_username(),
            language=values["language"],
            tags=values["tags"],
            code=values["code"],
            modification_code=modification_code,
            created_at=now,
            updated_at=now,
        )
        snippet_id = str(snippet.id)
        bind_snippet_context(snippet_id)

        async with self._storage("create", snippet_id):
            await self.snippet_repo.insert(snippet)
            await self.session.commit()
            created = await self.snippet_repo.get_by_id(snippet.id)

        if created is None:
            logger.error("Created snippet could not be re-read", snippet_id=snippet_id)
            raise InternalError("Failed to retrieve created snippet")

        created.modification_code = modification_code
        logger.info("Snippet created", snippet_id=snippet_id, username=created.username)
        return created

    async def update_snippet(self, snippet_id: str, payload: Any) -> Snippet:
        """Apply a partial update authorized by the snippet's modification code.

        Only keys present in the payload are touched. ``username`` is not
        updatable and is ignored.

        Raises:
            InvalidArgumentError: Malformed id, or nothing to update
            ValidationFailedError: Invalid field values, before or after sanitization
            NotFoundError: Unknown snippet, or the row vanished mid-update
            ForbiddenError: Modification code mismatch
            InternalError: On storage failure
        """
        id = self._require_uuid(snippet_id)

        try:
            data = SnippetUpdate.model_validate(payload)
        except ValidationError as e:
            errors = validation_errors_to_fields(e.errors())
            logger.warning("Snippet update validation failed", snippet_id=snippet_id, errors=errors)
            raise ValidationFailedError(errors) from e

        async with self._storage("update", snippet_id):
            await self._authorize(id, data.modification_code)

        changes: dict[str, Any] = {}
        for name in data.targeted_fields():
            value = getattr(data, name)
            if name == "code":
                changes[name] = purify_code(value)
            elif name == "description":
                changes[name] = _sanitize_description(value)
            elif name == "tags":
                changes[name] = _sanitize_tags(value)
            else:
                changes[name] = strip_markup(value)

        errors = _check_sanitized(changes)
        if errors:
            logger.warning(
                "Snippet update validation failed after sanitization",
                snippet_id=snippet_id,
                errors=errors,
            )
            raise ValidationFailedError(errors)

        if not changes:
            logger.info("No updatable fields provided", snippet_id=snippet_id)
            raise InvalidArgumentError(
                "No updatable fields provided or fields became empty after sanitization."
            )

        async with self._storage("update", snippet_id):
            affected = await self.snippet_repo.update_fields(
                id, changes, utc_now(), modification_code=data.modification_code
            )
            if affected == 0:
                await self.session.rollback()
                logger.warning("Snippet vanished during update", snippet_id=snippet_id)
                raise NotFoundError("Snippet not found or was deleted during the update")
            await self.session.commit()
            updated = await self.snippet_repo.get_by_id(id)

        if updated is None:
            logger.error("Updated snippet could not be re-read", snippet_id=snippet_id)
            raise InternalError("Failed to retrieve updated snippet after update")

        logger.info("Snippet updated", snippet_id=snippet_id, fields=sorted(changes))
        return updated

    async def delete_snippet(self, snippet_id: str, payload: Any) -> None:
        """Delete a snippet authorized by its modification code.

        Raises:
            InvalidArgumentError: Malformed id
            ValidationFailedError: Missing or malformed modification code
            NotFoundError: Unknown snippet, or already deleted
            ForbiddenError: Modification code mismatch
            InternalError: On storage failure
        """
        id = self._require_uuid(snippet_id, "Invalid snippet ID format.")

        try:
            data = ModificationCodeRequest.model_validate(payload)
        except ValidationError as e:
            errors = validation_errors_to_fields(e.errors())
            logger.warning(
                "Snippet deletion validation failed", snippet_id=snippet_id, errors=errors
            )
            raise ValidationFailedError(errors) from e

        async with self._storage("delete", snippet_id):
            await self._authorize(id, data.modification_code)
            affected = await self.snippet_repo.delete(id, data.modification_code)
            if affected == 0:
                await self.session.rollback()
                logger.warning("Snippet already deleted", snippet_id=snippet_id)
                raise NotFoundError("Failed to delete snippet or snippet was already deleted.")
            await self.session.commit()

        logger.info("Snippet deleted", snippet_id=snippet_id)

    async def verify_modification_code(self, snippet_id: str, payload: Any) -> bool:
        """Report whether ``payload['modification_code']`` matches, without side effects.

        Every client-side problem (bad id, bad code format, unknown snippet,
        mismatch) is simply ``False``. Only storage failures raise.
        """
        if not is_valid_uuid(snippet_id):
            return False
        code = payload.get("modification_code") if isinstance(payload, dict) else None
        if not is_valid_modification_code(code):
            return False

        bind_snippet_context(snippet_id)
        async with self._storage("verify", snippet_id):
            stored = await self.snippet_repo.get_modification_code(uuid.UUID(snippet_id))
        verified = stored is not None and secrets.compare_digest(stored, code)
        logger.info("Modification code checked", snippet_id=snippet_id, verified=verified)
        return verified
