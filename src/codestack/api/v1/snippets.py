"""Snippet endpoints.

Request bodies are passed to the service as parsed JSON rather than bound to
schemas here: the service decides the order of the capacity check, field
validation and authorization, and reports every field error at once.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Query, Request, Response, status

from src.codestack.api.dependencies import SnippetServiceDep
from src.codestack.core.rate_limit import limiter, mutation_limit
from src.codestack.schemas import (
    PaginatedResponse,
    SnippetCreated,
    SnippetRead,
    SnippetSummary,
    VerifyModificationCodeResponse,
)

router = APIRouter(prefix="/snippets", tags=["snippets"])

JSONBody = Annotated[Any, Body()]

SNIPPET_EXAMPLE = {
    "id": "0b6f1a52-8a4e-4c1e-9c55-2f1d3e4a5b6c",
    "title": "Debounce helper",
    "description": "Delay a call until input settles",
    "username": "AsyncDaemon",
    "language": "javascript",
    "tags": ["utility", "events"],
    "code": "const debounce = (fn, ms) => { /* ... */ };",
    "created_at": "2025-05-18T03:36:04",
    "updated_at": "2025-05-18T03:36:04",
}


@router.post(
    "",
    response_model=SnippetCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create snippet",
    responses={
        201: {
            "description": "Snippet created. The modification code is only returned here.",
            "content": {
                "application/json": {
                    "example": {**SNIPPET_EXAMPLE, "modification_code": "3f9a1c0b7d2e"}
                }
            },
        },
        400: {"description": "Validation failed"},
        429: {"description": "Rate limit exceeded"},
        503: {"description": "Snippet limit reached"},
    },
)
@limiter.limit(mutation_limit)
async def create_snippet(
    request: Request, service: SnippetServiceDep, payload: JSONBody = None
) -> SnippetCreated:
    """Create a snippet. Username is generated when omitted."""
    snippet = await service.create_snippet(payload)
    return SnippetCreated.model_validate(snippet)


@router.get(
    "",
    response_model=PaginatedResponse[SnippetSummary],
    summary="List snippets",
    description="Filter, sort and paginate snippets. The code body is omitted from list items.",
)
async def list_snippets(
    service: SnippetServiceDep,
    search: Annotated[
        str | None, Query(description="Substring of title, description or username")
    ] = None,
    language: Annotated[str | None, Query(description="Exact language")] = None,
    tag: Annotated[str | None, Query(description="Substring of any tag")] = None,
    sort_by: Annotated[
        str | None,
        Query(description="created_at, updated_at, title, language or username"),
    ] = None,
    order: Annotated[str | None, Query(description="asc or desc (default)")] = None,
    page: Annotated[str | None, Query(description="Page number, from 1")] = None,
    per_page: Annotated[str | None, Query(description="Items per page, 1-100")] = None,
) -> PaginatedResponse[SnippetSummary]:
    """List snippets. Out-of-range or unparseable parameters fall back to defaults."""
    items, meta = await service.list_snippets(
        search=search,
        language=language,
        tag=tag,
        sort_by=sort_by,
        order=order,
        page=page,
        per_page=per_page,
    )
    return PaginatedResponse(
        data=[SnippetSummary.model_validate(s) for s in items],
        pagination=meta,
    )


@router.get(
    "/random",
    response_model=SnippetRead,
    summary="Get a random snippet",
    responses={404: {"description": "No snippets available"}},
)
async def get_random_snippet(service: SnippetServiceDep) -> SnippetRead:
    snippet = await service.get_random_snippet()
    return SnippetRead.model_validate(snippet)


@router.post(
    "/batch-get",
    response_model=list[SnippetRead],
    summary="Get several snippets by id",
    responses={400: {"description": "Missing ids, or no valid id supplied"}},
)
async def batch_get_snippets(
    service: SnippetServiceDep, payload: JSONBody = None
) -> list[SnippetRead]:
    """Fetch snippets by id. Unknown ids are omitted; order is not guaranteed."""
    snippets = await service.batch_get(payload)
    return [SnippetRead.model_validate(s) for s in snippets]


@router.get(
    "/{snippet_id}",
    response_model=SnippetRead,
    summary="Get snippet",
    responses={
        200: {"content": {"application/json": {"example": SNIPPET_EXAMPLE}}},
        400: {"description": "Invalid snippet ID format"},
        404: {"description": "Snippet not found"},
    },
)
async def get_snippet(snippet_id: str, service: SnippetServiceDep) -> SnippetRead:
    snippet = await service.get_snippet(snippet_id)
    return SnippetRead.model_validate(snippet)


@router.put(
    "/{snippet_id}",
    response_model=SnippetRead,
    summary="Update snippet",
    description=(
        "Partial update. Only fields present in the body change; "
        "`modification_code` is required."
    ),
    responses={
        400: {"description": "Invalid id, validation failed, or nothing to update"},
        403: {"description": "Invalid modification code"},
        404: {"description": "Snippet not found"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(mutation_limit)
async def update_snippet(
    request: Request, snippet_id: str, service: SnippetServiceDep, payload: JSONBody = None
) -> SnippetRead:
    snippet = await service.update_snippet(snippet_id, payload)
    return SnippetRead.model_validate(snippet)


@router.delete(
    "/{snippet_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete snippet",
    responses={
        400: {"description": "Invalid id or modification code format"},
        403: {"description": "Invalid modification code"},
        404: {"description": "Snippet not found"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(mutation_limit)
async def delete_snippet(
    request: Request,
    snippet_id: str,
    service: SnippetServiceDep,
    payload: JSONBody = None,
) -> Response:
    await service.delete_snippet(snippet_id, payload if payload is not None else {})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{snippet_id}/verify-modification-code",
    response_model=VerifyModificationCodeResponse,
    summary="Check a modification code",
    description="Always 200 with `verified`, unless the database fails.",
)
async def verify_modification_code(
    request: Request, snippet_id: str, service: SnippetServiceDep
) -> VerifyModificationCodeResponse:
    """Check a modification code without side effects.

    The body is read directly so that a malformed body is just "not verified"
    rather than a 400.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    verified = await service.verify_modification_code(snippet_id, payload)
    return VerifyModificationCodeResponse(verified=verified)
