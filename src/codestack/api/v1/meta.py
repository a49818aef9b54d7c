"""Metadata endpoints: distinct languages and tags in use."""

from fastapi import APIRouter

from src.codestack.api.dependencies import SnippetServiceDep

router = APIRouter(tags=["meta"])


@router.get(
    "/languages",
    response_model=list[str],
    summary="List languages",
    description="Distinct non-empty languages across all snippets, ascending.",
)
async def list_languages(service: SnippetServiceDep) -> list[str]:
    return await service.list_languages()


@router.get(
    "/tags",
    response_model=list[str],
    summary="List tags",
    description="Distinct non-empty tags across all snippets, ascending.",
)
async def list_tags(service: SnippetServiceDep) -> list[str]:
    return await service.list_tags()
