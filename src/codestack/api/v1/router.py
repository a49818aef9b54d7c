from typing import Any

from fastapi import APIRouter, Request

from src.codestack.api.v1 import meta, snippets

api_router = APIRouter(prefix="/api")
api_router.include_router(snippets.router)
api_router.include_router(meta.router)


@api_router.get("", tags=["meta"], summary="API index")
async def api_index(request: Request) -> dict[str, Any]:
    """List the endpoint categories, as absolute URLs for the current host."""
    base_url = str(request.base_url).rstrip("/")
    return {
        "message": "Welcome to the CodeStack API base. Please use specific endpoints.",
        "available_categories": [
            f"{base_url}/api/snippets",
            f"{base_url}/api/languages",
            f"{base_url}/api/tags",
        ],
    }
