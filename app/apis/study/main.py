from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from app.apis.deps import get_app_settings, get_generation_handler
from app.core.config import Settings
from app.modules.study_buddy.handler import GenerationHandler
from .schemas import ErrorResponse, GenerateRequest, HealthResponse


router = APIRouter()


_ERRORS = {
    code: {"model": ErrorResponse}
    for code in (
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_405_METHOD_NOT_ALLOWED,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
}


async def _read_json_body(request: Request) -> Any:
    """Parsed request body, or None when it is empty or not JSON."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


@router.post(
    "/api/generate",
    status_code=status.HTTP_200_OK,
    responses=_ERRORS,
    tags=["study"],
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": GenerateRequest.model_json_schema()}
            },
        }
    },
)
async def generate(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    handler: GenerationHandler = Depends(get_generation_handler),
) -> JSONResponse:
    """Generate a bilingual study package for the submitted query.

    The body is validated by the handler rather than by FastAPI so that the
    caller is authenticated before the query is looked at.
    """
    body = await _read_json_body(request)
    result = await handler.handle(body, authorization)
    return JSONResponse(content=result.payload)


@router.get("/api/health", response_model=HealthResponse, tags=["study"])
async def health(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    return HealthResponse(
        status="ok", app=settings.app.name, version=settings.app.version
    )


@router.api_route(
    "/api/generate",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def generate_wrong_method() -> None:
    # Explicit so a static mount at "/" cannot swallow these as 404s
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Only POST allowed",
        headers={"Allow": "POST"},
    )
