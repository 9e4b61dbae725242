from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request

from app.core.config import Settings, get_settings
from app.core.jwt_utils import TokenVerifier
from app.modules.study_buddy.client import TextCompleter
from app.modules.study_buddy.handler import GenerationHandler


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with (falls back to the process-wide ones)."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_completion_client(request: Request) -> TextCompleter:
    return request.app.state.completion_client


def get_token_verifier(request: Request) -> Optional[TokenVerifier]:
    """Identity verifier, or None when the deployment runs without auth."""
    return getattr(request.app.state, "token_verifier", None)


def get_generation_handler(
    settings: Settings = Depends(get_app_settings),
    completer: TextCompleter = Depends(get_completion_client),
    verifier: Optional[TokenVerifier] = Depends(get_token_verifier),
) -> GenerationHandler:
    return GenerationHandler(
        completer,
        verifier,
        auth_required=settings.app.auth_required,
        max_query_length=settings.app.max_query_length,
    )
