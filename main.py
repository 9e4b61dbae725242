from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from app.apis.study.main import router as study_router
from app.core.config import Settings, get_settings
from app.core.errors import BadInput, StudyBuddyError
from app.core.jwt_utils import JWTVerifier
from app.core.logging import get_logger, setup_logging
from app.modules.study_buddy.client import CompletionClient

logger = get_logger(__name__)


def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StudyBuddyError)
    async def study_buddy_error(request: Request, exc: StudyBuddyError):
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return _error(exc.status_code, exc.public_message, headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = str(exc.detail)
        if (
            exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
            and request.url.path == "/api/generate"
        ):
            message = "Only POST allowed"
        return _error(exc.status_code, message, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, BadInput.default_message)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR, StudyBuddyError.default_message
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging()

    app = FastAPI(title=settings.app.name, version=settings.app.version)

    app.state.settings = settings
    app.state.completion_client = CompletionClient(settings.completion)
    app.state.token_verifier = None
    if settings.app.auth_required:
        verifier = JWTVerifier(settings.jwt)
        if not verifier.configured:
            logger.warning(
                "AUTH_REQUIRED is on but no JWT_SECRET/JWT_PUBLIC_KEY/JWT_JWKS is set; "
                "every request will be rejected"
            )
        app.state.token_verifier = verifier
    if not app.state.completion_client.configured:
        logger.warning(
            "No API key for model provider %r; generation requests will fail",
            settings.completion.model_provider,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_error_handlers(app)
    app.include_router(study_router)

    # Serve the pre-built front end, if present
    static_dir = settings.app.static_dir
    if static_dir and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app


app = create_app()


if __name__ == "__main__":
    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=get_settings().app.port,
            reload=not get_settings().app.is_production,
        )
    except Exception as e:
        print(f"An error occurred when starting the server: {e}.")
