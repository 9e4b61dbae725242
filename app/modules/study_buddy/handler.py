"""Request handler for study package generation.

Walks one request through a fixed sequence of states:

    unauthenticated -> authenticating -> validating_input -> prompting
        -> awaiting_completion -> extracting -> validating -> responding

ending in ``success`` or ``failed``. Nothing is retried; the first failure is
terminal, logged once with its cause, and surfaced as a ``StudyBuddyError``.
Auth and input checks run before any call to the completion service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from app.core.errors import BadInput, FailureKind, StudyBuddyError
from app.core.jwt_utils import TokenVerifier, parse_bearer
from app.core.logging import get_logger
from app.modules.study_buddy.client import TextCompleter
from app.modules.study_buddy.extractor import extract_json_object
from app.modules.study_buddy.prompts import build_prompt, sanitize_query
from app.modules.study_buddy.validator import ValidatedPackage, load_study_package

logger = get_logger(__name__)


class HandlerState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    VALIDATING_INPUT = "validating_input"
    PROMPTING = "prompting"
    AWAITING_COMPLETION = "awaiting_completion"
    EXTRACTING = "extracting"
    VALIDATING = "validating"
    RESPONDING = "responding"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class RequestTrace:
    request_id: str = field(default_factory=lambda: uuid4().hex[:8])
    state: HandlerState = HandlerState.UNAUTHENTICATED
    history: list[HandlerState] = field(default_factory=list)
    failure: Optional[FailureKind] = None
    subject: Optional[str] = None

    def advance(self, state: HandlerState) -> None:
        self.history.append(self.state)
        self.state = state
        logger.debug(
            "-> %s", state.value, extra={"request_id": self.request_id}
        )


class GenerationHandler:
    """Orchestrates auth, input checks, completion, extraction and validation."""

    def __init__(
        self,
        completer: TextCompleter,
        verifier: Optional[TokenVerifier] = None,
        *,
        auth_required: bool = True,
        max_query_length: int = 500,
    ) -> None:
        if auth_required and verifier is None:
            raise ValueError("auth_required=True needs a token verifier")
        self.completer = completer
        self.verifier = verifier
        self.auth_required = auth_required
        self.max_query_length = max_query_length

    def _clean_query(self, body: Any) -> str:
        if not isinstance(body, dict):
            raise BadInput(detail="request body is not a JSON object")
        query = body.get("query")
        if not isinstance(query, str):
            raise BadInput(detail=f"query is {type(query).__name__}, not str")
        cleaned = sanitize_query(query)
        if not cleaned:
            raise BadInput(detail="query is empty after sanitization")
        if len(cleaned) > self.max_query_length:
            raise BadInput(
                f"Query must be at most {self.max_query_length} characters",
                detail=f"query has {len(cleaned)} characters",
            )
        return cleaned

    async def _authenticate(self, trace: RequestTrace, authorization: Optional[str]) -> None:
        token = parse_bearer(authorization)
        trace.advance(HandlerState.AUTHENTICATING)
        claims = await self.verifier.verify(token)
        trace.subject = str(claims.get("sub") or "") or None

    async def handle(
        self,
        body: Any,
        authorization: Optional[str] = None,
        *,
        trace: Optional[RequestTrace] = None,
    ) -> ValidatedPackage:
        trace = trace or RequestTrace()
        extra = {"request_id": trace.request_id}
        try:
            if self.auth_required:
                await self._authenticate(trace, authorization)

            trace.advance(HandlerState.VALIDATING_INPUT)
            query = self._clean_query(body)

            trace.advance(HandlerState.PROMPTING)
            prompt = build_prompt(query)
            logger.info(
                "Generating study package for %r (user=%s)",
                query,
                trace.subject or "anonymous",
                extra=extra,
            )

            trace.advance(HandlerState.AWAITING_COMPLETION)
            reply = await self.completer.complete(prompt)

            trace.advance(HandlerState.EXTRACTING)
            candidate = extract_json_object(reply)

            trace.advance(HandlerState.VALIDATING)
            result = load_study_package(candidate)

            trace.advance(HandlerState.RESPONDING)
        except StudyBuddyError as e:
            trace.failure = e.kind
            failed_in = trace.state
            trace.advance(HandlerState.FAILED)
            log = logger.warning if e.status_code < 500 else logger.error
            log(
                "Request failed in %s: %s [%s]",
                failed_in.value,
                e,
                e.kind.value,
                exc_info=e.__cause__ if e.__cause__ is not None else None,
                extra=extra,
            )
            raise

        trace.advance(HandlerState.SUCCESS)
        logger.info(
            "Study package ready (%d flashcards)",
            len(result.package.flashcards),
            extra=extra,
        )
        return result
