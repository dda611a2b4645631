"""
api.py

WHAT THIS FILE IS FOR
---------------------
This module defines the FastAPI application entrypoint for the
Resume Tailoring API (the serverless backend behind the resume editor).

It is responsible for:
- Creating the FastAPI app instance (title/version/description)
- Registering middleware for:
    - CORS (the browser client calls the function directly)
    - Correlation ID propagation (X-Correlation-Id), bound into every log line
- Registering exception handlers that turn every failure into the uniform
  error body: {"error": "<message>"}
- Exposing HTTP endpoints:
    - GET /health and /healthz
    - POST /api/v1/resume-actions (single action-dispatch contract)

REQUEST/RESPONSE CONTRACT RULES
-------------------------------
- Request body: {action, payload, access_token?}; camelCase and snake_case
  field names are both accepted inside payloads.
- Every action requires a verified identity BEFORE any model call:
  Authorization: Bearer <token>, or access_token in the body.
- Success payloads are camelCase across nested objects; pass-through
  containers (githubProjects) keep their inner keys verbatim.

DESIGN INTENT
-------------
This file contains ONLY the HTTP layer:
- routing
- middleware
- exception handling
- response formatting / normalization

Auth delegation, prompts, model calls and merging live in:
- functions/orchestrator/*
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from functions.orchestrator.action_router import ActionRouter
from functions.orchestrator.errors import ResumeServiceError
from functions.orchestrator.resume_workflow_service import ResumeWorkflowService
from functions.orchestrator.session_verifier import SessionVerifier, extract_token
from functions.orchestrator.status_normalizer import error_status_for, normalize_response_status
from functions.utils.json_naming_converter import convert_keys_snake_to_camel
from functions.utils.logging_config import configure_logging
from functions.utils.settings import get_settings
from schemas.input_schema import ResumeActionRequest

settings = get_settings()
configure_logging(settings.log_level)

logger = structlog.get_logger(__name__)

svc = ResumeWorkflowService(settings)
router = ActionRouter(svc)
verifier = SessionVerifier(settings)

app = FastAPI(
    title="Resume Tailoring API",
    version="1.0.0",
    description="Authenticated Gemini-backed resume parsing, tailoring and condensing.",
)

CORRELATION_HEADER = "X-Correlation-Id"


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def _get_or_create_correlation_id(request: Request) -> str:
    incoming = request.headers.get(CORRELATION_HEADER)
    return incoming.strip() if incoming and incoming.strip() else f"corr_{uuid.uuid4().hex}"


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or f"corr_{uuid.uuid4().hex}"


def _error_response(*, message: str, http_status: int, correlation_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=http_status,
        content={"error": message},
        headers={CORRELATION_HEADER: correlation_id},
    )


# -------------------------------------------------------------------
# Middleware
# -------------------------------------------------------------------
@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    correlation_id = _get_or_create_correlation_id(request)
    request.state.correlation_id = correlation_id

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id

    logger.info(
        "request_completed",
        method=request.method,
        path=request.url.path,
        http_status=response.status_code,
        status=normalize_response_status(response.status_code),
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[CORRELATION_HEADER],
)


# -------------------------------------------------------------------
# Exception handlers
# -------------------------------------------------------------------
@app.exception_handler(ResumeServiceError)
async def resume_service_error_handler(request: Request, exc: ResumeServiceError):
    http_status, code = error_status_for(exc)

    log = logger.error if http_status >= 500 else logger.warning
    log("request_failed", code=code, http_status=http_status, error=exc.message)

    return _error_response(
        message=exc.message,
        http_status=http_status,
        correlation_id=_correlation_id(request),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        field = ".".join(str(x) for x in err.get("loc", []) if x != "body") or "body"
        details.append(f"{field}: {err.get('msg')}")

    logger.info("request_validation_failed", error_count=len(details))

    return _error_response(
        message="Validation failed: " + "; ".join(details),
        http_status=400,
        correlation_id=_correlation_id(request),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning("http_exception", http_status=exc.status_code, detail=str(exc.detail))

    return _error_response(
        message=str(exc.detail),
        http_status=exc.status_code,
        correlation_id=_correlation_id(request),
    )


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------
@app.get("/healthz")
@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": settings.service_name,
        "environment": settings.environment,
        "actions": list(router.actions),
    }


@app.post("/api/v1/resume-actions")
async def run_action(body: ResumeActionRequest, request: Request) -> JSONResponse:
    correlation_id = _correlation_id(request)

    # ---------------------------------------------------------------
    # 1) Identity first: no model call without a verified session
    # ---------------------------------------------------------------
    token = extract_token(request.headers.get("Authorization"), body.access_token)
    user = await verifier.verify(token)
    structlog.contextvars.bind_contextvars(user_id=user.id, action=body.action)

    # ---------------------------------------------------------------
    # 2) Model key must exist before dispatching
    # ---------------------------------------------------------------
    settings.require_secret("google_genai_api_key")

    # ---------------------------------------------------------------
    # 3) Dispatch; handled errors go to resume_service_error_handler
    # ---------------------------------------------------------------
    try:
        result = router.dispatch(body.action, body.payload)
    except ResumeServiceError:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("action_unexpected_error", error=str(exc))
        return _error_response(
            message=f"Internal error: {exc}",
            http_status=500,
            correlation_id=correlation_id,
        )

    payload_dict = convert_keys_snake_to_camel(
        result.model_dump(exclude_none=True),
        preserve_container_keys=settings.preserve_container_keys,
    )
    return JSONResponse(status_code=200, content=payload_dict)
