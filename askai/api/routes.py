"""FastAPI endpoints for the Ask-AI API.

POST /api/ask-ai - answer a question, optionally about an uploaded image (any other verb: 405)
GET /health - component health check
"""

import time

import structlog
from fastapi import APIRouter, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from askai.api.schemas import AskResponse, ErrorResponse, HealthResponse
from askai.core.errors import InvocationError, ProcessingError, ValidationError
from askai.core.models import available_models
from askai.core.pipeline import build_history, parse_request, relay_image, validate

logger = structlog.get_logger(__name__)

router = APIRouter()

ASK_PATH = "/api/ask-ai"
PROCESSING_ERROR_MESSAGE = "Error processing AI response"
METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed"


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump(),
                        headers=headers)


async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    """Render every 405 as the ask API error body; other statuses keep FastAPI's format."""
    if exc.status_code == 405:
        logger.warning("request.method_not_allowed", method=request.method, path=request.url.path)
        return _error(405, METHOD_NOT_ALLOWED_MESSAGE, headers=exc.headers)
    return await http_exception_handler(request, exc)


@router.post(
    ASK_PATH,
    response_model=AskResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def ask_ai(req: Request):
    """Answer a question: parse -> validate -> relay image -> chat -> respond."""
    start = time.monotonic()

    try:
        incoming = await parse_request(req)
        logger.info("ask.request", model=incoming.model_name,
                    question_len=len(incoming.question or ""), with_image=incoming.image is not None)

        handle = validate(incoming)

        gateway = getattr(req.app.state, "gemini", None)
        if gateway is None:
            raise InvocationError("Gemini gateway not available. Set GOOGLE_API_KEY in .env and restart.")

        uploaded = None
        if incoming.image is not None:
            uploaded = await run_in_threadpool(relay_image, gateway, incoming.image)

        history = build_history(incoming.question, uploaded)
        text = await run_in_threadpool(gateway.ask, handle, history, incoming.question)

    except ValidationError as e:
        logger.warning("ask.validation_failed", error=e.message)
        return _error(400, e.message)
    except ProcessingError as e:
        logger.error("ask.failed", stage=e.stage, error=str(e))
        return _error(500, PROCESSING_ERROR_MESSAGE)
    except Exception as e:
        logger.error("ask.failed", stage="unexpected", error=str(e))
        return _error(500, PROCESSING_ERROR_MESSAGE)

    answer = text.strip()
    latency_ms = int((time.monotonic() - start) * 1000)
    logger.info("ask.response", model=handle.key, latency_ms=latency_ms, answer=answer)

    return AskResponse(answer=answer)


@router.get("/health", response_model=HealthResponse)
def health(req: Request):
    """Check that the Gemini gateway is configured."""
    gateway = getattr(req.app.state, "gemini", None)
    gemini_ok = gateway is not None and gateway.is_healthy()

    return HealthResponse(
        status="healthy" if gemini_ok else "unhealthy",
        components={"gemini": "ok" if gemini_ok else "error"},
        models=available_models(),
    )


@router.get("/")
@router.head("/")
def root_health():
    """Basic root health check for deployment platforms like Render."""
    return {"status": "ok", "service": "ask-ai"}
