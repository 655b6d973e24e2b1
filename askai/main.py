"""FastAPI application entry point.

Startup sequence: load .env -> create the Gemini gateway.
"""

import os
from contextlib import asynccontextmanager

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from starlette.exceptions import HTTPException as StarletteHTTPException

from askai.api.routes import method_not_allowed_handler, router
from askai.core.gemini_client import GeminiGateway
from askai.core.models import available_models

load_dotenv()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("startup.begin")

    # The gateway is shared read-only by every request
    try:
        gateway = GeminiGateway()
        app.state.gemini = gateway
        logger.info("startup.gemini_initialized", healthy=gateway.is_healthy(),
                    models=available_models())
    except Exception as e:
        app.state.gemini = None
        logger.error("startup.gemini_failed", error=str(e),
                     hint="Set GOOGLE_API_KEY in .env")

    logger.info("startup.complete")
    yield
    logger.info("shutdown.complete")


app = FastAPI(
    title="Ask-AI API",
    description="Question answering over Gemini with optional image input",
    version="0.1.0",
    lifespan=lifespan,
)

origins = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StarletteHTTPException, method_not_allowed_handler)
app.include_router(router)
