import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import AsyncOpenAI

from routes.chat_route import router as chat_router
from services.chat.session_store import SessionStore
from services.openai.chat_gateway import ChatGateway
from services.web.insight_provider import WebsiteInsightProvider
from utils.config import ChatSettings

load_dotenv()  # Load environment variables from .env file if present

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
LOGGER = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the chat settings from the environment
      - the OpenAI async client and the chat gateway around it
      - the in-memory session store and the website insight provider
    and attach them to `app.state`.
    """
    settings = ChatSettings.from_env()

    openai_api_key = os.getenv("OPENAI_API_KEY")
    if not openai_api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set")

    try:
        openai_client = AsyncOpenAI()
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc

    app.state.chat_settings = settings
    app.state.openai_client = openai_client
    app.state.chat_gateway = ChatGateway(openai_client, model=settings.model)
    app.state.session_store = SessionStore()
    app.state.insight_provider = WebsiteInsightProvider(timeout=settings.web_timeout)
    LOGGER.info("Task assistant ready (model=%s)", settings.model)

    try:
        yield
    finally:
        try:
            await openai_client.close()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.warning("Error closing OpenAI client: %s", exc)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        """
        Report malformed request bodies as 400 instead of FastAPI's default 422.
        """
        return JSONResponse(status_code=400, content={"detail": "Invalid request body."})

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that reports OpenAI client presence and live sessions.
        """
        has_openai = getattr(request.app.state, "openai_client", None) is not None
        store = getattr(request.app.state, "session_store", None)
        return {
            "ok": True,
            "openai_available": has_openai,
            "active_sessions": len(store) if store is not None else 0,
        }

    # Register application routers
    app.include_router(chat_router)

    return app


app = create_app()
