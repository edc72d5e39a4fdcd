"""FastAPI main application."""
import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from banking_chatbot.adapters.base import ReasoningAdapter
from banking_chatbot.adapters.factory import get_reasoning_adapter
from banking_chatbot.config import settings
from banking_chatbot.errors import ChatbotError, ModelNotReadyError
from banking_chatbot.logging_config import configure_logging
from banking_chatbot.models.chat import ChatRequest, ChatResponse, HealthResponse
from banking_chatbot.services.bridge import ToolCallBridge
from banking_chatbot.services.fetcher import TransactionFetcher
from banking_chatbot.storage.database import ConnectionManager


configure_logging(settings.debug)
logger = logging.getLogger(__name__)

GENERIC_ERROR = "An internal error occurred. Please try again later."


def create_app(
    connections: Optional[ConnectionManager] = None,
    adapter: Optional[ReasoningAdapter] = None,
) -> FastAPI:
    """
    Build the API.

    Pools and the reasoning adapter are created once in the lifespan and shared
    by every request; pass them in to reuse existing ones.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        conns = connections or ConnectionManager.from_settings(settings)
        await conns.check_connectivity()

        model = adapter
        if model is None:
            try:
                model = get_reasoning_adapter(settings.model_id)
            except (ValueError, RuntimeError) as e:
                logger.error("Failed to initialize reasoning adapter: %s", e)

        app.state.connections = conns
        app.state.bridge = ToolCallBridge(model, TransactionFetcher(conns)) if model else None
        try:
            yield
        finally:
            logger.info("Shutting down...")
            conns.close()

    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        logger.warning("Rejected request body: %s", exc.errors())
        return JSONResponse(status_code=400, content={"detail": "Invalid request body."})

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"message": settings.app_name, "version": "1.0.0"}

    @app.get("/health", response_model=HealthResponse)
    @app.get("/hello", response_model=HealthResponse)
    async def health():
        """Liveness probe."""
        return HealthResponse(
            timestamp=datetime.now(timezone.utc),
            message="Banking Chatbot Backend is running.",
            model=settings.model_id,
        )

    @app.post("/chat", response_model=ChatResponse)
    async def chat(request: Request, body: ChatRequest):
        """
        Answer a question about the caller's own transactions.

        Returns 400 for a missing or blank field, 503 when the ledger database is
        unreachable and 500 for any other failure.
        """
        user_id = (body.user_id or "").strip()
        question = (body.question or "").strip()
        if not user_id:
            raise HTTPException(status_code=400, detail='Missing or invalid "userId" in request body.')
        if not question:
            raise HTTPException(status_code=400, detail='Missing or invalid "question" in request body.')

        try:
            bridge: Optional[ToolCallBridge] = getattr(request.app.state, "bridge", None)
            if bridge is None:
                raise ModelNotReadyError("Reasoning adapter not initialized")
            answer = await bridge.answer(user_id, question)
        except ChatbotError as e:
            logger.error("Chat request failed: %s", e, extra={"status": e.status_code})
            raise HTTPException(status_code=e.status_code, detail=e.public_message)
        except Exception:
            logger.exception("Unexpected error handling chat request")
            raise HTTPException(status_code=500, detail=GENERIC_ERROR)

        return ChatResponse(answer=answer)

    return app


app = create_app()


def run() -> None:
    """Validate configuration, build the model client and serve until SIGINT/SIGTERM."""
    import uvicorn

    missing = settings.missing_required()
    if missing:
        logger.critical(
            "FATAL ERROR: Missing required settings: %s. Please check your .env file.",
            ", ".join(name.upper() for name in missing),
        )
        sys.exit(1)

    try:
        adapter = get_reasoning_adapter(settings.model_id)
    except (ValueError, RuntimeError) as e:
        logger.critical("FATAL ERROR: Failed to initialize reasoning adapter: %s", e)
        sys.exit(1)

    logger.info(
        "Banking Chatbot Backend starting",
        extra={"port": settings.port, "model": settings.model_id},
    )
    uvicorn.run(create_app(adapter=adapter), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
