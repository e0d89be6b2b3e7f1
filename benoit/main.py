import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

# Ensure the project root is on sys.path so `from benoit.x import y`
# works regardless of whether uvicorn is started from the project root
# (uvicorn benoit.main:app) or from within the benoit/ directory.
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from benoit.config import GEMINI_API_KEY, LOG_LEVEL, MOCK_MODE  # noqa: E402

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Shared Gemini HTTP session is closed on shutdown
    yield
    from benoit.services.gemini_service import close_session
    await close_session()


app = FastAPI(
    title="Benoît",
    description="Robot French tutor: lessons, free chat and spoken replies",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware: allow frontend dev server origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_class=PlainTextResponse)
async def health_check():
    """Health check endpoint."""
    return "OK"


@app.get("/info")
async def info() -> dict:
    return {"mock_mode": MOCK_MODE, "gemini_configured": bool(GEMINI_API_KEY)}


# Mount route routers, log warnings if any fail to import so
# missing routes are immediately visible in the server logs.
def _mount_routes() -> None:
    try:
        from benoit.routes.session import router as session_router
        app.include_router(session_router)
    except Exception as exc:
        logger.warning("Failed to mount session routes: %s", exc)

    try:
        from benoit.routes.conversation import router as conversation_router
        app.include_router(conversation_router)
    except Exception as exc:
        logger.warning("Failed to mount conversation routes: %s", exc)


_mount_routes()
