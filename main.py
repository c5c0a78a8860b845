"""FastAPI entry point for the Task Recorder backend."""

import logging

import litellm
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.health import router as health_router
from api.models_routes import router as models_router
from api.tasks import router as tasks_router
from config.settings import get_settings
from services.middleware import RequestIdMiddleware

logger = logging.getLogger(__name__)

settings = get_settings()

# ── Global LiteLLM settings ──────────────────────────────────
litellm.request_timeout = settings.llm_request_timeout

app = FastAPI(
    title="Task Recorder",
    description="Turns recorded browser sessions into step-by-step documentation",
    version="0.1.0",
)

# ── Middleware stack (outermost first) ─────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)

# ── Register routers ────────────────────────────────────────
app.include_router(health_router)
app.include_router(models_router)
app.include_router(tasks_router)


if __name__ == "__main__":
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "Starting on port %d (provider=%s, mock=%s)",
        settings.service_port,
        settings.llm_provider,
        settings.mock_generation,
    )
    # Single worker: the in-memory task store is per process
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.service_port,
        reload=settings.debug,
    )
