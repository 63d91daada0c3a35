"""SessionLens FastAPI backend — main application entry point."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sessionlens import config
from sessionlens.observability import (
    initialize as initialize_observability,
    is_enabled as observability_enabled,
    shutdown as shutdown_observability,
)
from sessionlens.parsers.platforms import registry
from sessionlens.routers.sessions import sessions_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("sessionlens")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("SessionLens starting up")
    for source, root in registry.source_roots().items():
        logger.info("%s sessions root: %s%s", source, root, "" if root.is_dir() else " (missing)")
    initialize_observability(app)

    yield

    logger.info("SessionLens shutting down")
    shutdown_observability(app)


app = FastAPI(
    title="SessionLens API",
    description="Read-only viewer API for Claude Code and Codex session logs",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS — allow the display shell
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        config.FRONTEND_ORIGIN,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(sessions_router)


@app.get("/api/health")
def health():
    """Health check endpoint."""
    roots = registry.source_roots()
    return {
        "status": "ok",
        "telemetry": observability_enabled(),
        "sources": {
            source: {"root": str(root), "available": root.is_dir()}
            for source, root in roots.items()
        },
    }


def run() -> None:
    import uvicorn

    uvicorn.run("sessionlens.main:app", host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
