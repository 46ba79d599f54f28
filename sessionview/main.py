"""Session viewer FastAPI backend: main application entry point."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sessionview import config
from sessionview.routers.api import sessions_router

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("sessionview")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("Session viewer starting up, log root: %s", config.LOG_ROOT)
    if not config.LOG_ROOT.is_dir():
        logger.warning("Log root %s does not exist; session list will be empty", config.LOG_ROOT)
    yield
    logger.info("Session viewer shutting down")


app = FastAPI(
    title="Session Viewer API",
    description="Browse agent session JSONL logs",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: allow the Vite dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        config.FRONTEND_ORIGIN,
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sessions_router)


@app.get("/api/health")
def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "logRoot": str(config.LOG_ROOT),
        "logRootExists": config.LOG_ROOT.is_dir(),
    }


if __name__ == "__main__":
    uvicorn.run(app, host=config.HOST, port=config.PORT)
