"""
FastAPI Backend dla hex-tactics-nav.

Endpoints:
    POST /api/grid/generate        - generuj siatkę
    GET  /api/grid                 - stan siatki
    PUT  /api/grid/cells/{q}/{r}   - włącz / wyłącz komórkę
    POST /api/grid/navmesh         - podepnij navmesh i zintegruj
    POST /api/path                 - ścieżka dyskretna (A*)
    POST /api/plan                 - ścieżka ciągła z budżetem
    GET  /api/events               - log zdarzeń
    GET  /api/health               - health check
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from hexnav.core.logging_config import configure_logging
from api.routers import grid, paths
from api.state import get_session

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown events."""
    configure_logging()
    logger.info("hex-tactics-nav API starting...")
    yield
    get_session().clear()
    logger.info("hex-tactics-nav API shutting down...")


app = FastAPI(
    title="hex-tactics-nav API",
    description="Hex grid navigation and turn-based path planning",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS - allow all origins (debug overlays served from file://)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(grid.router, prefix="/api", tags=["Grid"])
app.include_router(paths.router, prefix="/api", tags=["Paths"])


@app.get("/api/health")
async def health():
    """API health check."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host="127.0.0.1", port=8000, reload=True)
