"""TraceView FastAPI application."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from traceview.config import TraceviewConfig
from traceview.ids import IdentifierCodec
from traceview.server.routes.ids import router as ids_router
from traceview.server.routes.traces import router as traces_router


def create_app(config: TraceviewConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or TraceviewConfig()

    app = FastAPI(
        title="TraceView",
        description="Identifier decoding and ancestor-preserving span filtering",
        version="0.1.0",
    )

    # Shared per-app state for route access
    app.state.config = config
    app.state.codec = IdentifierCodec.from_config(config)

    # CORS — allow local dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(ids_router, prefix="/api")
    app.include_router(traces_router, prefix="/api")

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app
