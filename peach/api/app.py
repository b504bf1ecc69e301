# peach/api/app.py

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from peach.api.routes import health, metrics, rooms, root
from peach.services.room_manager import RoomRegistry


def create_app(registry: RoomRegistry) -> FastAPI:
    """Read-only admin API over the registry the chat server uses."""
    app = FastAPI(title="Peach - Chat Server Admin")
    app.state.registry = registry

    # Dashboards poll this from the browser
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(root.router)
    app.include_router(health.router)
    app.include_router(metrics.router)
    app.include_router(rooms.router)
    return app
