"""Network Planner - FastAPI Application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_config, settings
from .routers import devices_router, snapshots_router, topology_router
from .scheduler import EditorScheduler
from .session import EditorSession, create_session
from .websocket import ConnectionManager, websocket_endpoint


def create_app(session: EditorSession | None = None, start_scheduler: bool = True) -> FastAPI:
    """Build the app; tests pass a prepared session and skip the scheduler."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - startup and shutdown events."""
        # Startup
        editor_session = session or create_session(get_config(), settings)
        ws_manager = ConnectionManager()
        await editor_session.open()

        app.state.session = editor_session
        app.state.ws_manager = ws_manager

        scheduler = EditorScheduler(editor_session, ws_manager.broadcast_events)
        if start_scheduler:
            scheduler.start()
            # Fill the candidate panel without holding up startup
            if editor_session.sync.is_configured:
                editor_session.sync.refresh_in_background()

        yield

        # Shutdown
        await scheduler.stop()
        await editor_session.close()

    app = FastAPI(
        title="Network Planner",
        description="Interactive network topology editor API",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS configuration
    origins = ["*"] if settings.dev_mode else []
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(topology_router, prefix="/api", tags=["topology"])
    app.include_router(devices_router, prefix="/api", tags=["devices"])
    app.include_router(snapshots_router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "netplanner",
            "nodes": app.state.session.graph.node_count,
            "websocket_clients": app.state.ws_manager.connection_count,
        }

    # WebSocket endpoint
    app.websocket("/ws/updates")(websocket_endpoint)

    return app


app = create_app()
