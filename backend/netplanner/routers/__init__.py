# API routers
from .topology import router as topology_router
from .devices import router as devices_router
from .snapshots import router as snapshots_router

__all__ = ["topology_router", "devices_router", "snapshots_router"]
