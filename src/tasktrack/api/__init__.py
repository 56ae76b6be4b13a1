"""TaskTrack HTTP and WebSocket surface."""

from tasktrack.api.auth import auth_router
from tasktrack.api.router import router
from tasktrack.api.ws import ws_router

__all__ = ["auth_router", "router", "ws_router"]
