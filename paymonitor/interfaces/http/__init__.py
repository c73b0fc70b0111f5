from fastapi import APIRouter

from paymonitor.interfaces.http.routers import monitor


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(monitor.router, prefix="/monitor", tags=["监控端"])
    return router


__all__ = [
    "create_api_router",
]
