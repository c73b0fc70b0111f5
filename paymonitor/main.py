import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from paymonitor import __version__
from paymonitor.core.container import ApplicationContainer, get_container
from paymonitor.core.logging import configure_logging
from paymonitor.infrastructure.database import init_db
from paymonitor.interfaces.http import create_api_router
from paymonitor.interfaces.http.errors import register_exception_handlers
from paymonitor.schemas import HealthResponse

logger = logging.getLogger(__name__)


def create_app(container: Optional[ApplicationContainer] = None) -> FastAPI:
    container = container or get_container()
    settings = container.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        await init_db()
        scheduler = container.build_scheduler() if settings.scheduler.enabled else None
        if scheduler is not None:
            scheduler.start()
        app.state.scheduler = scheduler
        try:
            yield
        finally:
            if scheduler is not None:
                await scheduler.stop()

    app = FastAPI(
        title=settings.project_name,
        description="监控端收款对账服务",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container
    app.state.scheduler = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request) -> HealthResponse:
        scheduler = request.app.state.scheduler
        return HealthResponse(
            version=__version__,
            scheduler_running=bool(scheduler and scheduler.running),
        )

    return app


app = create_app()
