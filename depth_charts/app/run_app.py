# app/run_app.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI

from depth_charts.config import Settings
from depth_charts.db.database import DataBase
from depth_charts.app.routers.depth_charts import router as DepthChartRouter
from depth_charts.app.routers.positions import router as PositionRouter
from depth_charts.app.routers.players import router as PlayerRouter
from depth_charts.app.routers.recommendations import router as RecommendationRouter
from depth_charts.app.routers.utils import install_error_handlers
from depth_charts.app.services.permission import CapabilityChecker, PermissionService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    await DataBase().create_all()
    logger.info("Depth chart API started")
    yield
    await DataBase().dispose()


def setup_routers(app: FastAPI) -> None:
    app.include_router(DepthChartRouter)
    app.include_router(PositionRouter)
    app.include_router(PlayerRouter)
    app.include_router(RecommendationRouter)


def create_app(capability_checker: Optional[CapabilityChecker] = None) -> FastAPI:
    app = FastAPI(title="Depth Charts", lifespan=lifespan)
    app.state.capability_checker = capability_checker or PermissionService()

    install_error_handlers(app)
    setup_routers(app)
    return app


def main() -> None:
    settings = Settings()
    logging.basicConfig(level=settings.log_level)

    uvicorn.run(create_app(), host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
