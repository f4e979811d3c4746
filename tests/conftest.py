from typing import Any, AsyncIterator, Awaitable, Callable

import pytest

from depth_charts.config import Settings
from depth_charts.db.database import DataBase
from depth_charts.db.schemas.depth_chart import DepthChartCreate, DepthChartDetail
from depth_charts.db.schemas.player import PlayerCreate, PlayerRead
from depth_charts.app.services.assignment import AssignmentService
from depth_charts.app.services.chart import ChartService
from depth_charts.app.services.permission import PermissionService
from depth_charts.app.services.position import PositionService
from depth_charts.app.services.recommendation import RecommendationService

TEAM_ID = 1
OTHER_TEAM_ID = 2
COACH_ID = 10


@pytest.fixture
async def database(tmp_path, monkeypatch) -> AsyncIterator[DataBase]:
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'depth_charts.db'}")
    Settings._instance = None
    DataBase._instance = None

    db = DataBase()
    await db.create_all()
    yield db

    await db.drop_all()
    await db.dispose()
    Settings._instance = None


@pytest.fixture
def charts(database: DataBase) -> ChartService:
    return ChartService(database)


@pytest.fixture
def positions(database: DataBase) -> PositionService:
    return PositionService(database)


@pytest.fixture
def assignments(database: DataBase) -> AssignmentService:
    return AssignmentService(database)


@pytest.fixture
def recommendations(database: DataBase) -> RecommendationService:
    return RecommendationService(database)


@pytest.fixture
def permissions(database: DataBase) -> PermissionService:
    return PermissionService(database)


@pytest.fixture
def make_player(database: DataBase) -> Callable[..., Awaitable[PlayerRead]]:
    async def factory(first_name: str, last_name: str = "Smith", **fields: Any) -> PlayerRead:
        fields.setdefault("team_id", TEAM_ID)
        return await database.create_player(PlayerCreate(first_name=first_name, last_name=last_name, **fields))

    return factory


@pytest.fixture
def make_chart(charts: ChartService) -> Callable[..., Awaitable[DepthChartDetail]]:
    async def factory(name: str = "Varsity", team_id: int = TEAM_ID, **fields: Any) -> DepthChartDetail:
        return await charts.create(team_id, COACH_ID, DepthChartCreate(name=name, **fields))

    return factory
