from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from main import create_app
from models.clan import ClashPlayer
from routers.v2.rosters.roster_models import ClanDescriptor, PlayerRegistration
from routers.v2.rosters.sessions import RosterSessionStore
from utils.clash_api import ClashAPIError
from utils.database import MemoryStorage
from utils.utils import limiter


def make_registration(reg_id, name: str, level_tag: str, offset_seconds: int = 0) -> PlayerRegistration:
    return PlayerRegistration(
        id=str(reg_id),
        player_name=name,
        level_tag=level_tag,
        registered_at=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=offset_seconds),
    )


def make_clan(name: str, capacity: int, league_tier: str) -> ClanDescriptor:
    return ClanDescriptor(name=name, capacity=capacity, league_tier=league_tier)


class FakeClashClient:
    def __init__(self, members: list[ClashPlayer] | None = None, error: ClashAPIError | None = None,
                 configured: bool = True):
        self.members = members or []
        self.error = error
        self.configured = configured
        self.requested: list[str] = []
        self.closed = False

    async def get_clan_members(self, clan_tag: str) -> list[ClashPlayer]:
        self.requested.append(clan_tag)
        if self.error is not None:
            raise self.error
        return self.members

    async def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def registrations() -> list[PlayerRegistration]:
    return [
        make_registration(1, "Ann", "TH14", 0),
        make_registration(2, "Bo", "TH13", 30),
        make_registration(3, "Cid", "TH12", 60),
    ]


@pytest.fixture
def storage(tmp_path) -> MemoryStorage:
    return MemoryStorage(data_dir=str(tmp_path / "data"))


@pytest.fixture
def clash_client() -> FakeClashClient:
    return FakeClashClient(
        members=[
            ClashPlayer(name="Ann", tag="#AAA", town_hall_level=14, war_stars=900, trophies=5000),
            ClashPlayer(name="Zed", tag="#ZZZ", town_hall_level=11, war_stars=120, trophies=2100),
        ]
    )


@pytest.fixture
def app(storage, clash_client):
    app = create_app()
    app.state.storage = storage
    app.state.clash_client = clash_client
    app.state.roster_sessions = RosterSessionStore()
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
