from fastapi import Request

from routers.v2.rosters.sessions import RosterSessionStore
from utils.clash_api import ClashStatsClient
from utils.database import BaseStorage


def get_storage(request: Request) -> BaseStorage:
    return request.app.state.storage


def get_clash_client(request: Request) -> ClashStatsClient:
    return request.app.state.clash_client


def get_roster_sessions(request: Request) -> RosterSessionStore:
    return request.app.state.roster_sessions
