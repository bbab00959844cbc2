import os
import logging
import uvicorn
import sentry_sdk

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from routers.v2.rosters.sessions import RosterSessionStore
from startup import define_app
from utils.clash_api import ClashStatsClient
from utils.config import config
from utils.database import create_storage
from utils.utils import limiter

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

if config.SENTRY_DSN:
    sentry_sdk.init(dsn=config.SENTRY_DSN, environment=config.ENV)

middleware = [
    Middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    ),
    Middleware(
        GZipMiddleware,
        minimum_size=500
    )
]


def create_app() -> FastAPI:
    app = FastAPI(middleware=middleware,
                  title='CWL Roster',
                  description="Clan War League signups, roster building and PDF export",
                  version="1.0")
    app.state.limiter = limiter
    app.mount("/static", StaticFiles(directory=os.path.join(os.path.dirname(__file__), "static")), name="static")
    define_app(app)

    @app.on_event("startup")
    async def startup_event():
        # tests install their own collaborators before startup runs
        if getattr(app.state, "storage", None) is None:
            app.state.storage = create_storage(config)
        if getattr(app.state, "clash_client", None) is None:
            app.state.clash_client = ClashStatsClient(
                api_key=config.clash_api_key,
                base_url=config.clash_api_url,
                cache_ttl=config.clash_cache_ttl,
            )
        if getattr(app.state, "roster_sessions", None) is None:
            app.state.roster_sessions = RosterSessionStore(ttl=config.roster_session_ttl)
        if not app.state.clash_client.configured:
            logger.warning("CLASH_API_KEY is not set, live player stats are disabled")

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.clash_client.close()
        await app.state.storage.close()

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host=config.HOST, port=config.PORT, reload=config.RELOAD)
