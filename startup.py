import logging
import textwrap

from fastapi import FastAPI, Request
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from routers.v2.clan.endpoints import router as clan_router
from routers.v2.exports.endpoints import router as exports_router
from routers.v2.registrations.endpoints import router as registrations_router
from routers.v2.rosters.roster_utils import EmptyClanList
from routers.v2.rosters.rosters import router as rosters_router
from routers.v2.ui.ui import router as ui_router
from utils.clash_api import ClashAPIError

logger = logging.getLogger(__name__)


def define_app(app: FastAPI):

    app.include_router(registrations_router)
    app.include_router(rosters_router)
    app.include_router(exports_router)
    app.include_router(clan_router)
    app.include_router(ui_router)

    description = textwrap.dedent("""
    ### Clan War League roster manager
    - Players sign up with their name and Town Hall level
    - Admins group signups into clans, rebalance them and export the CWL message as PDF
    - Live member stats are read from the official Clash of Clans API

    This content is not affiliated with, endorsed, sponsored, or specifically approved by Supercell and Supercell is not responsible for it.
    For more information see [Supercell’s Fan Content Policy](https://supercell.com/fan-content-policy)
    """)

    app.openapi_schema = get_openapi(
        title="CWL Roster",
        version="1.0",
        description=description,
        routes=app.routes,
    )

    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(EmptyClanList)
    async def empty_clan_list_handler(request: Request, exc: EmptyClanList):
        return JSONResponse(
            status_code=400,
            content={"detail": "Aggiungi almeno un clan prima di generare il messaggio"},
        )

    @app.exception_handler(ClashAPIError)
    async def clash_api_exception_handler(request: Request, exc: ClashAPIError):
        logger.warning("Clash API error %s on %s", exc.status, request.url.path)
        # `text` usually holds the API's error JSON/string
        detail = exc.text or "Errore nel recupero dei dati da Clash of Clans API"

        headers = {}
        if exc.retry_after is not None:
            headers["Retry-After"] = str(exc.retry_after)

        return JSONResponse(
            status_code=exc.status,
            content={"detail": detail},
            headers=headers
        )
