import logging

import sentry_sdk
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse

from routers.v2.rosters.roster_models import (InsertPlayerRegistration,
                                              PlayerRegistration)
from utils.config import config
from utils.database import BaseStorage
from utils.dependencies import get_storage
from utils.utils import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v2", tags=["Registrations"], include_in_schema=True)


@router.get("/player-registrations", name="List player registrations",
            response_model=list[PlayerRegistration])
async def list_registrations(storage: BaseStorage = Depends(get_storage)):
    try:
        return await storage.get_player_registrations()
    except Exception as e:
        logger.exception("Failed to load registrations")
        sentry_sdk.capture_exception(e, tags={"endpoint": "/v2/player-registrations"})
        raise HTTPException(status_code=500, detail="Errore nel recupero delle registrazioni")


@router.post("/player-registrations", name="Register a player",
             response_model=PlayerRegistration)
@limiter.limit(config.registration_rate_limit)
async def register_player(
    request: Request,
    registration: InsertPlayerRegistration,
    storage: BaseStorage = Depends(get_storage),
):
    """
    Public signup for the next CWL.

    Input:
        - registration: player name and level tag (e.g. TH15)

    Output:
        - the stored registration with its id and timestamp
        - HTTP 422 if a field is missing or empty
        - HTTP 429 when the client registers too often
    """
    try:
        created = await storage.add_player_registration(registration)
    except Exception as e:
        logger.exception("Failed to store registration")
        sentry_sdk.capture_exception(e, tags={"endpoint": "/v2/player-registrations"})
        raise HTTPException(status_code=500, detail="Errore durante la registrazione")
    logger.info("New registration %s (%s)", created.player_name, created.level_tag)
    return created


@router.delete("/player-registrations", name="Clear all registrations")
async def clear_registrations(storage: BaseStorage = Depends(get_storage)):
    try:
        await storage.clear_player_registrations()
    except Exception as e:
        logger.exception("Failed to clear registrations")
        sentry_sdk.capture_exception(e, tags={"endpoint": "/v2/player-registrations"})
        raise HTTPException(status_code=500, detail="Errore durante la cancellazione")
    return {"message": "Registrazioni cancellate con successo"}


@router.get("/player-registrations/export.txt", name="Registration list as text",
            response_class=PlainTextResponse)
async def export_registrations_text(storage: BaseStorage = Depends(get_storage)):
    return await storage.read_from_file(storage.registrations_file)
