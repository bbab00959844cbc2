import logging

from coc.utils import correct_tag
from fastapi import APIRouter, Depends, HTTPException

from models.clan import ClashPlayer
from routers.v2.clan.models import RegistrationCrossReference
from routers.v2.clan.utils import cross_reference
from utils.clash_api import ClashStatsClient
from utils.database import BaseStorage
from utils.dependencies import get_clash_client, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v2", tags=["Clan"], include_in_schema=True)


def _require_api_key(client: ClashStatsClient):
    if not client.configured:
        logger.error("Clash of Clans API key is not configured")
        raise HTTPException(status_code=500, detail="API Key di Clash of Clans non configurata")


@router.get("/clash-players/{clan_tag}",
            name="Live member stats of a clan",
            response_model=list[ClashPlayer])
async def clash_players(clan_tag: str, client: ClashStatsClient = Depends(get_clash_client)):
    _require_api_key(client)
    return await client.get_clan_members(clan_tag)


@router.get("/clash-players/{clan_tag}/registrations",
            name="Cross-reference clan members with registrations",
            response_model=RegistrationCrossReference)
async def clash_players_registrations(
    clan_tag: str,
    client: ClashStatsClient = Depends(get_clash_client),
    storage: BaseStorage = Depends(get_storage),
):
    _require_api_key(client)
    members = await client.get_clan_members(clan_tag)
    registrations = await storage.get_player_registrations()
    return cross_reference(correct_tag(clan_tag), members, registrations)
