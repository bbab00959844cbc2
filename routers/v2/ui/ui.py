import logging
import os
from typing import Optional

from coc.utils import correct_tag
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from routers.v2.clan.utils import cross_reference, town_hall_tier
from routers.v2.rosters.roster_models import ClanDescriptor, InsertPlayerRegistration
from routers.v2.rosters.roster_utils import (EmptyClanList, build_partition,
                                             move_down, move_player, move_up)
from routers.v2.rosters.rosters import session_view
from routers.v2.rosters.sessions import RosterSessionStore
from utils.clash_api import ClashAPIError, ClashStatsClient
from utils.config import config
from utils.database import BaseStorage
from utils.dependencies import get_clash_client, get_roster_sessions, get_storage
from utils.utils import limiter

logger = logging.getLogger(__name__)

router = APIRouter(tags=['UI Pages'], include_in_schema=False)
templates = Jinja2Templates(
    directory=os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(__file__)))), 'templates')
)
templates.env.globals['town_hall_tier'] = town_hall_tier


def _admin_redirect(session_id: Optional[str] = None, error: Optional[str] = None) -> RedirectResponse:
    params = []
    if session_id:
        params.append(f'session_id={session_id}')
    if error:
        params.append(f'error={error}')
    url = '/admin' + ('?' + '&'.join(params) if params else '')
    return RedirectResponse(url, status_code=303)


@router.get('/', response_class=HTMLResponse)
async def registration_page(request: Request, registered: bool = False):
    return templates.TemplateResponse(request, 'registration.html', {
        'registered': registered,
        'errors': [],
    })


@router.post('/register', response_class=HTMLResponse)
@limiter.limit(config.registration_rate_limit)
async def register_from_form(
    request: Request,
    player_name: str = Form(''),
    level_tag: str = Form(''),
    storage: BaseStorage = Depends(get_storage),
):
    try:
        registration = InsertPlayerRegistration(player_name=player_name, level_tag=level_tag)
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        return templates.TemplateResponse(request, 'registration.html', {
            'registered': False,
            'errors': errors,
        }, status_code=400)

    await storage.add_player_registration(registration)
    return RedirectResponse('/?registered=true', status_code=303)


@router.get('/admin', response_class=HTMLResponse)
async def admin_page(
    request: Request,
    session_id: Optional[str] = None,
    clan_tag: Optional[str] = None,
    error: Optional[str] = None,
    storage: BaseStorage = Depends(get_storage),
    sessions: RosterSessionStore = Depends(get_roster_sessions),
    client: ClashStatsClient = Depends(get_clash_client),
):
    """Serve the admin page: signups, saved clans, the roster being edited and optional live stats"""
    registrations = await storage.get_player_registrations()
    clans = await storage.get_clans()

    session = sessions.get(session_id) if session_id else None
    roster = session_view(session) if session else None

    stats = None
    stats_error = None
    if clan_tag:
        clan_tag = correct_tag(clan_tag)
        if not client.configured:
            stats_error = 'API Key di Clash of Clans non configurata'
        else:
            try:
                members = await client.get_clan_members(clan_tag)
                stats = cross_reference(clan_tag, members, registrations)
            except ClashAPIError as e:
                logger.warning('Admin page stats lookup failed: %s', e)
                stats_error = f'Errore {e.status} dalla Clash of Clans API'

    return templates.TemplateResponse(request, 'admin.html', {
        'registrations': registrations,
        'clans': clans,
        'roster': roster,
        'clan_tag': clan_tag or '',
        'stats': stats,
        'stats_error': stats_error,
        'error': error,
    })


@router.post('/admin/clans')
async def admin_add_clan(
    name: str = Form(''),
    capacity: str = Form('15'),
    league_tier: str = Form(''),
    storage: BaseStorage = Depends(get_storage),
):
    try:
        clan = ClanDescriptor(name=name, capacity=capacity, league_tier=league_tier)
    except ValidationError:
        return _admin_redirect(error='clan')
    await storage.add_clan(clan)
    return _admin_redirect()


@router.post('/admin/session')
async def admin_start_session(
    session_id: Optional[str] = Form(None),
    storage: BaseStorage = Depends(get_storage),
    sessions: RosterSessionStore = Depends(get_roster_sessions),
):
    clans = await storage.get_clans()
    descriptors = [ClanDescriptor(name=c.name, capacity=c.capacity, league_tier=c.league_tier) for c in clans]
    try:
        partition = build_partition(descriptors, await storage.get_player_registrations())
    except EmptyClanList:
        return _admin_redirect(error='no-clans')
    if session_id:
        sessions.delete(session_id)
    session = sessions.create(partition)
    return _admin_redirect(session.session_id)


@router.post('/admin/session/{session_id}/move')
async def admin_move_player(
    session_id: str,
    registration_id: str = Form(...),
    from_bucket: int = Form(...),
    to_bucket: int = Form(...),
    sessions: RosterSessionStore = Depends(get_roster_sessions),
):
    session = sessions.get(session_id)
    if session is None:
        return _admin_redirect(error='session')
    sessions.update(session_id, move_player(session.partition, registration_id, from_bucket, to_bucket))
    return _admin_redirect(session_id)


@router.post('/admin/session/{session_id}/move-up')
async def admin_move_up(
    session_id: str,
    bucket: int = Form(...),
    index: int = Form(...),
    sessions: RosterSessionStore = Depends(get_roster_sessions),
):
    session = sessions.get(session_id)
    if session is None:
        return _admin_redirect(error='session')
    sessions.update(session_id, move_up(session.partition, bucket, index))
    return _admin_redirect(session_id)


@router.post('/admin/session/{session_id}/move-down')
async def admin_move_down(
    session_id: str,
    bucket: int = Form(...),
    index: int = Form(...),
    sessions: RosterSessionStore = Depends(get_roster_sessions),
):
    session = sessions.get(session_id)
    if session is None:
        return _admin_redirect(error='session')
    sessions.update(session_id, move_down(session.partition, bucket, index))
    return _admin_redirect(session_id)


@router.post('/admin/clear')
async def admin_clear_registrations(storage: BaseStorage = Depends(get_storage)):
    await storage.clear_player_registrations()
    return _admin_redirect()
