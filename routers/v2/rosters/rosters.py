import logging

import sentry_sdk
from fastapi import APIRouter, Depends, HTTPException

from routers.v2.exports.utils import pdf_response
from routers.v2.rosters.roster_models import (Clan, ClanDescriptor,
                                              ClansRequest, CwlMessage,
                                              MessageResponse,
                                              MovePlayerModel, ReorderModel,
                                              RosterSessionView)
from routers.v2.rosters.roster_utils import (bucket_views, build_partition,
                                             move_down, move_player, move_up,
                                             render_message)
from routers.v2.rosters.sessions import RosterSession, RosterSessionStore
from utils.database import BaseStorage
from utils.dependencies import get_roster_sessions, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/v2', tags=['Rosters'], include_in_schema=True)


def session_view(session: RosterSession) -> RosterSessionView:
    return RosterSessionView(
        session_id=session.session_id,
        created_at=session.created_at,
        buckets=bucket_views(session.partition),
        message=render_message(session.partition),
    )


def _get_session(sessions: RosterSessionStore, session_id: str) -> RosterSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail='Sessione roster non trovata')
    return session


@router.get('/clans', name='List saved clans', response_model=list[Clan])
async def list_clans(storage: BaseStorage = Depends(get_storage)):
    try:
        return await storage.get_clans()
    except Exception as e:
        logger.exception('Failed to load clans')
        sentry_sdk.capture_exception(e, tags={'endpoint': '/v2/clans'})
        raise HTTPException(status_code=500, detail='Errore nel recupero dei clan')


@router.post('/clans', name='Save a clan', response_model=Clan)
async def create_clan(clan: ClanDescriptor, storage: BaseStorage = Depends(get_storage)):
    try:
        return await storage.add_clan(clan)
    except Exception as e:
        logger.exception('Failed to save clan')
        sentry_sdk.capture_exception(e, tags={'endpoint': '/v2/clans'})
        raise HTTPException(status_code=500, detail='Errore durante la creazione del clan')


@router.post('/generate-message', name='Generate the CWL message', response_model=MessageResponse)
async def generate_message(body: ClansRequest, storage: BaseStorage = Depends(get_storage)):
    """
    Assign the current registrations to the given clans round-robin and
    render the CWL message in one shot.

    Input:
        - clans: list of {name, capacity, league_tier}

    Output:
        - the rendered message, also archived
        - HTTP 400 if no clan is given
    """
    registrations = await storage.get_player_registrations()
    message = render_message(build_partition(body.clans, registrations))
    saved = await storage.save_cwl_message(message)
    logger.info('Generated CWL message %s for %s clans', saved.id, len(body.clans))
    return MessageResponse(message=message, message_id=saved.id)


@router.get('/cwl-messages', name='List generated messages', response_model=list[CwlMessage])
async def list_messages(storage: BaseStorage = Depends(get_storage)):
    return await storage.get_cwl_messages()


@router.post('/roster-session', name='Start a roster session',
             response_model=RosterSessionView, status_code=201)
async def create_roster_session(
    body: ClansRequest,
    storage: BaseStorage = Depends(get_storage),
    sessions: RosterSessionStore = Depends(get_roster_sessions),
):
    """
    Build a fresh partition from the current registrations and keep it in
    memory so the admin can rebalance it.

    Output:
        - session id, buckets (with deficit / over capacity flags) and the rendered message
        - HTTP 400 if no clan is given
    """
    registrations = await storage.get_player_registrations()
    partition = build_partition(body.clans, registrations)
    session = sessions.create(partition)
    logger.info('Roster session %s started with %s registrations', session.session_id, len(registrations))
    return session_view(session)


@router.get('/roster-session/{session_id}', name='Get a roster session', response_model=RosterSessionView)
async def get_roster_session(session_id: str, sessions: RosterSessionStore = Depends(get_roster_sessions)):
    return session_view(_get_session(sessions, session_id))


@router.post('/roster-session/{session_id}/move', name='Move a player to another clan',
             response_model=RosterSessionView)
async def move_roster_player(
    session_id: str,
    body: MovePlayerModel,
    sessions: RosterSessionStore = Depends(get_roster_sessions),
):
    session = _get_session(sessions, session_id)
    partition = move_player(session.partition, body.registration_id, body.from_bucket, body.to_bucket)
    return session_view(sessions.update(session_id, partition))


@router.post('/roster-session/{session_id}/move-up', name='Move a player up', response_model=RosterSessionView)
async def move_roster_player_up(
    session_id: str,
    body: ReorderModel,
    sessions: RosterSessionStore = Depends(get_roster_sessions),
):
    session = _get_session(sessions, session_id)
    partition = move_up(session.partition, body.bucket, body.index)
    return session_view(sessions.update(session_id, partition))


@router.post('/roster-session/{session_id}/move-down', name='Move a player down', response_model=RosterSessionView)
async def move_roster_player_down(
    session_id: str,
    body: ReorderModel,
    sessions: RosterSessionStore = Depends(get_roster_sessions),
):
    session = _get_session(sessions, session_id)
    partition = move_down(session.partition, body.bucket, body.index)
    return session_view(sessions.update(session_id, partition))


@router.post('/roster-session/{session_id}/message', name='Save the session message',
             response_model=MessageResponse)
async def save_roster_session_message(
    session_id: str,
    storage: BaseStorage = Depends(get_storage),
    sessions: RosterSessionStore = Depends(get_roster_sessions),
):
    session = _get_session(sessions, session_id)
    message = render_message(session.partition)
    saved = await storage.save_cwl_message(message)
    return MessageResponse(message=message, message_id=saved.id)


@router.get('/roster-session/{session_id}/pdf', name='Export the session message to PDF')
async def export_roster_session_pdf(session_id: str, sessions: RosterSessionStore = Depends(get_roster_sessions)):
    session = _get_session(sessions, session_id)
    return pdf_response(render_message(session.partition))


@router.delete('/roster-session/{session_id}', name='Discard a roster session')
async def delete_roster_session(session_id: str, sessions: RosterSessionStore = Depends(get_roster_sessions)):
    if not sessions.delete(session_id):
        raise HTTPException(status_code=404, detail='Sessione roster non trovata')
    return {'message': 'Sessione roster eliminata'}
