from typing import List, Optional
from pydantic import BaseModel

from models.clan import ClashPlayer
from routers.v2.rosters.roster_models import PlayerRegistration


class MemberRegistrationCheck(BaseModel):
    player: ClashPlayer
    registered: bool
    registration_id: Optional[str] = None
    level_tag: Optional[str] = None


class RegistrationCrossReference(BaseModel):
    clan_tag: str
    members: List[MemberRegistrationCheck]
    registered_count: int
    unmatched_registrations: List[PlayerRegistration]
