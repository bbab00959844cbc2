from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class InsertPlayerRegistration(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    player_name: str = Field(..., min_length=1, max_length=64, description='In-game player name')
    level_tag: str = Field(..., min_length=1, max_length=32, description='Level label, e.g. TH15')


class PlayerRegistration(InsertPlayerRegistration):
    id: str = Field(..., description='Opaque registration identifier')
    registered_at: datetime


class ClanDescriptor(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=64)
    capacity: int = Field(..., gt=0, description='Advertised number of participants')
    league_tier: str = Field(..., min_length=1, max_length=64, description='CWL league, e.g. Gold League I')


class Clan(ClanDescriptor):
    id: str
    created_at: datetime


class CwlMessage(BaseModel):
    id: str
    content: str
    created_at: datetime


class ClanBucket(BaseModel):
    descriptor: ClanDescriptor
    members: List[PlayerRegistration] = Field(default_factory=list)


class RosterPartition(BaseModel):
    buckets: List[ClanBucket] = Field(default_factory=list)


# Request / response bodies

class ClansRequest(BaseModel):
    clans: List[ClanDescriptor] = Field(default_factory=list)


class MovePlayerModel(BaseModel):
    registration_id: str
    from_bucket: int
    to_bucket: int


class ReorderModel(BaseModel):
    bucket: int
    index: int


class BucketView(BaseModel):
    index: int
    descriptor: ClanDescriptor
    members: List[PlayerRegistration]
    deficit: int = Field(..., description='Players still missing to reach capacity')
    over_capacity: bool = Field(..., description='More members than the advertised capacity')


class RosterSessionView(BaseModel):
    session_id: str
    created_at: datetime
    buckets: List[BucketView]
    message: str


class MessageResponse(BaseModel):
    message: str
    message_id: Optional[str] = None
