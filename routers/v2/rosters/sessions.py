from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from expiring_dict import ExpiringDict

from routers.v2.rosters.roster_models import RosterPartition
from utils.utils import gen_clean_custom_id, utc_now


@dataclass
class RosterSession:
    session_id: str
    partition: RosterPartition
    created_at: datetime = field(default_factory=utc_now)


class RosterSessionStore:
    """
    In-memory registry of partitions being edited from the admin page.

    Sessions are never persisted: a restart or a new assignment simply
    starts over from the registration store. Each session expires `ttl`
    seconds after it was created, edits do not extend it.
    """

    def __init__(self, ttl: float = 21600):
        self.ttl = ttl
        self._sessions = ExpiringDict()

    def create(self, partition: RosterPartition) -> RosterSession:
        session = RosterSession(session_id=gen_clean_custom_id(), partition=partition)
        while session.session_id in self._sessions:
            session.session_id = gen_clean_custom_id()
        self._sessions.ttl(key=session.session_id, value=session, ttl=self.ttl)
        return session

    def get(self, session_id: str) -> Optional[RosterSession]:
        return self._sessions.get(session_id)

    def update(self, session_id: str, partition: RosterPartition) -> Optional[RosterSession]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        session.partition = partition
        return session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self):
        return len(self._sessions)
