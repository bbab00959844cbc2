import logging
import os
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient
from starlette.concurrency import run_in_threadpool

from routers.v2.rosters.roster_models import (Clan, ClanDescriptor,
                                              CwlMessage,
                                              InsertPlayerRegistration,
                                              PlayerRegistration)
from utils.utils import gen_clean_custom_id, gen_registration_id, utc_now

logger = logging.getLogger(__name__)


class BaseStorage:
    """
    Shared plumbing for the storage backends.

    Every registration is mirrored as a `<player_name> <level_tag>` line in a
    text file under `data_dir`, so the list can be pasted straight into chat.
    """

    def __init__(self, data_dir: str, registrations_file: str = 'listaIscrizioni.txt'):
        self.data_dir = data_dir
        self.registrations_file = registrations_file
        os.makedirs(self.data_dir, exist_ok=True)

    def _path(self, filename: str) -> str:
        return os.path.join(self.data_dir, filename)

    def _write(self, filename: str, content: str, mode: str) -> None:
        with open(self._path(filename), mode, encoding='utf-8') as f:
            f.write(content)

    def _read(self, filename: str) -> str:
        try:
            with open(self._path(filename), 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            return ''

    async def save_to_file(self, filename: str, content: str) -> None:
        await run_in_threadpool(self._write, filename, content, 'w')

    async def read_from_file(self, filename: str) -> str:
        return await run_in_threadpool(self._read, filename)

    async def clear_file(self, filename: str) -> None:
        await self.save_to_file(filename, '')

    async def append_to_file(self, filename: str, content: str) -> None:
        await run_in_threadpool(self._write, filename, content, 'a')

    async def _mirror_registration(self, registration: PlayerRegistration) -> None:
        await self.append_to_file(
            self.registrations_file,
            f'{registration.player_name} {registration.level_tag}\n',
        )

    @staticmethod
    def _new_registration(data: InsertPlayerRegistration) -> PlayerRegistration:
        return PlayerRegistration(
            id=gen_registration_id(),
            registered_at=utc_now(),
            **data.model_dump(),
        )

    @staticmethod
    def _new_clan(data: ClanDescriptor) -> Clan:
        return Clan(id=gen_clean_custom_id(), created_at=utc_now(), **data.model_dump())

    @staticmethod
    def _new_message(content: str) -> CwlMessage:
        return CwlMessage(id=gen_clean_custom_id(), content=content, created_at=utc_now())


class MemoryStorage(BaseStorage):
    """Process-local storage: an ordered list of registrations plus an id index."""

    def __init__(self, data_dir: str, registrations_file: str = 'listaIscrizioni.txt'):
        super().__init__(data_dir, registrations_file)
        self._registrations: list[PlayerRegistration] = []
        self._registrations_by_id: dict[str, PlayerRegistration] = {}
        self._clans: list[Clan] = []
        self._messages: list[CwlMessage] = []

    async def get_player_registrations(self) -> list[PlayerRegistration]:
        return list(self._registrations)

    async def get_player_registration(self, registration_id: str) -> Optional[PlayerRegistration]:
        return self._registrations_by_id.get(registration_id)

    async def add_player_registration(self, data: InsertPlayerRegistration) -> PlayerRegistration:
        registration = self._new_registration(data)
        self._registrations.append(registration)
        self._registrations_by_id[registration.id] = registration
        await self._mirror_registration(registration)
        return registration

    async def clear_player_registrations(self) -> None:
        self._registrations.clear()
        self._registrations_by_id.clear()
        await self.clear_file(self.registrations_file)

    async def get_clans(self) -> list[Clan]:
        return list(self._clans)

    async def add_clan(self, data: ClanDescriptor) -> Clan:
        clan = self._new_clan(data)
        self._clans.append(clan)
        return clan

    async def save_cwl_message(self, content: str) -> CwlMessage:
        message = self._new_message(content)
        self._messages.append(message)
        return message

    async def get_cwl_messages(self) -> list[CwlMessage]:
        return list(reversed(self._messages))

    async def close(self) -> None:
        return None


class MongoClient:
    def __init__(self, uri: str, db_name: str):
        self.client = AsyncIOMotorClient(uri)
        db = self.client.get_database(db_name)
        self.player_registrations = db.player_registrations
        self.clans = db.clans
        self.cwl_messages = db.cwl_messages

    def close(self):
        self.client.close()


class MongoStorage(BaseStorage):
    def __init__(self, mongo: MongoClient, data_dir: str, registrations_file: str = 'listaIscrizioni.txt'):
        super().__init__(data_dir, registrations_file)
        self.mongo = mongo

    async def get_player_registrations(self) -> list[PlayerRegistration]:
        docs = await self.mongo.player_registrations.find(
            {}, {'_id': 0}
        ).sort('registered_at', 1).to_list(length=None)
        return [PlayerRegistration(**doc) for doc in docs]

    async def get_player_registration(self, registration_id: str) -> Optional[PlayerRegistration]:
        doc = await self.mongo.player_registrations.find_one({'id': registration_id}, {'_id': 0})
        return PlayerRegistration(**doc) if doc else None

    async def add_player_registration(self, data: InsertPlayerRegistration) -> PlayerRegistration:
        registration = self._new_registration(data)
        await self.mongo.player_registrations.insert_one(registration.model_dump())
        await self._mirror_registration(registration)
        return registration

    async def clear_player_registrations(self) -> None:
        result = await self.mongo.player_registrations.delete_many({})
        logger.info('Cleared %s player registrations', result.deleted_count)
        await self.clear_file(self.registrations_file)

    async def get_clans(self) -> list[Clan]:
        docs = await self.mongo.clans.find({}, {'_id': 0}).sort('created_at', 1).to_list(length=None)
        return [Clan(**doc) for doc in docs]

    async def add_clan(self, data: ClanDescriptor) -> Clan:
        clan = self._new_clan(data)
        await self.mongo.clans.insert_one(clan.model_dump())
        return clan

    async def save_cwl_message(self, content: str) -> CwlMessage:
        message = self._new_message(content)
        await self.mongo.cwl_messages.insert_one(message.model_dump())
        return message

    async def get_cwl_messages(self) -> list[CwlMessage]:
        docs = await self.mongo.cwl_messages.find({}, {'_id': 0}).sort('created_at', -1).to_list(length=None)
        return [CwlMessage(**doc) for doc in docs]

    async def close(self) -> None:
        self.mongo.close()


def create_storage(config) -> BaseStorage:
    if config.static_mongodb:
        logger.info('Using MongoDB storage (%s)', config.mongodb_name)
        return MongoStorage(
            MongoClient(config.static_mongodb, config.mongodb_name),
            data_dir=config.data_dir,
            registrations_file=config.registrations_file,
        )
    logger.info('Using in-memory storage')
    return MemoryStorage(data_dir=config.data_dir, registrations_file=config.registrations_file)
