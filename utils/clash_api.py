import logging
from typing import Optional
from urllib.parse import quote

import aiohttp
import orjson
from aiocache import SimpleMemoryCache
from coc.utils import correct_tag

from models.clan import ClashPlayer

logger = logging.getLogger(__name__)


class ClashAPIError(Exception):
    """Non-200 answer (or no answer at all) from the Clash of Clans API."""

    def __init__(self, status: int, text: str = '', retry_after: Optional[int] = None):
        super().__init__(f'Clash API error {status}: {text}')
        self.status = status
        self.text = text
        self.retry_after = retry_after


class ClashStatsClient:
    """Read-only client for clan member statistics, with a small TTL cache per clan."""

    def __init__(self, api_key: str, base_url: str = 'https://api.clashofclans.com/v1',
                 cache_ttl: int = 300, timeout: int = 10):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.cache_ttl = cache_ttl
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._cache = SimpleMemoryCache()
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def _get(self, path: str) -> dict:
        session = await self._get_session()
        headers = {
            'Authorization': f'Bearer {self.api_key}',
            'Accept': 'application/json',
        }
        try:
            async with session.get(f'{self.base_url}{path}', headers=headers) as response:
                body = await response.read()
                if response.status != 200:
                    retry_after = response.headers.get('Retry-After')
                    raise ClashAPIError(
                        response.status,
                        body.decode('utf-8', errors='replace'),
                        retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                    )
                return orjson.loads(body)
        except aiohttp.ClientError as e:
            logger.warning('Clash API request to %s failed: %s', path, e)
            raise ClashAPIError(503, str(e)) from e

    async def get_clan_members(self, clan_tag: str) -> list[ClashPlayer]:
        clan_tag = correct_tag(clan_tag)
        cached = await self._cache.get(clan_tag)
        if cached is not None:
            return cached

        data = await self._get(f'/clans/{quote(clan_tag)}/members')
        players = parse_members(data)
        await self._cache.set(clan_tag, players, ttl=self.cache_ttl)
        return players

    async def close(self):
        if self._session is not None and not self._session.closed:
            await self._session.close()


def parse_members(data: dict) -> list[ClashPlayer]:
    return [ClashPlayer.model_validate(member) for member in data.get('items', [])]
