import random
import uuid

import pendulum as pend
from hashids import Hashids
from slowapi import Limiter
from slowapi.util import get_ipaddr

limiter = Limiter(key_func=get_ipaddr, key_style='endpoint')


def gen_clean_custom_id():
    hashids = Hashids(min_length=7)
    custom_id = hashids.encode(
        pend.now(tz=pend.UTC).int_timestamp
        + random.randint(1000000000, 9999999999)
    )
    return custom_id


def gen_registration_id() -> str:
    return str(uuid.uuid4())


def utc_now():
    return pend.now(tz=pend.UTC)


def normalize_player_name(name: str) -> str:
    """Key used to compare player names typed by hand with in-game names."""
    return ' '.join((name or '').split()).casefold()
