from os import getenv
from dataclasses import dataclass
import os
from dotenv import load_dotenv

load_dotenv()

@dataclass(frozen=True, slots=True)
class Config:
    clash_api_key = getenv("CLASH_API_KEY") or getenv("COC_API_KEY") or ""
    clash_api_url = getenv("CLASH_API_URL", "https://api.clashofclans.com/v1")
    clash_cache_ttl = int(getenv("CLASH_CACHE_TTL", "300"))

    static_mongodb = getenv("STATIC_MONGODB")
    mongodb_name = getenv("MONGODB_NAME", "cwl_roster")

    data_dir = getenv("DATA_DIR", os.path.join(os.getcwd(), "data"))
    registrations_file = "listaIscrizioni.txt"

    registration_rate_limit = getenv("REGISTRATION_RATE_LIMIT", "30/minute")
    roster_session_ttl = int(getenv("ROSTER_SESSION_TTL", "21600"))

    ENV = os.getenv("APP_ENV", "local")
    IS_LOCAL = ENV == "local"
    IS_DEV = ENV == "development"
    IS_PROD = ENV == "production"

    HOST = "localhost" if IS_LOCAL else "0.0.0.0"
    PORT = 8000 if IS_LOCAL else (8073 if IS_DEV else 8010)
    RELOAD = IS_LOCAL or IS_DEV

    SENTRY_DSN = os.getenv('SENTRY_DSN')


config = Config()
