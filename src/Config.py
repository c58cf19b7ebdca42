import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

DEFAULT_ALLOWED_ORIGINS = "http://localhost:3000,https://yourfrontendurl.com"


@dataclass(frozen=True)
class Settings:
    mongo_uri: str = "mongodb://localhost:27017/chatcache"
    answer_service_url: str = "http://localhost:8000"
    http_timeout: float = 30.0
    allowed_origins: tuple = tuple(DEFAULT_ALLOWED_ORIGINS.split(","))
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    load_dotenv()

    return Settings(
        mongo_uri=os.getenv("MONGO_URI", Settings.mongo_uri),
        answer_service_url=os.getenv("ANSWER_SERVICE_URL", Settings.answer_service_url),
        http_timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
        allowed_origins=tuple(_split_origins(os.getenv("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS))),
        host=os.getenv("HOST", Settings.host),
        port=int(os.getenv("PORT", "5000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
