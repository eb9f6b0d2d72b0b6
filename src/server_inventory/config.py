"""
Application-wide settings.
"""

import os
from functools import lru_cache
from pydantic_settings import BaseSettings
from server_inventory.constants import SESSION_TTL


class Settings(BaseSettings):
    api_url: str = os.getenv("SERVER_INVENTORY_API_URL", "http://127.0.0.1:8080")
    session_file: str = os.getenv(
        "SERVER_INVENTORY_SESSION_FILE",
        os.path.join(os.path.expanduser("~"), ".config", "server-inventory", "session.json"),
    )
    session_ttl: int = int(os.getenv("SERVER_INVENTORY_SESSION_TTL", str(SESSION_TTL)))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
