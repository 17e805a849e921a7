# stockdesk/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, List, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    # Inventory REST backend (all screens read and write through it)
    API_URL: str = "http://localhost:8080/api/v1"
    API_TIMEOUT: float = 10.0

    FRONTEND_URL: Optional[str] = None

    # Tokens are issued by the backend. With a shared secret configured the
    # signature is verified here too, otherwise only expiry is checked.
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"

    # Grouped screens load one backend page of movements per refresh
    MOVEMENTS_FETCH_LIMIT: int = 100
    DEFAULT_PAGE_SIZE: int = 10

    # Roles allowed to submit changes; empty means any signed-in user
    MANAGE_ROLES: List[str] = []

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)

settings = Settings()
