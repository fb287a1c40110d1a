from pydantic_settings import BaseSettings
from typing import Any, Dict
from pathlib import Path


class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "AI Desk"
    VERSION: str = "0.1.0"
    DEBUG: bool = False

    # API settings
    API_V1_STR: str = "/api/v1"
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # CORS settings (renderer origins of the desktop shell)
    BACKEND_CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "file://"
    ]

    # Storage
    DATA_DIR: str = "./app_data"
    DATABASE_FILE: str = "db.sqlite"
    SESSION_FILE: str = "user-session.json"

    # Session settings
    SESSION_TIMEOUT_HOURS: int = 24

    # Password hashing work factor
    BCRYPT_ROUNDS: int = 10

    # Preferences handed to a freshly logged-in user
    DEFAULT_PREFERENCES: Dict[str, Any] = {
        "darkMode": False,
        "lastUsedAI": "claude"
    }

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    def resolve_data_path(self, name: str) -> Path:
        """Resolve a storage file name against DATA_DIR (absolute names are kept)"""
        path = Path(name)
        if path.is_absolute():
            return path
        return Path(self.DATA_DIR) / path

    @property
    def database_path(self) -> Path:
        return self.resolve_data_path(self.DATABASE_FILE)

    @property
    def session_path(self) -> Path:
        return self.resolve_data_path(self.SESSION_FILE)


settings = Settings()
