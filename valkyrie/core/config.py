# valkyrie/core/config.py
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DEPLOY_PHASE: str = "local"
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent

    DATABASE_URL: str = "sqlite+aiosqlite:///./valkyrie.db"

    # Session cookie
    COOKIE_NAME: str = "vlk"
    SESSION_EXPIRE_DAYS: int = 7

    # Frontend origin (CORS + links in mails)
    CORS_ORIGIN: str = "http://localhost:3000"

    # Avatar uploads
    UPLOAD_DIR: Path = BASE_DIR / "mnt" / "files"
    FILES_BASE_URL: str = "http://localhost:4000/files"
    MAX_IMAGE_SIZE: int = 5 * 1024 * 1024

    RESET_TOKEN_EXPIRE_DAYS: int = 3

    # Mail (logged instead of sent when SMTP_HOST is empty)
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    MAIL_FROM: str = "Valkyrie <noreply@valkyrie.local>"

    @property
    def is_production(self) -> bool:
        return self.DEPLOY_PHASE in ("prod", "production")


settings = Settings()
