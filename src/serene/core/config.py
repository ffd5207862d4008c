import json
import logging
import os
from pathlib import Path
from typing import ClassVar, Optional, Union

from dotenv import load_dotenv
from pydantic import ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

log_format = logging.Formatter("%(asctime)s : %(levelname)s - %(message)s")

# root logger
root_logger = logging.getLogger()
root_logger.setLevel(logging.INFO)

# standard stream handler
if not any(isinstance(h, logging.StreamHandler) for h in root_logger.handlers):
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(log_format)
    root_logger.addHandler(stream_handler)

logger = logging.getLogger(__name__)

env_path = Path(os.getenv("SERENE_ENV_FILE", ".env"))
if env_path.exists():
    load_dotenv(dotenv_path=env_path)
    logger.info(f"Loaded environment from {env_path}")
else:
    logger.info(f"No .env file at {env_path}, using process environment")

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "db" / "seed" / "mindfulness.yaml"


class Settings(BaseSettings):
    PROJECT_NAME: str = "serene-api"
    API_PREFIX: str = "/api"
    ENV: str = Field(default="development", description="development, testing or production")

    # Database Configuration
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./serene.db",
        description="Async SQLAlchemy database URL"
    )

    # Session Configuration
    SESSION_SECRET_KEY: str = Field(
        default="dev-session-secret-change-in-production",
        description="HMAC key used to sign session tokens"
    )
    SESSION_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "serene_session"
    SESSION_TTL_MINUTES: int = 60 * 24 * 7
    SESSION_COOKIE_SECURE: bool = False

    # Server Configuration
    SERVER_PORT: int = 8001
    BACKEND_CORS_ORIGINS: Union[str, list[str]] = ["http://localhost:5173"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, list[str]]) -> list[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, list):
            return v
        elif isinstance(v, str):
            return json.loads(v)
        raise ValueError(v)

    # Billing (optional)
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None

    # Mindfulness catalog seed
    CATALOG_PATH: Path = DEFAULT_CATALOG_PATH

    model_config: ClassVar[ConfigDict] = ConfigDict(arbitrary_types_allowed=True, extra="ignore")


settings = Settings()

if settings.ENV == "production" and settings.SESSION_SECRET_KEY.startswith("dev-"):
    raise ValueError("SESSION_SECRET_KEY must be set in production")
