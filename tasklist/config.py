from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _first_existing(name: str) -> Path | None:
    return next((base / name for base in (Path.cwd(), PROJECT_ROOT) if (base / name).exists()), None)


def load_env() -> None:
    """Load `.env`, then let `.env.<APP_ENV>` override it."""
    base_env = _first_existing(".env")
    if base_env:
        load_dotenv(base_env)
    env_override = _first_existing(f".env.{os.getenv('APP_ENV', 'development')}")
    if env_override:
        load_dotenv(env_override, override=True)


@dataclass(frozen=True)
class Settings:
    database_url: str
    storage_key: str = "tasks"
    log_level: str = "INFO"
    log_dir: str = "logs"


load_env()

DEFAULT_DATABASE_URL = f"sqlite:///{(PROJECT_ROOT / 'tasklist.db').as_posix()}"

SETTINGS = Settings(
    database_url=os.getenv("DATABASE_URL", "").strip() or DEFAULT_DATABASE_URL,
    storage_key=os.getenv("STORAGE_KEY", "").strip() or "tasks",
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    log_dir=os.getenv("LOG_DIR", "logs"),
)
