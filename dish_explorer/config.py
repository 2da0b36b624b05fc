from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_BUNDLED_SEED_CSV = Path(__file__).resolve().parent / "data" / "indian_food.csv"


def _split_env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(p.strip() for p in raw.split(",") if p.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    seed_csv_path: Path = Path(os.getenv("SEED_CSV_PATH", str(_BUNDLED_SEED_CSV)))
    cors_origins: tuple[str, ...] = _split_env_list("CORS_ORIGINS", "*")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
