# farmops/config.py
import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_DB_PATH = "data/farmops.db"
DEFAULT_PHOTO_DIR = "data/farm-photos"


@dataclass
class Settings:
    db_path: str
    photo_dir: str
    log_dir: str
    log_level: str
    log_format: str
    calendar_days: int = 30
    calendar_limit: int = 5
    trend_months: int = 6
    max_photos: int = 3


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_settings() -> Settings:
    """Read settings from the environment (after .env has been loaded)."""
    return Settings(
        db_path=os.getenv("FARMOPS_DB_PATH", DEFAULT_DB_PATH),
        photo_dir=os.getenv("FARMOPS_PHOTO_DIR", DEFAULT_PHOTO_DIR),
        log_dir=os.getenv("LOG_DIR", "logs"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_format=os.getenv("LOG_FORMAT", "text").lower(),
        calendar_days=_int_env("FARMOPS_CALENDAR_DAYS", 30),
        calendar_limit=_int_env("FARMOPS_CALENDAR_LIMIT", 5),
        trend_months=_int_env("FARMOPS_TREND_MONTHS", 6),
    )
