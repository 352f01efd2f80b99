import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_INSTRUMENT_PATH = PACKAGE_DIR / "instruments" / "instrument.v1.json"


class Settings:
    APP_VERSION: str = "1.0.0"
    SCHEMA_VERSION: str = "v1-draft-record"

    # --- CONFIG ---
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./lrid.db")
    INSTRUMENT_PATH = os.getenv("LRID_INSTRUMENT_PATH", str(DEFAULT_INSTRUMENT_PATH))
    ADMIN_KEY = os.getenv("LRID_ADMIN_KEY", "change-me")
    SQL_ECHO = os.getenv("SQL_ECHO", "0") == "1"


@lru_cache
def get_settings():
    return Settings()
