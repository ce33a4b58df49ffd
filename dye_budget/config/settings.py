# dye_budget/config/settings.py

"""Central configuration for the dye_budget price finder."""

import getpass
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Read an integer override from the environment."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class Settings:
    """Central configuration for the dye_budget price finder."""

    # --- Price cache ---
    CACHE_SCHEMA_VERSION: str = "v1"
    PRICE_CACHE_TTL: int = _env_int(
        "DYE_BUDGET_CACHE_TTL", 300
    )                                   # Seconds an entry counts as fresh
    PRICE_STALE_THRESHOLD: int = _env_int(
        "DYE_BUDGET_STALE_THRESHOLD", 900
    )                                   # Seconds an entry is servable as stale
    PRICE_CACHE_EXPIRY_BUFFER: int = 60  # Extra store lifetime past stale window

    # --- Universalis proxy ---
    PROXY_URL: str | None = os.getenv("DYE_BUDGET_PROXY_URL") or None
    REQUEST_TIMEOUT_MS: int = _env_int(
        "DYE_BUDGET_REQUEST_TIMEOUT_MS", 10000
    )
    MAX_BATCH_SIZE: int = _env_int("DYE_BUDGET_MAX_BATCH_SIZE", 100)
    DEFAULT_HEADERS: dict[str, str] = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }

    # --- Budget search ---
    DEFAULT_MAX_DISTANCE: float = 50.0
    DEFAULT_LIMIT: int = 5
    AUTOCOMPLETE_LIMIT: int = 25        # Discord choice cap

    # --- User ---
    DEFAULT_USER: str = os.getenv("DYE_BUDGET_USER") or getpass.getuser()

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DYES_PATH: Path = Path(__file__).resolve().parent / "dyes.json"
    KV_DB_PATH: Path = Path(
        os.getenv("DYE_BUDGET_KV_PATH")
        or BASE_DIR / "data" / "kv_store.db"
    )
    LOGS_DIR: Path = BASE_DIR / "logs"
