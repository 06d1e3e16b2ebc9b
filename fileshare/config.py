import os
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from dotenv import load_dotenv

# Load .env file for local development
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent
BYTES_PER_MB = 1024 * 1024


def _int_env(key: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to *default*."""
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            "Invalid value for %s: %r. Using default: %d", key, raw, default
        )
        return default
    return max(1, value)


def _path_env(key: str, default: Path) -> Path:
    value = os.getenv(key)
    if value:
        return Path(value).expanduser().resolve()
    return default


@dataclass
class Settings:
    uploads_dir: Path = field(default_factory=lambda: _path_env("FILESHARE_UPLOADS_DIR", BASE_DIR / "uploads"))
    storage_backend: str = field(default_factory=lambda: os.getenv("FILESHARE_STORAGE_BACKEND", "memory").lower())
    db_path: Path = field(default_factory=lambda: _path_env("FILESHARE_DB_PATH", BASE_DIR / "fileshare.db"))
    max_upload_mb: int = field(default_factory=lambda: _int_env("FILESHARE_MAX_UPLOAD_MB", 100))
    log_level: str = field(default_factory=lambda: os.getenv("FILESHARE_LOG_LEVEL", "INFO").upper())
    log_file: str = field(default_factory=lambda: os.getenv("FILESHARE_LOG_FILE", ""))

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * BYTES_PER_MB


@lru_cache
def get_settings() -> Settings:
    return Settings()
