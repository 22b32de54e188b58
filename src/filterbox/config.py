"""Runtime settings read from the environment (and ``.env``)."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

__all__ = ["EngineSettings", "load_settings"]


class EngineSettings(BaseModel):
    """Settings shared by the CLI, the demo app and the default suggestion sources."""

    model_config = ConfigDict(frozen=True)

    log_level: str = Field(default="INFO", description="Minimum level for the log file")
    log_file: Optional[str] = Field(None, description="Log file path; defaults to filterbox.log in the project root")
    debounce: float = Field(default=0.3, ge=0, description="Debounce for remote suggestion sources, in seconds")
    min_chars: int = Field(default=1, ge=0, description="Minimum characters before remote sources are queried")
    cache_ttl: float = Field(default=60.0, gt=0, description="Time-to-live of cached suggestions, in seconds")


def load_settings(dotenv: bool = True) -> EngineSettings:
    """Load settings from ``FILTERBOX_*`` environment variables.

    Args:
        dotenv: Read a ``.env`` file into the environment first
    """
    if dotenv:
        load_dotenv()

    return EngineSettings(
        log_level=os.getenv("FILTERBOX_LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("FILTERBOX_LOG_FILE") or None,
        debounce=float(os.getenv("FILTERBOX_DEBOUNCE", "0.3")),
        min_chars=int(os.getenv("FILTERBOX_MIN_CHARS", "1")),
        cache_ttl=float(os.getenv("FILTERBOX_CACHE_TTL", "60")),
    )
