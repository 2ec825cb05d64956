import os
from dataclasses import dataclass
from typing import Optional

# Basic settings helper to read environment configuration.

DEFAULT_NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_NOMINATIM_USER_AGENT = "RioGrandeDueDiligence/1.0"
FUNCTIONS_PATH = "/functions/v1"


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    return float(val)


class Settings:
    def __init__(self) -> None:
        self.NOMINATIM_SEARCH_URL: str = os.getenv("NOMINATIM_SEARCH_URL", DEFAULT_NOMINATIM_SEARCH_URL)
        self.NOMINATIM_USER_AGENT: str = os.getenv("NOMINATIM_USER_AGENT") or DEFAULT_NOMINATIM_USER_AGENT
        self.NOMINATIM_REFERER: Optional[str] = os.getenv("NOMINATIM_REFERER") or None
        self.NOMINATIM_TIMEOUT_SECONDS: float = _as_float(os.getenv("NOMINATIM_TIMEOUT_SECONDS"), 10.0)
        self.AUTOCOMPLETE_LOG_QUERIES: bool = _as_bool(os.getenv("AUTOCOMPLETE_LOG_QUERIES"), True)


@dataclass(frozen=True)
class FunctionsConfig:
    """Connection details for the hosted functions endpoint.

    Built once at process start and handed to the client; nothing reads the
    environment after that.
    """

    base_url: str
    anon_key: str
    timeout_seconds: float = 10.0

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("FunctionsConfig.base_url is required")
        if not self.anon_key:
            raise ValueError("FunctionsConfig.anon_key is required")

    @property
    def functions_url(self) -> str:
        return self.base_url.rstrip("/") + FUNCTIONS_PATH

    @classmethod
    def from_env(cls) -> "FunctionsConfig":
        return cls(
            base_url=os.getenv("SUPABASE_URL", ""),
            anon_key=os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_PUBLISHABLE_KEY", ""),
            timeout_seconds=_as_float(os.getenv("FUNCTIONS_TIMEOUT_SECONDS"), 10.0),
        )


settings = Settings()
