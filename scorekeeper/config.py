"""Runtime settings, overridable through SCOREKEEPER_* environment variables."""
import os
from dataclasses import dataclass
from typing import Optional

from .utils.constants import (
    AUTO_SAVE_INTERVAL_SECONDS, DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_INTERVAL_SECONDS,
    DEFAULT_STORAGE_QUOTA_BYTES, DEFAULT_TIMER_MINUTES
)


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(f"SCOREKEEPER_{name}")
    return value if value not in (None, "") else default


@dataclass
class Settings:
    data_dir: str = "scorekeeper_data"
    export_dir: str = "exports"
    roster_url: Optional[str] = None
    submit_url: Optional[str] = None
    default_timer_minutes: int = DEFAULT_TIMER_MINUTES
    default_interval_seconds: int = DEFAULT_INTERVAL_SECONDS
    auto_save_interval_seconds: float = AUTO_SAVE_INTERVAL_SECONDS
    # None disables the quota
    storage_quota_bytes: Optional[int] = DEFAULT_STORAGE_QUOTA_BYTES
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    host: str = "127.0.0.1"
    port: int = 7122
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        quota = _env("STORAGE_QUOTA_BYTES", str(DEFAULT_STORAGE_QUOTA_BYTES))
        return cls(
            data_dir=_env("DATA_DIR", "scorekeeper_data"),
            export_dir=_env("EXPORT_DIR", "exports"),
            roster_url=_env("ROSTER_URL"),
            submit_url=_env("SUBMIT_URL"),
            default_timer_minutes=int(_env("TIMER_MINUTES", str(DEFAULT_TIMER_MINUTES))),
            default_interval_seconds=int(_env("INTERVAL_SECONDS", str(DEFAULT_INTERVAL_SECONDS))),
            auto_save_interval_seconds=float(_env("AUTO_SAVE_SECONDS", str(AUTO_SAVE_INTERVAL_SECONDS))),
            storage_quota_bytes=int(quota) if int(quota) > 0 else None,
            http_timeout_seconds=float(_env("HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT_SECONDS))),
            host=_env("HOST", "127.0.0.1"),
            port=int(_env("PORT", "7122")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
        )
