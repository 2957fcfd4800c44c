"""Runtime configuration and logging setup."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError

# Default data directory (repository root / data)
DATA_DIR = Path(__file__).parent.parent.parent / "data"

DEFAULT_MODEL = "gemini-2.5-flash"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    """Application settings, normally read from the environment."""

    data_dir: Path = DATA_DIR
    db_name: str = "pr_tracker.db"
    gemini_api_key: str | None = None
    model: str = DEFAULT_MODEL
    log_level: str = "INFO"
    session_cookie: str = "pr_tracker_session"

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name

    @property
    def ai_enabled(self) -> bool:
        """Whether a credential for the coaching assistant is configured."""
        return bool(self.gemini_api_key)

    @classmethod
    def from_env(cls, environ: dict | None = None) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ConfigurationError: If the data directory cannot be used.
        """
        env = os.environ if environ is None else environ

        data_dir = Path(env.get("PR_TRACKER_DATA_DIR") or DATA_DIR)
        if data_dir.exists() and not data_dir.is_dir():
            raise ConfigurationError(f"Data directory {data_dir} is not a directory")

        db_name = env.get("PR_TRACKER_DB_NAME") or "pr_tracker.db"
        if "/" in db_name or "\\" in db_name:
            raise ConfigurationError("PR_TRACKER_DB_NAME must be a file name, not a path")

        return cls(
            data_dir=data_dir,
            db_name=db_name,
            gemini_api_key=env.get("GEMINI_API_KEY") or env.get("GOOGLE_API_KEY") or None,
            model=env.get("PR_TRACKER_MODEL") or DEFAULT_MODEL,
            log_level=(env.get("PR_TRACKER_LOG_LEVEL") or "INFO").upper(),
            session_cookie=env.get("PR_TRACKER_SESSION_COOKIE") or "pr_tracker_session",
        )


def configure_logging(level: str = "INFO") -> None:
    """Install a stream handler on the root logger (once) and set the level."""
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))
