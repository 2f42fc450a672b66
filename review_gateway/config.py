"""
Configuration management for the review gateway.
"""
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from .env import load_env

DEEPINFRA_API_URL = "https://api.deepinfra.com/v1/openai/chat/completions"
DEFAULT_MODEL = "meta-llama/Llama-3.3-70B-Instruct"


class Settings(BaseModel):
    """Runtime settings, read from environment variables."""

    # Completion provider
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    api_url: str = DEEPINFRA_API_URL

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        log_dir = os.getenv("LOG_DIR")
        return cls(
            api_key=os.getenv("DEEPINFRA_API_KEY") or None,
            # An empty DEEPINFRA_MODEL falls back to the default as well
            model=os.getenv("DEEPINFRA_MODEL") or DEFAULT_MODEL,
            api_url=os.getenv("DEEPINFRA_API_URL") or DEEPINFRA_API_URL,
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=Path(log_dir) if log_dir else None,
        )

    @classmethod
    def default(cls) -> "Settings":
        """Load .env if present, then read the environment."""
        load_env()
        return cls.from_env()
