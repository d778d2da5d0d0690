"""Application settings loaded from environment variables."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

DEFAULT_ANALYSIS_MODEL = "gemini-3-flash-preview"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


class Settings(BaseModel):
    gemini_api_key: Optional[str] = None
    analysis_model: str = DEFAULT_ANALYSIS_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    analysis_timeout_s: float = 300.0
    image_timeout_s: float = 120.0
    vidigenius_log_level: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY"),
            analysis_model=os.getenv("VIDIGENIUS_ANALYSIS_MODEL") or DEFAULT_ANALYSIS_MODEL,
            image_model=os.getenv("VIDIGENIUS_IMAGE_MODEL") or DEFAULT_IMAGE_MODEL,
            analysis_timeout_s=_float_env("VIDIGENIUS_ANALYSIS_TIMEOUT", 300.0),
            image_timeout_s=_float_env("VIDIGENIUS_IMAGE_TIMEOUT", 120.0),
            vidigenius_log_level=os.getenv("VIDIGENIUS_LOG_LEVEL"),
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings.from_env()
