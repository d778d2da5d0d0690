"""Exception types raised across the upload, analysis and thumbnail flow."""

from __future__ import annotations

import json
from typing import Optional


class VidiGeniusError(RuntimeError):
    """Base class for every error this package raises on purpose."""


class ConfigurationError(VidiGeniusError):
    """Raised at startup when required configuration such as the API key is missing."""


class ValidationError(VidiGeniusError):
    """Raised when an uploaded file is rejected before any network call."""


class GatewayError(VidiGeniusError):
    """A remote model call failed or returned something unusable."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AnalysisFailure(GatewayError):
    """Transport error or schema violation from the analysis model."""


class ThumbnailFailure(GatewayError):
    """Transport error or missing image data from the image model."""


class RegenerationFailure(ThumbnailFailure):
    """Thumbnail failure on the aspect-ratio regeneration path."""


def unwrap_provider_message(raw: str) -> str:
    """Return the nested ``error.message`` of a JSON provider payload, else ``raw`` unchanged.

    Only one level is unwrapped: ``{"error": {"message": "..."}}``.
    """
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return raw
    if isinstance(parsed, dict):
        error = parsed.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, str) and message:
                return message
    return raw


class InvalidTransition(VidiGeniusError):
    """Raised when an operation is requested from a phase that does not allow it."""
