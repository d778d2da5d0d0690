"""Backend interfaces for the analysis and thumbnail gateways."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..analysis.models import AnalysisResult
    from ..thumbnail.gateway import AspectRatio


class AnalysisBackend(Protocol):
    name: str

    def analyze(self, video_bytes: bytes, mime_type: str) -> "AnalysisResult":
        """Analyze the video and return the validated result."""


class ThumbnailBackend(Protocol):
    name: str

    def generate(self, prompt: str, aspect_ratio: "AspectRatio") -> str:
        """Generate a thumbnail and return it as a data URI."""


__all__ = ["AnalysisBackend", "ThumbnailBackend"]
