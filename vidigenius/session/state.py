"""Session state for one upload-analyze-generate cycle."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from ..analysis.models import AnalysisResult
from ..thumbnail.gateway import AspectRatio

MAX_UPLOAD_BYTES = 50 * 1024 * 1024
DEFAULT_MIME_TYPE = "video/mp4"
DEFAULT_ASPECT_RATIO = AspectRatio.PORTRAIT_9x16


class Phase(str, Enum):
    IDLE = "IDLE"
    UPLOADING = "UPLOADING"
    ANALYZING = "ANALYZING"
    GENERATING_THUMBNAIL = "GENERATING_THUMBNAIL"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"

    @property
    def is_busy(self) -> bool:
        return self in {Phase.UPLOADING, Phase.ANALYZING, Phase.GENERATING_THUMBNAIL}

    @property
    def is_terminal(self) -> bool:
        return self in {Phase.COMPLETED, Phase.ERROR}


@dataclass
class SessionState:
    phase: Phase = Phase.IDLE
    error_message: Optional[str] = None
    analysis: Optional[AnalysisResult] = None
    thumbnail_image: Optional[str] = None
    aspect_ratio: AspectRatio = DEFAULT_ASPECT_RATIO
    is_regenerating_thumbnail: bool = False
    progress: str = ""

    def copy(self) -> "SessionState":
        # AnalysisResult is frozen all the way down, so a shallow copy is a full snapshot.
        return replace(self)


@dataclass(frozen=True)
class UploadedVideo:
    """A selected file: metadata up front, bytes only when ``read()`` is called."""

    name: str
    size: int
    mime_type: str
    reader: Callable[[], bytes] = field(repr=False)

    def read(self) -> bytes:
        return self.reader()

    @classmethod
    def from_path(cls, path: Path, mime_type: Optional[str] = None) -> "UploadedVideo":
        path = Path(path)
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            size=path.stat().st_size,
            mime_type=mime_type or guessed or DEFAULT_MIME_TYPE,
            reader=path.read_bytes,
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> "UploadedVideo":
        return cls(name=name, size=len(data), mime_type=mime_type, reader=lambda: data)


__all__ = [
    "DEFAULT_ASPECT_RATIO",
    "MAX_UPLOAD_BYTES",
    "Phase",
    "SessionState",
    "UploadedVideo",
]
