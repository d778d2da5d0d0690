"""State controller driving the upload, analysis and thumbnail phases."""

from __future__ import annotations

import threading
from typing import List, Optional, Tuple

from ..backends.base import AnalysisBackend, ThumbnailBackend
from ..errors import (
    InvalidTransition,
    RegenerationFailure,
    ValidationError,
    unwrap_provider_message,
)
from ..thumbnail.gateway import AspectRatio
from ..util.logging import emit_event, get_logger
from .state import MAX_UPLOAD_BYTES, Phase, SessionState, UploadedVideo

logger = get_logger(__name__)

OVERSIZE_MESSAGE = "Video file is too large. Please upload a clip under 50MB for analysis."
READ_FAILURE_MESSAGE = "Failed to read file."
UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"

PROGRESS_MESSAGES = {
    Phase.UPLOADING: "Ingesting content...",
    Phase.ANALYZING: "Analyzing every frame from 00:00...",
    Phase.GENERATING_THUMBNAIL: "Generating cinematic visual assets...",
}


def validate_upload(video: UploadedVideo) -> None:
    """Raise ValidationError when the file exceeds the upload limit."""
    if video.size > MAX_UPLOAD_BYTES:
        raise ValidationError(OVERSIZE_MESSAGE)


def failure_message(exc: BaseException) -> str:
    """Readable message for a pipeline failure, with provider payloads unwrapped one level."""
    raw = str(exc).strip()
    if not raw:
        return UNKNOWN_ERROR_MESSAGE
    return unwrap_provider_message(raw)


class SessionController:
    """Owns the single SessionState and every transition applied to it.

    Writes go through ``self._lock``; the lock is never held across a gateway call.
    A reset bumps ``self._run_id`` so results from a pipeline or regeneration that
    started before the reset are dropped instead of landing in the fresh state.
    """

    def __init__(self, analysis_gateway: AnalysisBackend, thumbnail_gateway: ThumbnailBackend) -> None:
        self._analysis_gateway = analysis_gateway
        self._thumbnail_gateway = thumbnail_gateway
        self._lock = threading.Lock()
        self._state = SessionState()
        self._phase_history: List[Phase] = [Phase.IDLE]
        self._run_id = 0
        self._last_regeneration_failure: Optional[RegenerationFailure] = None

    # ---------- read-only surface ----------

    @property
    def last_regeneration_failure(self) -> Optional[RegenerationFailure]:
        """Failure of the most recent regeneration, or None if it succeeded."""
        with self._lock:
            return self._last_regeneration_failure

    def snapshot(self) -> SessionState:
        with self._lock:
            return self._state.copy()

    @property
    def phase_history(self) -> Tuple[Phase, ...]:
        with self._lock:
            return tuple(self._phase_history)

    # ---------- transitions ----------

    def _enter(self, phase: Phase, run_id: int) -> bool:
        """Move to ``phase`` if the run is still current. Caller must hold the lock."""
        if run_id != self._run_id:
            return False
        self._state.phase = phase
        self._state.progress = PROGRESS_MESSAGES.get(phase, "")
        self._phase_history.append(phase)
        emit_event(logger, "session.phase", phase=phase.value)
        return True

    def _fail(self, message: str, run_id: int) -> None:
        with self._lock:
            if self._enter(Phase.ERROR, run_id):
                self._state.error_message = message

    def select_aspect_ratio(self, ratio: AspectRatio) -> None:
        """Choose the ratio the next pipeline run renders its thumbnail in."""
        with self._lock:
            if self._state.phase.is_busy or self._state.is_regenerating_thumbnail:
                raise InvalidTransition("Cannot change the aspect ratio while a request is running.")
            self._state.aspect_ratio = AspectRatio(ratio)

    def upload_and_analyze(self, video: UploadedVideo) -> SessionState:
        """Run the whole pipeline for ``video`` and return the resulting snapshot.

        Oversize files only set ``error_message``; gateway failures end in ERROR.
        """
        with self._lock:
            try:
                validate_upload(video)
            except ValidationError as exc:
                self._state.error_message = str(exc)
                emit_event(logger, "upload.rejected", name=video.name, size=video.size)
                return self._state.copy()
            if self._state.phase is not Phase.IDLE:
                raise InvalidTransition(
                    f"Cannot upload while in {self._state.phase.value}; reset the session first."
                )

            run_id = self._run_id
            self._state.error_message = None
            self._enter(Phase.UPLOADING, run_id)

        emit_event(logger, "upload.start", name=video.name, size=video.size, mime_type=video.mime_type)
        try:
            video_bytes = video.read()
        except OSError as exc:
            logger.error("Failed to read %s: %s", video.name, exc)
            self._fail(READ_FAILURE_MESSAGE, run_id)
            return self.snapshot()

        with self._lock:
            if not self._enter(Phase.ANALYZING, run_id):
                return self._state.copy()

        try:
            analysis = self._analysis_gateway.analyze(video_bytes, video.mime_type)
        except Exception as exc:  # noqa: BLE001
            logger.error("Analysis failed: %s", exc, extra={"event": "session.analysis_failed"})
            self._fail(failure_message(exc), run_id)
            return self.snapshot()

        with self._lock:
            if run_id != self._run_id:
                return self._state.copy()
            self._state.analysis = analysis
            self._enter(Phase.GENERATING_THUMBNAIL, run_id)
            ratio = self._state.aspect_ratio

        try:
            image = self._thumbnail_gateway.generate(analysis.thumbnail_concept.prompt, ratio)
        except Exception as exc:  # noqa: BLE001
            logger.error("Thumbnail generation failed: %s", exc, extra={"event": "session.thumbnail_failed"})
            self._fail(failure_message(exc), run_id)
            return self.snapshot()

        with self._lock:
            if run_id == self._run_id:
                self._state.thumbnail_image = image
                self._enter(Phase.COMPLETED, run_id)
            return self._state.copy()

    def regenerate_thumbnail(self, new_ratio: AspectRatio) -> bool:
        """Re-render the thumbnail in ``new_ratio``.

        Returns False without doing anything when there is no analysis yet, the
        pipeline is still running, or a regeneration is already running. A failure is
        logged, kept in ``last_regeneration_failure`` and leaves the current image and
        phase untouched.
        """
        ratio = AspectRatio(new_ratio)
        with self._lock:
            analysis = self._state.analysis
            if analysis is None or self._state.phase.is_busy or self._state.is_regenerating_thumbnail:
                logger.debug(
                    "Regeneration ignored",
                    extra={
                        "event": "thumbnail.regenerate.skipped",
                        "has_analysis": analysis is not None,
                        "phase": self._state.phase.value,
                    },
                )
                return False
            run_id = self._run_id
            self._state.is_regenerating_thumbnail = True
            self._state.aspect_ratio = ratio
            self._last_regeneration_failure = None

        emit_event(logger, "thumbnail.regenerate.start", aspect_ratio=ratio.value)
        try:
            image: Optional[str] = self._thumbnail_gateway.generate(analysis.thumbnail_concept.prompt, ratio)
        except Exception as exc:  # noqa: BLE001
            failure = RegenerationFailure(failure_message(exc))
            logger.error("Failed to regenerate thumbnail: %s", failure, exc_info=exc)
            with self._lock:
                if run_id == self._run_id:
                    self._last_regeneration_failure = failure
        else:
            with self._lock:
                if run_id == self._run_id:
                    self._state.thumbnail_image = image
            emit_event(logger, "thumbnail.regenerate.complete", aspect_ratio=ratio.value)
        finally:
            with self._lock:
                if run_id == self._run_id:
                    self._state.is_regenerating_thumbnail = False
        return True

    def reset(self) -> SessionState:
        """Discard results and errors and return to IDLE. Valid from any phase."""
        with self._lock:
            self._run_id += 1
            self._state = SessionState()
            self._last_regeneration_failure = None
            self._phase_history = [Phase.IDLE]
            emit_event(logger, "session.reset")
            return self._state.copy()


__all__ = [
    "OVERSIZE_MESSAGE",
    "PROGRESS_MESSAGES",
    "READ_FAILURE_MESSAGE",
    "SessionController",
    "failure_message",
    "validate_upload",
]
