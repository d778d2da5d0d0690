"""Render a session snapshot as text or JSON and write thumbnails to disk."""

from __future__ import annotations

import base64
import binascii
import io
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from ..analysis.models import AnalysisResult, TitleOption
from ..session.state import Phase, SessionState
from ..thumbnail.gateway import AspectRatio
from ..util.logging import get_logger

logger = get_logger(__name__)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)


def ranked_titles(analysis: AnalysisResult) -> List[TitleOption]:
    """Titles in display order: ascending rank, ties keep the order the model returned."""
    return sorted(analysis.titles, key=lambda title: title.rank)


def title_score(rank: int) -> int:
    return 100 - rank * 5


def phase_label(phase: Phase) -> str:
    return phase.value.replace("_", " ")


def thumbnail_filename(aspect_ratio: AspectRatio) -> str:
    return f"VidiGenius-Thumbnail-{AspectRatio(aspect_ratio).slug}.png"


def render_text(state: SessionState) -> str:
    """Plain-text view of the state, in the same section order as the web client."""
    if state.phase is Phase.ERROR:
        return f"ERROR: {state.error_message or 'Unknown error occurred'}"
    if state.phase.is_busy:
        return f"{phase_label(state.phase)}\n{state.progress}".rstrip()
    if state.analysis is None:
        if state.error_message:
            return f"{phase_label(state.phase)}: {state.error_message}"
        return phase_label(state.phase)

    analysis = state.analysis
    lines: List[str] = ["== Viral Titles =="]
    for title in ranked_titles(analysis):
        lines.append(f"#{title.rank} [Score {title_score(title.rank)}%] {title.text}")
        lines.append(f"    {title.reasoning}")

    lines += ["", "== YouTube Description ==", analysis.descriptions.youtube]
    lines += ["", "== Instagram / TikTok Caption ==", analysis.descriptions.instagram]
    lines += ["", "== Transcription ==", analysis.transcription]

    lines += ["", f"== Thumbnail ({state.aspect_ratio.value}) =="]
    lines.append(f'Idea: "{analysis.thumbnail_concept.idea}"')
    lines.append(f"Prompt: {analysis.thumbnail_concept.prompt}")
    if state.is_regenerating_thumbnail:
        lines.append("Regenerating thumbnail...")
    elif not state.thumbnail_image:
        lines.append("No thumbnail image.")

    if analysis.trending_keywords:
        lines += ["", "== Trending Keywords ==", ", ".join(analysis.trending_keywords)]
    if analysis.sources:
        lines += ["", "== Sources =="]
        lines += [f"- {source.title}: {source.uri}" for source in analysis.sources]
    return "\n".join(lines)


def report_payload(state: SessionState, thumbnails: Optional[Dict[str, Path]] = None) -> dict[str, Any]:
    """JSON-serializable report; ``analysis`` uses the model's camelCase field names."""
    payload: dict[str, Any] = {
        "phase": state.phase.value,
        "aspect_ratio": state.aspect_ratio.value,
        "error": state.error_message,
        "analysis": state.analysis.to_wire() if state.analysis else None,
        "ranked_titles": [],
        "thumbnails": {ratio: str(path) for ratio, path in (thumbnails or {}).items()},
    }
    if state.analysis:
        payload["ranked_titles"] = [
            {"rank": t.rank, "score": title_score(t.rank), "text": t.text, "reasoning": t.reasoning}
            for t in ranked_titles(state.analysis)
        ]
    return payload


def decode_data_uri(uri: str) -> Tuple[str, bytes]:
    """Split a base64 data URI into its MIME type and raw bytes."""
    match = _DATA_URI_RE.match(uri.strip())
    if not match or not match.group("b64"):
        raise ValueError("Expected a base64 data URI")
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base64 payload in data URI: {exc}") from exc
    return match.group("mime") or "application/octet-stream", data


def save_thumbnail(uri: str, destination: Path) -> Path:
    """Decode ``uri`` and write it to ``destination`` as PNG."""
    _, data = decode_data_uri(uri)
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            destination.parent.mkdir(parents=True, exist_ok=True)
            image.save(destination, format="PNG")
            size = image.size
    except UnidentifiedImageError as exc:
        raise ValueError("Thumbnail data is not a readable image") from exc
    logger.info(
        "Thumbnail saved",
        extra={"event": "thumbnail.saved", "path": str(destination), "size": f"{size[0]}x{size[1]}"},
    )
    return destination


__all__ = [
    "decode_data_uri",
    "phase_label",
    "ranked_titles",
    "render_text",
    "report_payload",
    "save_thumbnail",
    "thumbnail_filename",
    "title_score",
]
