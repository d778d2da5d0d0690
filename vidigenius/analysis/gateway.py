"""Analysis gateway: send a video and a fixed brief to Gemini, get back a validated result."""

from __future__ import annotations

import base64

from pydantic import ValidationError as PydanticValidationError

from ..backends.gemini import GeminiClient
from ..errors import AnalysisFailure, GatewayError
from ..settings import DEFAULT_ANALYSIS_MODEL
from ..util.logging import get_logger
from .models import RESPONSE_SCHEMA, AnalysisResult

logger = get_logger(__name__)

ANALYSIS_PROMPT = """
VIDEO ANALYSIS MISSION:
Watch this entire video from the ABSOLUTE BEGINNING (Timestamp 00:00:00).

1. EXHAUSTIVE TRANSCRIPTION: Provide a detailed, word-for-word transcription.
   CRITICAL: Capture the absolute start. Do not skip initial greetings, hooks, or logos. Transcribe from 0 seconds to the very end.
2. TREND RESEARCH: Identify viral keywords and SEO topics related to this content.
3. VIRAL TITLES: Generate 5 high-CTR title options. Rank them 1 to 5.
4. YOUTUBE DESCRIPTION: Create a high-converting description with timestamps and keywords.
5. SOCIAL CAPTIONS: Write a catchy Instagram/TikTok caption with hashtags.
6. THUMBNAIL CONCEPT: Suggest a cinematic thumbnail idea and provide a detailed image prompt.

Return the result strictly as JSON.
""".strip()


class GeminiAnalysisGateway:
    """Stateless analysis call; safe to reuse across uploads."""

    name = "gemini-analysis"

    def __init__(
        self,
        client: GeminiClient,
        *,
        model: str = DEFAULT_ANALYSIS_MODEL,
        timeout: float = 300,
    ) -> None:
        self.client = client
        self.model = model
        self.timeout = timeout

    def analyze(self, video_bytes: bytes, mime_type: str) -> AnalysisResult:
        parts = [
            {
                "inline_data": {
                    "mime_type": mime_type,
                    "data": base64.b64encode(video_bytes).decode("utf-8"),
                }
            },
            {"text": ANALYSIS_PROMPT},
        ]
        generation_config = {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        }

        logger.info(
            "Analyzing video with Gemini",
            extra={"event": "gemini.analyze.start", "model": self.model, "bytes": len(video_bytes)},
        )
        try:
            payload = self.client.generate_content(
                self.model,
                parts,
                generation_config=generation_config,
                timeout=self.timeout,
            )
            data = GeminiClient.coerce_to_json(GeminiClient.response_text(payload))
        except GatewayError as exc:
            raise AnalysisFailure(str(exc), status_code=exc.status_code) from exc

        result = parse_analysis(data)
        logger.info(
            "Video analysis complete",
            extra={"event": "gemini.analyze.complete", "titles": len(result.titles)},
        )
        return result


def parse_analysis(data: object) -> AnalysisResult:
    """Validate a decoded JSON payload, raising AnalysisFailure on any schema violation."""
    if not isinstance(data, dict):
        raise AnalysisFailure(f"Expected a JSON object from the analysis model, got {type(data).__name__}.")
    try:
        return AnalysisResult.model_validate(data)
    except PydanticValidationError as exc:
        missing = _missing_fields(exc)
        if missing:
            raise AnalysisFailure(
                f"Analysis response is missing required field(s): {', '.join(missing)}"
            ) from exc
        raise AnalysisFailure(f"Analysis response does not match the expected shape: {exc}") from exc


def _missing_fields(exc: PydanticValidationError) -> list[str]:
    fields: list[str] = []
    for err in exc.errors():
        if err.get("type") == "missing":
            fields.append(".".join(str(loc) for loc in err.get("loc", ())))
    return fields
