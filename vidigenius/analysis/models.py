"""Typed view of the analysis payload returned by the model."""

from __future__ import annotations

from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    # Accept both camelCase wire names and snake_case attribute names. Frozen, with
    # tuples for sequences, so a result can be shared between snapshots.
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class Source(_WireModel):
    title: str
    uri: str


class TitleOption(_WireModel):
    text: str
    rank: int = Field(..., description="1 is the strongest title, 5 the weakest")
    reasoning: str


class Descriptions(_WireModel):
    youtube: str
    instagram: str


class ThumbnailConcept(_WireModel):
    idea: str
    prompt: str = Field(..., description="Passed verbatim to the thumbnail gateway")


class AnalysisResult(_WireModel):
    transcription: str
    trending_keywords: Tuple[str, ...] = Field(..., alias="trendingKeywords")
    sources: Tuple[Source, ...] = ()
    titles: Tuple[TitleOption, ...]
    descriptions: Descriptions
    thumbnail_concept: ThumbnailConcept = Field(..., alias="thumbnailConcept")

    def to_wire(self) -> dict[str, Any]:
        """Dump using the camelCase field names the model emits."""
        return self.model_dump(by_alias=True, mode="json")


REQUIRED_FIELDS = ["transcription", "trendingKeywords", "titles", "descriptions", "thumbnailConcept"]

# Gemini ``responseSchema`` (OpenAPI subset) mirroring AnalysisResult.
RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "transcription": {"type": "STRING"},
        "trendingKeywords": {"type": "ARRAY", "items": {"type": "STRING"}},
        "sources": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": {"type": "STRING"},
                    "uri": {"type": "STRING"},
                },
            },
        },
        "titles": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "text": {"type": "STRING"},
                    "rank": {"type": "NUMBER"},
                    "reasoning": {"type": "STRING"},
                },
            },
        },
        "descriptions": {
            "type": "OBJECT",
            "properties": {
                "youtube": {"type": "STRING"},
                "instagram": {"type": "STRING"},
            },
        },
        "thumbnailConcept": {
            "type": "OBJECT",
            "properties": {
                "idea": {"type": "STRING"},
                "prompt": {"type": "STRING"},
            },
        },
    },
    "required": REQUIRED_FIELDS,
}


__all__ = [
    "AnalysisResult",
    "Descriptions",
    "REQUIRED_FIELDS",
    "RESPONSE_SCHEMA",
    "Source",
    "ThumbnailConcept",
    "TitleOption",
]
