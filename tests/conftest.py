from __future__ import annotations

import base64
import io
import json
import threading
from typing import Any, List, Optional

import pytest
from PIL import Image

from vidigenius.analysis.models import AnalysisResult
from vidigenius.thumbnail.gateway import AspectRatio


def make_png_base64(size: tuple[int, int] = (9, 16), color: str = "red") -> str:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


@pytest.fixture()
def analysis_payload() -> dict[str, Any]:
    return {
        "transcription": "Hey everyone, welcome back. Today we build a tiny house in 60 seconds.",
        "trendingKeywords": ["tiny house", "diy build", "timelapse"],
        "sources": [{"title": "Tiny house trends", "uri": "https://example.com/trends"}],
        "titles": [
            {"text": "I Built a House in 60 Seconds", "rank": 3, "reasoning": "Time hook"},
            {"text": "The Tiniest House Ever?", "rank": 1, "reasoning": "Curiosity gap"},
            {"text": "DIY Tiny House Timelapse", "rank": 5, "reasoning": "Search friendly"},
            {"text": "You Won't Believe This Build", "rank": 2, "reasoning": "Emotional"},
            {"text": "Tiny House, Huge Results", "rank": 4, "reasoning": "Contrast"},
        ],
        "descriptions": {
            "youtube": "Watch us build a tiny house.\n00:00 Intro\n00:10 Build",
            "instagram": "Tiny house, big dreams #tinyhouse #diy",
        },
        "thumbnailConcept": {
            "idea": "Builder holding a miniature house against a sunset",
            "prompt": "a smiling builder holding a glowing miniature wooden house, golden hour",
        },
    }


@pytest.fixture()
def analysis_result(analysis_payload: dict[str, Any]) -> AnalysisResult:
    return AnalysisResult.model_validate(analysis_payload)


@pytest.fixture()
def png_data_uri() -> str:
    return f"data:image/png;base64,{make_png_base64()}"


class FakeAnalysisGateway:
    name = "fake-analysis"

    def __init__(self, result: Optional[AnalysisResult] = None, error: Optional[Exception] = None) -> None:
        self.result = result
        self.error = error
        self.calls: List[tuple[bytes, str]] = []

    def analyze(self, video_bytes: bytes, mime_type: str) -> AnalysisResult:
        self.calls.append((video_bytes, mime_type))
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result


class FakeThumbnailGateway:
    name = "fake-thumbnail"

    def __init__(self, images: Optional[List[str]] = None, error: Optional[Exception] = None) -> None:
        self.images = list(images or [])
        self.error = error
        self.calls: List[tuple[str, AspectRatio]] = []

    def generate(self, prompt: str, aspect_ratio: AspectRatio) -> str:
        self.calls.append((prompt, aspect_ratio))
        if self.error is not None:
            raise self.error
        return self.images.pop(0)


class BlockingThumbnailGateway(FakeThumbnailGateway):
    """Blocks inside ``generate`` until ``release`` is set."""

    def __init__(self, images: Optional[List[str]] = None) -> None:
        super().__init__(images)
        self.entered = threading.Event()
        self.release = threading.Event()

    def generate(self, prompt: str, aspect_ratio: AspectRatio) -> str:
        self.calls.append((prompt, aspect_ratio))
        self.entered.set()
        assert self.release.wait(timeout=5)
        return self.images.pop(0)


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else json.dumps(body)

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeHTTP:
    """Stands in for ``requests`` in GeminiClient; records each POST."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.requests: List[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


def gemini_text_response(payload: Any) -> dict[str, Any]:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def gemini_image_response(data: str) -> dict[str, Any]:
    return {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"text": "Here is your thumbnail."},
                        {"inlineData": {"mimeType": "image/png", "data": data}},
                    ]
                }
            }
        ]
    }
