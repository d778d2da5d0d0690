"""Thumbnail gateway: render a concept prompt through the Gemini image model."""

from __future__ import annotations

from enum import Enum

from ..backends.gemini import GeminiClient
from ..errors import GatewayError, ThumbnailFailure
from ..settings import DEFAULT_IMAGE_MODEL
from ..util.logging import get_logger

logger = get_logger(__name__)

THUMBNAIL_TEMPLATE = (
    "A high-impact, cinematic viral YouTube thumbnail. 4K, vivid colors, "
    "professional lighting. Subject: {prompt}"
)


class AspectRatio(str, Enum):
    PORTRAIT_9x16 = "9:16"
    LANDSCAPE_16x9 = "16:9"

    @property
    def slug(self) -> str:
        """File-name friendly form, e.g. ``9x16``."""
        return self.value.replace(":", "x")


def build_thumbnail_prompt(prompt: str) -> str:
    return THUMBNAIL_TEMPLATE.format(prompt=prompt)


class GeminiThumbnailGateway:
    """Stateless image call used by both the main pipeline and regeneration."""

    name = "gemini-image"

    def __init__(
        self,
        client: GeminiClient,
        *,
        model: str = DEFAULT_IMAGE_MODEL,
        timeout: float = 120,
    ) -> None:
        self.client = client
        self.model = model
        self.timeout = timeout

    def generate(self, prompt: str, aspect_ratio: AspectRatio) -> str:
        ratio = AspectRatio(aspect_ratio)
        logger.info(
            "Generating thumbnail with Gemini",
            extra={"event": "gemini.thumbnail.start", "model": self.model, "aspect_ratio": ratio.value},
        )
        try:
            payload = self.client.generate_content(
                self.model,
                [{"text": build_thumbnail_prompt(prompt)}],
                generation_config={"imageConfig": {"aspectRatio": ratio.value}},
                timeout=self.timeout,
            )
            data = GeminiClient.first_inline_image(payload)
        except GatewayError as exc:
            raise ThumbnailFailure(str(exc), status_code=exc.status_code) from exc

        if not data:
            raise ThumbnailFailure("Thumbnail generation failed. Please try again.")

        logger.info("Thumbnail generated", extra={"event": "gemini.thumbnail.complete"})
        return f"data:image/png;base64,{data}"


__all__ = ["AspectRatio", "GeminiThumbnailGateway", "THUMBNAIL_TEMPLATE", "build_thumbnail_prompt"]
