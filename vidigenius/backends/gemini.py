"""Thin wrapper around the Gemini ``generateContent`` REST endpoint."""

from __future__ import annotations

import json
from typing import Any, Optional

import requests

from ..errors import GatewayError, unwrap_provider_message
from ..util.logging import get_logger

logger = get_logger(__name__)


class GeminiClient:
    """Issue single ``generateContent`` calls and pull text or image parts out of the reply."""

    base_url = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(self, api_key: str, *, session: Optional[requests.Session] = None) -> None:
        if not api_key:
            raise ValueError("GEMINI_API_KEY is required for Gemini requests.")
        self.api_key = api_key
        self._http = session or requests

    def endpoint(self, model: str) -> str:
        return f"{self.base_url}/{model}:generateContent"

    # ---------- request ----------

    def generate_content(
        self,
        model: str,
        parts: list[dict[str, Any]],
        *,
        generation_config: Optional[dict[str, Any]] = None,
        timeout: float = 120,
    ) -> dict[str, Any]:
        """POST one request and return the decoded JSON body. No retries."""
        payload: dict[str, Any] = {"contents": [{"parts": parts}]}
        if generation_config:
            payload["generationConfig"] = generation_config

        try:
            response = self._http.post(
                self.endpoint(model),
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
                timeout=timeout,
            )
        except requests.RequestException as exc:
            raise GatewayError(f"Gemini request failed: {exc}") from exc

        if not response.ok:
            raise GatewayError(
                unwrap_provider_message(response.text) or f"Gemini API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError("Gemini response was not valid JSON.") from exc

    # ---------- helpers: response parsing ----------

    @staticmethod
    def response_parts(payload: dict[str, Any]) -> list[dict[str, Any]]:
        """Return the parts of the first candidate, raising if the model returned none."""
        candidates = payload.get("candidates") or []
        if not candidates:
            reason = (payload.get("promptFeedback") or {}).get("blockReason")
            detail = f" (blockReason={reason})" if reason else ""
            raise GatewayError(f"Gemini returned no candidates{detail}.")
        content = candidates[0].get("content") or {}
        return list(content.get("parts") or [])

    @staticmethod
    def response_text(payload: dict[str, Any]) -> str:
        """Concatenate the text parts of the first candidate."""
        parts = GeminiClient.response_parts(payload)
        return "\n".join(p.get("text", "") for p in parts if "text" in p).strip()

    @staticmethod
    def first_inline_image(payload: dict[str, Any]) -> Optional[str]:
        """Return the base64 payload of the first part carrying inline data, if any."""
        for part in GeminiClient.response_parts(payload):
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                return str(inline["data"])
        return None

    @staticmethod
    def coerce_to_json(text: str) -> Any:
        """Parse JSON text, stripping markdown fences the model sometimes adds."""
        t = text.strip()
        if t.startswith("```json"):
            t = t[7:]
        elif t.startswith("```"):
            t = t[3:]
        if t.endswith("```"):
            t = t[:-3]
        t = t.strip()
        try:
            return json.loads(t)
        except json.JSONDecodeError as exc:
            raise GatewayError(f"Cannot parse JSON from Gemini text: {text[:200]}...") from exc


__all__ = ["GeminiClient"]
