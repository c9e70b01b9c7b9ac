"""
Photo verification for collected waste.

The image model is asked whether a photo shows the waste type that was
reported and how confident it is. Anything other than a well-formed answer
is an upstream failure.
"""
from __future__ import annotations

import base64
import json
import logging
import re
from functools import lru_cache
from typing import Any, Optional, Protocol

import httpx
from pydantic import BaseModel

from ..config import settings
from ..exceptions import VerificationError

log = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")

PROMPT_TEMPLATE = """You are an expert in waste management and recycling. Analyze this image and provide:
1. Confirm if the waste type matches: {waste_type}
2. Your confidence level in this assessment (as a number between 0 and 1)

Respond in JSON format like this:
{{"wasteTypeMatch": true, "confidence": 0.95}}"""


class VerificationResult(BaseModel):
    waste_type_match: bool
    confidence: float

    def passes(self, threshold: float) -> bool:
        return self.waste_type_match and self.confidence > threshold

    def as_record(self) -> dict[str, Any]:
        return {"wasteTypeMatch": self.waste_type_match, "confidence": self.confidence}


class WasteVerifier(Protocol):
    def verify(self, image: bytes, mime_type: str, waste_type: str) -> VerificationResult:  # pragma: no cover - Protocol
        ...


def parse_verification_text(text: str) -> VerificationResult:
    """Parse the model's answer, tolerating a markdown code fence around the JSON."""
    cleaned = _CODE_FENCE.sub(r"\1", text.strip()).strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise VerificationError("Verification failed due to response formatting.") from exc

    if not isinstance(payload, dict):
        raise VerificationError("Invalid verification response.")
    match = payload.get("wasteTypeMatch")
    confidence = payload.get("confidence")
    if not isinstance(match, bool) or isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise VerificationError("Invalid verification response.")

    confidence = float(confidence)
    if 1 < confidence <= 100:
        # answered as a percentage
        confidence /= 100
    if not 0 <= confidence <= 1:
        raise VerificationError("Invalid verification response.")
    return VerificationResult(waste_type_match=match, confidence=confidence)


class GeminiVerifier:
    """Calls the Gemini ``generateContent`` REST endpoint with an inline image."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_API_URL).rstrip("/")
        self._client = client or httpx.Client(timeout=settings.VERIFICATION_TIMEOUT_SECONDS)

    def close(self) -> None:
        self._client.close()

    def _request_body(self, image: bytes, mime_type: str, waste_type: str) -> dict[str, Any]:
        return {
            "contents": [
                {
                    "parts": [
                        {"text": PROMPT_TEMPLATE.format(waste_type=waste_type)},
                        {
                            "inline_data": {
                                "mime_type": mime_type,
                                "data": base64.b64encode(image).decode("ascii"),
                            }
                        },
                    ]
                }
            ]
        }

    def verify(self, image: bytes, mime_type: str, waste_type: str) -> VerificationResult:
        if not self.api_key:
            raise VerificationError("Verification service is not configured.")

        url = f"{self.base_url}/{self.model}:generateContent"
        try:
            response = self._client.post(
                url,
                params={"key": self.api_key},
                json=self._request_body(image, mime_type, waste_type),
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            log.exception("Verification request failed")
            raise VerificationError("Verification service is unavailable.") from exc
        except ValueError as exc:
            raise VerificationError("Invalid verification response.") from exc

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            log.error("Unexpected verification payload: %s", data)
            raise VerificationError("Invalid verification response.") from exc

        result = parse_verification_text(text)
        log.info(
            "Verification for %r: match=%s confidence=%.2f",
            waste_type, result.waste_type_match, result.confidence,
        )
        return result


@lru_cache
def get_verifier() -> GeminiVerifier:
    """One verifier per process so requests share its connection pool."""
    return GeminiVerifier()


def close_verifier() -> None:
    if get_verifier.cache_info().currsize:
        get_verifier().close()
        get_verifier.cache_clear()
