"""Inference collaborator: answers freeform questions for a role."""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from oracle.errors import InferenceError
from oracle.lib import config

logger = logging.getLogger(__name__)


@dataclass
class Answer:
    text: str
    resources: list[dict[str, Any]] = field(default_factory=list)
    confidence: float | None = None


class Inference(Protocol):
    async def answer(self, query: str, role: str, context: dict[str, Any]) -> Answer: ...


class HttpInference:
    """POSTs ``{query, role, context}`` as JSON and reads ``{answer, resources, confidence}``."""

    def __init__(self, url: str, timeout: float = 20.0, transport: httpx.AsyncBaseTransport | None = None):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def answer(self, query: str, role: str, context: dict[str, Any]) -> Answer:
        payload = {"query": query, "role": role, "context": context}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Inference request failed: {e}")
            raise InferenceError("inference service unavailable") from e
        except ValueError as e:
            raise InferenceError("inference service returned malformed JSON") from e

        if not isinstance(body, dict):
            raise InferenceError("inference service returned malformed JSON")
        text = body.get("answer") or body.get("text")
        if not text:
            raise InferenceError("inference service returned no answer")
        return Answer(
            text=str(text),
            resources=list(body.get("resources") or []),
            confidence=body.get("confidence"),
        )


class OfflineInference:
    """Used when no inference endpoint is configured."""

    async def answer(self, query: str, role: str, context: dict[str, Any]) -> Answer:
        return Answer(
            text="The Oracle is offline. Type /help to see the commands available to you.",
            confidence=0.0,
        )


def from_config() -> Inference:
    settings = config.get("inference") or {}
    url = settings.get("url")
    if not url:
        return OfflineInference()
    return HttpInference(url, timeout=float(settings.get("timeout", 20)))
