"""OpenAI-backed embedder and text generator.

Both wrappers create the SDK client lazily through :func:`_create_client` so
tests can monkeypatch ``expense_assistant.openai_client.OpenAI``. Neither
retries: the live query path is fail-fast and retries belong to the caller.
"""

from __future__ import annotations

import time
from typing import Any

from openai import OpenAI

from .embeddings import check_dimensions
from .errors import GenerationFailed, UpstreamUnavailable
from .logging_setup import get_logger

_logger = get_logger("expense_assistant.openai_client")


def _create_client(base_url: str | None = None) -> OpenAI:
    if base_url:
        return OpenAI(base_url=base_url)
    return OpenAI()


def extract_output_text(resp: Any) -> str | None:
    """Locate the text of a Responses API result.

    Prefer ``resp.output_text``; fall back to ``resp.output[0].content[0].text``
    (some SDK versions wrap it in an object with a ``value`` string).
    """

    text: str | None = getattr(resp, "output_text", None)
    if text:
        return text
    try:
        first = resp.output[0] if getattr(resp, "output", None) else None
        content = getattr(first, "content", None)
        if content:
            txt_obj = getattr(content[0], "text", None)
            if isinstance(txt_obj, str):
                return txt_obj
            maybe_val = getattr(txt_obj, "value", None)
            if isinstance(maybe_val, str):
                return maybe_val
    except (AttributeError, IndexError, TypeError):
        return None
    return None


class OpenAIEmbedder:
    """``Embedder`` over ``client.embeddings.create``.

    Every vector is checked against ``dimensions`` so a model swap cannot
    silently mix embedding spaces.
    """

    def __init__(self, model: str, dimensions: int, *, base_url: str | None = None) -> None:
        self.model = model
        self._dimensions = dimensions
        self._base_url = base_url
        self._client: OpenAI | None = None

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = _create_client(self._base_url)
        return self._client

    def embed(self, text: str) -> list[float]:
        t0 = time.perf_counter()
        try:
            resp = self._get_client().embeddings.create(model=self.model, input=text)
            vector = [float(x) for x in resp.data[0].embedding]
        except Exception as e:  # noqa: BLE001 - SDK/network errors share one failure mode
            _logger.error(
                "embed:failed model=%s error=%s", self.model, e.__class__.__name__
            )
            raise UpstreamUnavailable(f"embedding request failed: {e}") from e
        check_dimensions(vector, self._dimensions, source=f"embedding model {self.model!r}")
        _logger.debug(
            "embed:done model=%s dims=%d latency_ms=%.2f",
            self.model,
            len(vector),
            (time.perf_counter() - t0) * 1000.0,
        )
        return vector


class OpenAIResponsesModel:
    """``LanguageModel`` over the Responses API (plain text in, text out)."""

    def __init__(self, *, base_url: str | None = None) -> None:
        self._base_url = base_url
        self._client: OpenAI | None = None

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = _create_client(self._base_url)
        return self._client

    def generate(self, model: str, prompt: str) -> str:
        t0 = time.perf_counter()
        try:
            resp = self._get_client().responses.create(model=model, input=prompt)
        except Exception as e:  # noqa: BLE001
            _logger.error("generate:failed model=%s error=%s", model, e.__class__.__name__)
            raise GenerationFailed(f"generation request failed: {e}") from e
        text = extract_output_text(resp)
        if not text:
            _logger.error("generate:empty model=%s", model)
            raise GenerationFailed("language model returned no text")
        _logger.info(
            "generate:done model=%s chars=%d latency_ms=%.2f",
            model,
            len(text),
            (time.perf_counter() - t0) * 1000.0,
        )
        return text


__all__ = ["OpenAIEmbedder", "OpenAIResponsesModel", "extract_output_text"]
