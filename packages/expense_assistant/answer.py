"""Answer generation: fixed prompt in, model text out, unmodified."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .errors import GenerationFailed
from .logging_setup import get_logger
from .prompting import build_answer_prompt

_logger = get_logger("expense_assistant.answer")


class LanguageModel(Protocol):
    def generate(self, model: str, prompt: str) -> str: ...


def generate_answer(
    question: str,
    context: str,
    now: datetime,
    *,
    llm: LanguageModel,
    model: str,
    currency_symbol: str = "₹",
) -> str:
    """Build the answer prompt and return the model's completion verbatim.

    Exactly one model call, no retries. Failures (including an empty
    completion) raise :class:`~expense_assistant.errors.GenerationFailed`.
    """

    prompt = build_answer_prompt(question, context, now, currency_symbol=currency_symbol)
    try:
        text = llm.generate(model, prompt)
    except GenerationFailed:
        raise
    except Exception as e:  # noqa: BLE001
        _logger.error("answer:failed model=%s error=%s", model, e.__class__.__name__)
        raise GenerationFailed(f"answer generation failed: {e}") from e
    if not isinstance(text, str) or not text:
        raise GenerationFailed("language model returned no text")
    return text


__all__ = ["LanguageModel", "generate_answer"]
