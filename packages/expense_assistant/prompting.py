"""Prompt construction for answer generation.

The prompt anchors the model to the same calendar the resolver uses: it is
told today's date, the current month and the previous month, so "last month"
means the same thing in the retrieved data and in the answer.

Public helpers:
- :func:`date_anchors` computes the anchors from an injected ``now``.
- :func:`build_answer_prompt` renders the fixed template.
"""

from __future__ import annotations

from datetime import datetime
from typing import NamedTuple


class PromptAnchors(NamedTuple):
    current_date: str
    current_month: str
    last_month: str


# calendar.month_name follows the process locale; pin English names.
_MONTHS: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def _month_label(year: int, month: int) -> str:
    return f"{_MONTHS[month - 1]} {year}"


def date_anchors(now: datetime) -> PromptAnchors:
    prev_year, prev_month = (now.year - 1, 12) if now.month == 1 else (now.year, now.month - 1)
    return PromptAnchors(
        current_date=now.date().isoformat(),
        current_month=_month_label(now.year, now.month),
        last_month=_month_label(prev_year, prev_month),
    )


def build_answer_prompt(
    question: str, context: str, now: datetime, *, currency_symbol: str = "₹"
) -> str:
    """Render the answer prompt.

    ``question`` and ``context`` are inserted verbatim; ``context`` is the
    output of :func:`expense_assistant.formatting.format_transactions`.
    """

    anchors = date_anchors(now)
    example_amount = f"{currency_symbol}1,234.56"
    return (
        "You are a helpful and friendly financial assistant analyzing personal expense data.\n"
        "\n"
        f"CURRENT DATE: {anchors.current_date}\n"
        f"CURRENT MONTH: {anchors.current_month}\n"
        f"LAST MONTH: {anchors.last_month}\n"
        "\n"
        f"USER QUESTION: {question}\n"
        "\n"
        "TRANSACTION DATA:\n"
        f"{context}\n"
        "\n"
        "INSTRUCTIONS:\n"
        "1. Use the current date to correctly interpret relative time references "
        f'(e.g., "last month" = {anchors.last_month})\n'
        "2. Filter the transactions based on the time period mentioned in the question\n"
        "3. Calculate totals, averages, or breakdowns as needed\n"
        "4. If asked about spending by category, group and sum the amounts\n"
        f"5. Format currency amounts nicely (e.g., {example_amount})\n"
        "6. If no relevant transactions are found for the time period, say so clearly\n"
        "7. Be concise but informative\n"
        "8. If the question is vague, provide a helpful summary\n"
        "\n"
        "Provide your answer:"
    )


__all__ = ["PromptAnchors", "build_answer_prompt", "date_anchors"]
