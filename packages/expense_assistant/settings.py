"""Runtime configuration read from the environment.

Entry points load a local ``.env`` (via ``python-dotenv``) before calling
:func:`load_settings`; library code receives a :class:`Settings` instance and
never reads the environment itself.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_PREFIX = "EXPENSE_ASSISTANT_"

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_EMBEDDING_DIMENSIONS = 1536
DEFAULT_GENERATION_MODEL = "gpt-5"
DEFAULT_RECENT_LIMIT = 200
DEFAULT_SEMANTIC_LIMIT = 20


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable configuration for one process.

    ``allowed_emails`` is stored lower-cased; an empty allow-list denies every
    caller. ``model_base_url`` selects a regional model endpoint when set.
    """

    allowed_emails: frozenset[str] = field(default_factory=frozenset)
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS
    generation_model: str = DEFAULT_GENERATION_MODEL
    recent_limit: int = DEFAULT_RECENT_LIMIT
    semantic_limit: int = DEFAULT_SEMANTIC_LIMIT
    model_base_url: str | None = None
    timezone: str = "UTC"
    currency_symbol: str = "₹"
    database_url: str | None = None

    def __post_init__(self) -> None:
        for name in ("embedding_dimensions", "recent_limit", "semantic_limit"):
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
                raise ValueError(f"Settings.{name} must be a positive integer")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {self.timezone!r}") from e

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def parse_email_list(raw: str | None) -> frozenset[str]:
    """Split a comma-separated allow-list into trimmed, lower-cased emails."""

    if not raw:
        return frozenset()
    return frozenset(part.strip().lower() for part in raw.split(",") if part.strip())


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from e


def _str_env(env: Mapping[str, str], key: str, default: str | None) -> str | None:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ``)."""

    env = os.environ if environ is None else environ
    return Settings(
        allowed_emails=parse_email_list(env.get(f"{_PREFIX}ALLOWED_EMAILS")),
        embedding_model=_str_env(env, f"{_PREFIX}EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL)
        or DEFAULT_EMBEDDING_MODEL,
        embedding_dimensions=_int_env(
            env, f"{_PREFIX}EMBEDDING_DIMENSIONS", DEFAULT_EMBEDDING_DIMENSIONS
        ),
        generation_model=_str_env(env, f"{_PREFIX}GENERATION_MODEL", DEFAULT_GENERATION_MODEL)
        or DEFAULT_GENERATION_MODEL,
        recent_limit=_int_env(env, f"{_PREFIX}RECENT_LIMIT", DEFAULT_RECENT_LIMIT),
        semantic_limit=_int_env(env, f"{_PREFIX}SEMANTIC_LIMIT", DEFAULT_SEMANTIC_LIMIT),
        model_base_url=_str_env(env, f"{_PREFIX}MODEL_BASE_URL", None),
        timezone=_str_env(env, f"{_PREFIX}TIMEZONE", "UTC") or "UTC",
        currency_symbol=_str_env(env, f"{_PREFIX}CURRENCY_SYMBOL", "₹") or "₹",
        database_url=_str_env(env, "DATABASE_URL", None),
    )


__all__ = ["Settings", "load_settings", "parse_email_list"]
