from __future__ import annotations

import pytest

from expense_assistant.settings import Settings, load_settings, parse_email_list


def test_defaults():
    s = load_settings({})
    assert s.allowed_emails == frozenset()
    assert s.embedding_model == "text-embedding-3-small"
    assert s.embedding_dimensions == 1536
    assert s.recent_limit == 200
    assert s.semantic_limit == 20
    assert s.timezone == "UTC"
    assert s.currency_symbol == "₹"
    assert s.database_url is None


def test_env_overrides():
    s = load_settings(
        {
            "EXPENSE_ASSISTANT_ALLOWED_EMAILS": " Alice@Example.com, bob@example.com ,",
            "EXPENSE_ASSISTANT_EMBEDDING_DIMENSIONS": "768",
            "EXPENSE_ASSISTANT_SEMANTIC_LIMIT": "5",
            "EXPENSE_ASSISTANT_TIMEZONE": "Asia/Kolkata",
            "EXPENSE_ASSISTANT_MODEL_BASE_URL": "https://eu.example/v1",
            "DATABASE_URL": "sqlite+pysqlite:///ledger.db",
        }
    )
    assert s.allowed_emails == {"alice@example.com", "bob@example.com"}
    assert s.embedding_dimensions == 768
    assert s.semantic_limit == 5
    assert s.tzinfo.key == "Asia/Kolkata"
    assert s.model_base_url == "https://eu.example/v1"
    assert s.database_url == "sqlite+pysqlite:///ledger.db"


@pytest.mark.parametrize(
    "env",
    [
        {"EXPENSE_ASSISTANT_RECENT_LIMIT": "many"},
        {"EXPENSE_ASSISTANT_RECENT_LIMIT": "0"},
        {"EXPENSE_ASSISTANT_TIMEZONE": "Mars/Olympus"},
    ],
)
def test_invalid_values_raise(env):
    with pytest.raises(ValueError):
        load_settings(env)


def test_parse_email_list_empty():
    assert parse_email_list(None) == frozenset()
    assert parse_email_list(" , ") == frozenset()


def test_settings_is_immutable():
    s = Settings()
    with pytest.raises(AttributeError):
        s.recent_limit = 5  # type: ignore[misc]
