# ruff: noqa: I001
"""CLI for the ``expense_assistant`` package.

Typer-based console interface over the callable entry points. Environment
variables (``OPENAI_API_KEY``, ``DATABASE_URL``, ``EXPENSE_ASSISTANT_*``) are
loaded from a local ``.env`` with ``python-dotenv`` before any command runs.
Command handlers (``cmd_*``) return process exit codes so they can be called
directly from tests and scripts.
"""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .errors import AssistantError
from .logging_setup import configure_logging
from .models import CallableRequest
from .pipeline import Services, build_services
from .retrieval import choose_mode
from .settings import load_settings


def _services() -> Services:
    return build_services(load_settings())


def _request(data: dict, id_token: str | None) -> CallableRequest:
    headers = {"Authorization": f"Bearer {id_token}"} if id_token else {}
    return CallableRequest(data=data, headers=headers)


def cmd_ask(question: str, *, id_token: str | None) -> int:
    """Answer ``question`` through the guarded pipeline and print the answer.

    Errors are written to stderr as ``Error (<code>): <message>`` and the
    function returns ``1``.
    """

    from .api import analyze_transactions

    try:
        services = _services()
        answer = analyze_transactions(_request({"question": question}, id_token), services)
    except AssistantError as e:
        print(f"Error ({e.code}): {e.message}", file=sys.stderr)
        return 1
    except (RuntimeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(answer)
    return 0


def cmd_backfill_embeddings(*, id_token: str | None) -> int:
    from .api import backfill_embeddings

    try:
        services = _services()
        report = backfill_embeddings(_request({}, id_token), services)
    except AssistantError as e:
        print(f"Error ({e.code}): {e.message}", file=sys.stderr)
        return 1
    except (RuntimeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"success={str(report.success).lower()} processed={report.processed}")
    return 0


def cmd_resolve_range(question: str, *, now: datetime | None = None) -> int:
    """Print the retrieval path chosen for ``question`` without calling any service."""

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if now is None:
        now = datetime.now(settings.tzinfo)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=settings.tzinfo)

    mode, date_range = choose_mode(question, now)
    print(f"mode\t{mode}")
    if date_range is not None:
        print(f"start\t{date_range.start.isoformat()}")
        print(f"end\t{date_range.end.isoformat()}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Ask questions about the household ledger. Loads OPENAI_API_KEY, "
        "DATABASE_URL and EXPENSE_ASSISTANT_* settings from a local .env."
    ),
)


def _id_token_option() -> OptionInfo:
    return typer.Option(
        "--id-token",
        envvar="EXPENSE_ASSISTANT_ID_TOKEN",
        help="Identity token sent as 'Authorization: Bearer <token>'.",
    )


@app.command("ask")
def ask_cmd(
    question: Annotated[str, typer.Argument(help="Free-text question about your transactions.")],
    id_token: Annotated[str | None, _id_token_option()] = None,
) -> None:
    """Answer a question about your transactions."""

    raise typer.Exit(cmd_ask(question, id_token=id_token))


@app.command("backfill-embeddings")
def backfill_embeddings_cmd(
    id_token: Annotated[str | None, _id_token_option()] = None,
) -> None:
    """Embed every transaction that has no usable embedding yet."""

    raise typer.Exit(cmd_backfill_embeddings(id_token=id_token))


@app.command("resolve-range")
def resolve_range_cmd(
    question: Annotated[str, typer.Argument(help="Question to classify.")],
    now: Annotated[
        datetime | None,
        typer.Option(
            "--now",
            formats=["%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"],
            help="Reference time (defaults to the current time in EXPENSE_ASSISTANT_TIMEZONE).",
        ),
    ] = None,
) -> None:
    """Show which retrieval path and date range a question resolves to."""

    raise typer.Exit(cmd_resolve_range(question, now=now))


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
