"""HTTP surface for the callable entry points (FastAPI).

Wire shape follows the callable protocol used by the web client:

- request body ``{"data": {...}}``
- success ``{"result": ...}``
- failure ``{"error": {"status": "PERMISSION_DENIED", "message": "..."}}`` with
  the matching HTTP status.

An upstream auth middleware may attach a verified
:class:`~expense_assistant.models.AuthContext` as ``request.state.auth``;
otherwise the ``Authorization: Bearer`` header is verified by the access guard.

Run with ``uvicorn --factory expense_assistant.server:create_app``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .api import analyze_transactions, backfill_embeddings
from .errors import AssistantError, InvalidArgument
from .logging_setup import configure_logging, get_logger
from .models import AuthContext, CallableRequest
from .pipeline import Services, build_services
from .settings import load_settings


_logger = get_logger("expense_assistant.server")


class CallableBody(BaseModel):
    data: dict[str, Any] = {}


def _error_response(exc: AssistantError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": {"status": exc.status, "message": exc.message}},
    )


def _callable_request(request: Request, data: dict[str, Any]) -> CallableRequest:
    auth = getattr(request.state, "auth", None)
    return CallableRequest(
        data=data,
        auth=auth if isinstance(auth, AuthContext) else None,
        headers=dict(request.headers),
    )


def create_app(services: Services | None = None) -> FastAPI:
    """Build the app; production wiring is used when ``services`` is omitted."""

    if services is None:
        load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
        configure_logging()
        services = build_services(load_settings())

    app = FastAPI(title="expense-assistant")

    @app.exception_handler(AssistantError)
    async def _assistant_error(_request: Request, exc: AssistantError) -> JSONResponse:
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def _malformed_body(_request: Request, exc: RequestValidationError) -> JSONResponse:
        _logger.warning("server:malformed_body errors=%d", len(exc.errors()))
        return _error_response(
            InvalidArgument('The request body must be {"data": {...}} with an object payload.')
        )

    @app.post("/analyzeTransactions")
    def analyze(body: CallableBody, request: Request) -> dict[str, Any]:
        answer = analyze_transactions(_callable_request(request, body.data), services)
        return {"result": answer}

    @app.post("/backfillEmbeddings")
    def backfill(body: CallableBody, request: Request) -> dict[str, Any]:
        report = backfill_embeddings(_callable_request(request, body.data), services)
        return {"result": report.as_dict()}

    return app


__all__ = ["CallableBody", "create_app"]
