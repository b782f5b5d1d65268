"""
Tests for structured logging and per-request context binding.
"""

from __future__ import annotations

import asyncio
import json
import logging

import structlog
from fastapi.security import HTTPAuthorizationCredentials

from api.security import get_current_identity
from shared.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)


def test_bind_request_context_drops_empty_fields():
    clear_request_context()
    try:
        bound = bind_request_context(request_id="req-1", musician_id=None, press_kit_id="kit-1")

        assert bound == {"request_id": "req-1", "press_kit_id": "kit-1"}
        assert structlog.contextvars.get_contextvars() == bound
    finally:
        clear_request_context()

    assert structlog.contextvars.get_contextvars() == {}


def test_log_lines_are_json_with_bound_context(capsys):
    configure_logging(level=logging.INFO)
    clear_request_context()
    try:
        bind_request_context(request_id="req-42", musician_id="musician-7")
        get_logger("press_kits").info("press_kit_created", is_public=False)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["message"] == "press_kit_created"
        assert record["level"] == "info"
        assert record["request_id"] == "req-42"
        assert record["musician_id"] == "musician-7"
        assert record["is_public"] is False
        assert "timestamp" in record
    finally:
        clear_request_context()
        configure_logging(level=logging.WARNING)


def test_authentication_binds_musician_id(musician):
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=musician["token"])

    async def resolve():
        identity = await get_current_identity(credentials)
        return identity, structlog.contextvars.get_contextvars()

    clear_request_context()
    try:
        identity, context = asyncio.run(resolve())
    finally:
        clear_request_context()

    assert str(identity.musician_id) == musician["musician_id"]
    assert context["musician_id"] == musician["musician_id"]


def test_request_id_is_echoed_or_generated(client):
    echoed = client.get("/health", headers={"X-Request-ID": "trace-abc"})
    generated = client.get("/health")

    assert echoed.headers["x-request-id"] == "trace-abc"
    assert generated.headers["x-request-id"]
    assert generated.headers["x-request-id"] != "trace-abc"
