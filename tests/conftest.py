"""Shared fixtures for finch tests."""

from collections.abc import Iterator

import pytest

from finch.auth.validators import RequestMeta
from finch.http.headers import Headers
from finch.http.query import QueryParams
from finch.security.audit import SecurityEvent, set_security_event_sink


@pytest.fixture
def audit_events() -> Iterator[list[SecurityEvent]]:
    """Capture security events emitted during a test."""
    events: list[SecurityEvent] = []
    set_security_event_sink(events.append)
    try:
        yield events
    finally:
        set_security_event_sink(None)


@pytest.fixture
def meta() -> RequestMeta:
    return RequestMeta(
        method="GET",
        path="/api/items",
        headers=Headers(),
        query=QueryParams(),
        request_id="req-1",
    )
