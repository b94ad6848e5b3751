"""Security audit events.

Small opt-in event channel for authentication and authorization telemetry.
Applications can register a sink to forward events to logs, metrics, or SIEM.

Events emitted by the engine:

- ``auth.required`` — protected route, no credential presented.
- ``auth.token.invalid`` — a bearer token was presented but did not decode.
- ``auth.token.revoked`` — a bearer token was presented but has been revoked.
- ``authz.denied`` — credential presented, validator chain failed.
- ``authz.hook.error`` — a validator hook raised; the verdict is unaffected.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any

_log = logging.getLogger("finch.security")


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    """A structured security event."""

    name: str
    timestamp: float = field(default_factory=time)
    path: str | None = None
    method: str | None = None
    request_id: str | None = None
    subject: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


type SecurityEventSink = Callable[[SecurityEvent], None]


_sink_lock = threading.Lock()
_sink: SecurityEventSink | None = None


def set_security_event_sink(sink: SecurityEventSink | None) -> None:
    """Set a process-wide sink for security events.

    Pass ``None`` to disable event delivery.
    """
    global _sink
    with _sink_lock:
        _sink = sink


def emit_security_event(
    name: str,
    *,
    meta: Any | None = None,
    subject: str | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Emit a best-effort security event to the configured sink.

    *meta* is anything with ``path``/``method``/``request_id`` attributes
    (a ``RequestMeta`` or ``Request``). A sink that raises is logged and
    ignored; telemetry never changes a request's outcome.
    """
    with _sink_lock:
        sink = _sink
    if sink is None:
        return

    event = SecurityEvent(
        name=name,
        path=getattr(meta, "path", None),
        method=getattr(meta, "method", None),
        request_id=getattr(meta, "request_id", None) or None,
        subject=subject,
        details=details or {},
    )
    try:
        sink(event)
    except Exception:
        _log.exception("Security event sink failed for %s", name)
