"""``finch routes`` and ``finch check`` — inspect the compiled route table.

Resolves an import string to an Engine, freezes it, and prints either the
routes in match order or the declarations the builder dropped.
"""

import argparse
import sys

from finch.app import Engine
from finch.cli._resolve import resolve_engine
from finch.errors import ConfigurationError


def _load(import_string: str) -> Engine:
    try:
        engine = resolve_engine(import_string)
        engine.freeze()
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    return engine


def run_routes(args: argparse.Namespace) -> None:
    """Print METHOD, PATH, HANDLER, AUTH, and RANK for every route."""
    engine = _load(args.engine)
    routes = engine.table.routes
    if not routes:
        print("No routes registered.")
        return

    rows = [(r.verb, r.path, r.identity, r.policy.label, str(r.rank)) for r in routes]
    headers = ("METHOD", "PATH", "HANDLER", "AUTH", "RANK")
    widths = [max(len(h), *(len(row[i]) for row in rows)) for i, h in enumerate(headers)]

    fmt = "  ".join(f"{{:<{w}}}" for w in widths)
    print(fmt.format(*headers).rstrip())
    print("-" * min(sum(widths) + 2 * (len(widths) - 1), 80))
    for row in rows:
        print(fmt.format(*row).rstrip())


def run_check(args: argparse.Namespace) -> None:
    """Print each dropped or replaced declaration; exit 1 when there are any."""
    engine = _load(args.engine)
    anomalies = engine.table.anomalies
    if not anomalies:
        print(f"OK: {len(engine.table)} route(s), no anomalies.")
        return
    for anomaly in anomalies:
        print(anomaly)
    print(f"{len(anomalies)} anomal{'y' if len(anomalies) == 1 else 'ies'} found.", file=sys.stderr)
    raise SystemExit(1)
