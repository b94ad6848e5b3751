"""Explicit handler registration.

Declarations name handlers as ``(controller, method)`` pairs. The
``HandlerTable`` maps those pairs to invokables once at startup, so no
name is ever resolved while serving a request.

Usage::

    handlers = HandlerTable()

    @handlers.handler("Items", "list_items")
    async def list_items(page: int) -> list[dict]:
        ...
"""

from collections.abc import Callable, Mapping
from typing import Any

from finch.errors import ConfigurationError


class HandlerTable:
    """Mapping of ``(controller, method)`` to a sync or async callable."""

    __slots__ = ("_frozen", "_handlers")

    def __init__(self) -> None:
        self._handlers: dict[tuple[str, str], Callable[..., Any]] = {}
        self._frozen = False

    def register(self, controller: str, method: str, fn: Callable[..., Any]) -> None:
        """Register *fn* as the handler for ``controller.method``."""
        if self._frozen:
            msg = "Cannot register handlers after the route table was built."
            raise RuntimeError(msg)
        if not callable(fn):
            msg = f"Handler for {controller}.{method} is not callable: {fn!r}"
            raise ConfigurationError(msg)
        key = (controller, method)
        existing = self._handlers.get(key)
        if existing is not None and existing is not fn:
            msg = f"Handler for {controller}.{method} is already registered."
            raise ConfigurationError(msg)
        self._handlers[key] = fn

    def register_many(self, controller: str, handlers: Mapping[str, Callable[..., Any]]) -> None:
        """Register several methods of one controller at once."""
        for method, fn in handlers.items():
            self.register(controller, method, fn)

    def handler(
        self, controller: str, method: str | None = None
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of ``register``. *method* defaults to the function name."""

        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            self.register(controller, method or fn.__name__, fn)
            return fn

        return decorator

    def resolve(self, controller: str, method: str) -> Callable[..., Any] | None:
        return self._handlers.get((controller, method))

    def freeze(self) -> None:
        self._frozen = True

    def __contains__(self, key: object) -> bool:
        return key in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
