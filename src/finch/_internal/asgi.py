"""ASGI type aliases.

The raw scope/receive/send shapes the engine's protocol adapter and the
test client exchange. Users never see these.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

type Scope = MutableMapping[str, Any]
type Message = MutableMapping[str, Any]
type Receive = Callable[[], Awaitable[Message]]
type Send = Callable[[Message], Awaitable[None]]
