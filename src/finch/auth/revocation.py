"""Revoked bearer tokens.

A process-local set of raw token strings that must no longer authenticate,
even when the decoder would still accept them (logout, compromised keys).
Revocation is runtime state: it may change after the engine is frozen.
"""

import logging
import threading
from collections.abc import Iterable

_log = logging.getLogger("finch.security")


class RevokedTokens:
    """Thread-safe set of revoked tokens.

    Usage::

        revoked = RevokedTokens()
        revoked.revoke(token)
        token in revoked   # True
        revoked.unrevoke(token)
    """

    __slots__ = ("_lock", "_tokens")

    def __init__(self, tokens: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._tokens: set[str] = set(tokens)

    def revoke(self, token: str) -> None:
        if not token:
            msg = "Cannot revoke an empty token"
            raise ValueError(msg)
        with self._lock:
            self._tokens.add(token)
            count = len(self._tokens)
        _log.info("Token revoked (%d revoked)", count)

    def unrevoke(self, token: str) -> bool:
        """Allow *token* again. Returns False if it was not revoked."""
        with self._lock:
            if token not in self._tokens:
                return False
            self._tokens.discard(token)
        _log.info("Token revocation lifted")
        return True

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()
        _log.info("Revoked token list cleared")

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._tokens

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
