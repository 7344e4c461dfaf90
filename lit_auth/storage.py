"""
Session-scoped key/value storage.

The OAuth redirect flow writes its CSRF state here before leaving the app
and reads it back on the callback. Hosts supply their own store (browser
session, server-side session, cache); the in-memory store is for tests and
single-process hosts.
"""

import threading
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class SessionStore(Protocol):
    """Storage scoped to one browsing session."""

    def set(self, key: str, value: str) -> None:
        ...

    def get(self, key: str) -> Optional[str]:
        ...


class InMemorySessionStore:
    """Thread-safe dict-backed session store. Last write wins."""

    def __init__(self):
        self._items: dict[str, str] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
