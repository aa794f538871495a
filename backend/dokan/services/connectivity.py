# Overview: Process-wide online/offline flag with an edge-triggered "became online" signal.

from __future__ import annotations

import threading
from typing import Callable


class ConnectivityState:
    """
    Explicit connectivity handle owned by the app context.

    Initialized from config at startup, flipped by an external notifier
    (HTTP route, CLI, OS hook), read by the mutation executor and the
    reconciler. Callbacks registered with on_restored fire once per
    offline -> online transition, never on repeated "online" reports.
    """

    def __init__(self, online: bool = True) -> None:
        self._online = bool(online)
        self._lock = threading.Lock()
        self._restored_callbacks: list[Callable[[], None]] = []

    @property
    def online(self) -> bool:
        with self._lock:
            return self._online

    def on_restored(self, callback: Callable[[], None]) -> None:
        self._restored_callbacks.append(callback)

    def set_online(self, online: bool) -> bool:
        """Update the flag. Returns True when this call was an offline -> online edge."""
        with self._lock:
            became_online = bool(online) and not self._online
            self._online = bool(online)
            callbacks = list(self._restored_callbacks) if became_online else []

        # Callbacks run outside the lock so they may read .online
        for callback in callbacks:
            callback()
        return became_online
