"""Version-counter change notification.

Recorders bump their notifier on every mutation. Subscribers receive the
new version number; they are expected to read recorder state themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

Subscriber = Callable[[int], None]


class ChangeNotifier:
    """Observable integer version counter with a subscriber list."""

    def __init__(self) -> None:
        self._version = 0
        self._subscribers: list[Subscriber] = []

    @property
    def version(self) -> int:
        return self._version

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback invoked with the new version after each bump.

        Returns:
            A function that removes the subscription. Calling it more
            than once is harmless.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def bump(self) -> int:
        """Increment the version and notify subscribers.

        A failing subscriber is logged and skipped so that recording
        never raises into the host application.
        """
        self._version += 1
        for callback in list(self._subscribers):
            try:
                callback(self._version)
            except Exception:
                logger.exception("Change subscriber %r failed", callback)
        return self._version

    def __len__(self) -> int:
        return len(self._subscribers)
