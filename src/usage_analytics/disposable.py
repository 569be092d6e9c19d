"""Disposable handle for releasing subscriptions."""

from __future__ import annotations

import logging
from typing import Callable


logger = logging.getLogger(__name__)


class Disposable:
    """
    Wraps teardown actions behind one ``dispose`` call.

    Disposing twice is harmless; the actions run only the first time.
    Usable as a context manager.
    """

    def __init__(self, *teardowns: Callable[[], object]):
        self._teardowns = list(teardowns)
        self._disposed = False

    def add(self, teardown: Callable[[], object]) -> None:
        """Register another teardown; runs immediately if already disposed."""
        if self._disposed:
            teardown()
            return
        self._teardowns.append(teardown)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        teardowns, self._teardowns = self._teardowns, []
        for teardown in teardowns:
            teardown()

    @property
    def disposed(self) -> bool:
        return self._disposed

    def __enter__(self) -> Disposable:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()
