"""Cooperative cancellation for classification walks."""

import threading


class OperationCancelled(Exception):
    """Raised when a cancellation token fires during a trivia walk."""


class CancellationToken:
    """Thread-safe cancellation flag checked at cooperative points."""

    def __init__(self):
        self._event = threading.Event()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("operation was cancelled")


def check_cancelled(cancel: CancellationToken | None) -> None:
    """Raise OperationCancelled if cancel is set. None means never cancelled."""
    if cancel is not None:
        cancel.raise_if_cancelled()
