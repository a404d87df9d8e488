# bookstore/utils/cancellation.py
import threading
import time

from bookstore.domain.errors import CancelledError


class CancelToken:
    """
    Cooperative cancellation signal shared between a caller and a store operation.
    Stores call check() before and between steps, it raises once cancelled
    or once the optional deadline has passed.
    """

    def __init__(self, timeout: float | None = None):
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self):
        if self.cancelled:
            raise CancelledError("Operation cancelled")


def check_cancelled(token: CancelToken | None):
    if token is not None:
        token.check()
