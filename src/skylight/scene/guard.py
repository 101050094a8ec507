"""Read-write guard for the scene aggregate.

A scene is mutable while it is being built and read-only while renders use
it. The guard lets any number of readers in at once and gives a writer
exclusive access, so an insert can never interleave with a render.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class SceneBusyError(RuntimeError):
    """Raised when a non-blocking write finds readers holding the scene."""


class ReadWriteGuard:
    """Many-readers / one-writer lock built on a condition variable.

    Writers wait until every reader has released; readers wait while a
    writer holds the guard.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @property
    def readers(self) -> int:
        """Number of readers currently holding the guard."""
        with self._cond:
            return self._readers

    @contextmanager
    def read(self) -> Iterator[None]:
        """Hold shared read access for the duration of the block."""
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self, blocking: bool = True) -> Iterator[None]:
        """Hold exclusive write access for the duration of the block.

        Args:
            blocking: Wait for readers and other writers to finish. When
                False, fail immediately instead.

        Raises:
            SceneBusyError: If blocking is False and the guard is held.
        """
        with self._cond:
            if not blocking and (self._writing or self._readers > 0):
                raise SceneBusyError(
                    f"Scene is in use ({self._readers} reader(s)); cannot modify it now"
                )
            while self._writing or self._readers > 0:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class SceneReplacedError(RuntimeError):
    """Raised when a Scene is used after a newer Scene reset device storage."""


# Serializes kernel launches and field access issued from host threads
device_lock = threading.RLock()
