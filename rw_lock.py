from contextlib import contextmanager
import threading


class ReadWriteLock:
    """
    A lock that admits many readers at once or a single writer.

    Writers take priority: once a writer is waiting, new readers queue
    behind it, so a steady stream of readers cannot hold writers off.
    Not reentrant: a thread must not take either side while already
    holding one.
    """

    __slots__ = ("_cond", "_readers", "_writer", "_writers_waiting")

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read without acquire")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers > 0:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self):
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write without acquire")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_context(self):
        """
        Hold the shared side for the duration of the `with` block.
        """
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_context(self):
        """
        Hold the exclusive side for the duration of the `with` block.
        """
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
