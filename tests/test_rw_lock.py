"""Tests for ReadWriteLock."""

import threading
import time

import pytest

from rw_lock import ReadWriteLock


class TestReadWriteLock:
    def test_readers_share(self) -> None:
        lock = ReadWriteLock()
        both_inside = threading.Barrier(2, timeout=5)

        def reader() -> None:
            with lock.read_context():
                both_inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not both_inside.broken

    def test_writer_waits_for_reader(self) -> None:
        lock = ReadWriteLock()
        acquired = threading.Event()

        def writer() -> None:
            with lock.write_context():
                acquired.set()

        lock.acquire_read()
        t = threading.Thread(target=writer)
        t.start()

        assert not acquired.wait(0.1)
        lock.release_read()
        assert acquired.wait(5)
        t.join()

    def test_reader_waits_for_writer(self) -> None:
        lock = ReadWriteLock()
        acquired = threading.Event()

        def reader() -> None:
            with lock.read_context():
                acquired.set()

        lock.acquire_write()
        t = threading.Thread(target=reader)
        t.start()

        assert not acquired.wait(0.1)
        lock.release_write()
        assert acquired.wait(5)
        t.join()

    def test_waiting_writer_goes_before_later_reader(self) -> None:
        lock = ReadWriteLock()
        order = []
        late_reader_in = threading.Event()

        def writer() -> None:
            with lock.write_context():
                order.append("writer")

        def late_reader() -> None:
            with lock.read_context():
                order.append("reader")
                late_reader_in.set()

        lock.acquire_read()
        w = threading.Thread(target=writer)
        w.start()
        deadline = time.monotonic() + 5
        while lock._writers_waiting == 0 and time.monotonic() < deadline:
            time.sleep(0.001)
        assert lock._writers_waiting == 1

        r = threading.Thread(target=late_reader)
        r.start()
        assert not late_reader_in.wait(0.1)

        lock.release_read()
        w.join(5)
        r.join(5)

        assert order == ["writer", "reader"]
        assert lock._writers_waiting == 0

    def test_context_releases_on_error(self) -> None:
        lock = ReadWriteLock()

        with pytest.raises(KeyError):
            with lock.write_context():
                raise KeyError("boom")

        # would block forever if the write side were still held
        with lock.read_context():
            pass

    def test_release_without_acquire(self) -> None:
        lock = ReadWriteLock()

        with pytest.raises(RuntimeError):
            lock.release_read()
        with pytest.raises(RuntimeError):
            lock.release_write()
