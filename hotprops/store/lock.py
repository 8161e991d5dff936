"""
Reentrant reader/writer lock.

Any number of threads may hold the read lock at once; the write lock is
exclusive. The thread holding the write lock may acquire the write lock
again and may also take the read lock, so code running inside a write
section (e.g. reload listeners) can call back into read and write
operations without deadlocking on itself. Upgrading a read lock to a
write lock is refused.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Optional


class ReentrantReadWriteLock:

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._writer: Optional[int] = None
        self._write_holds = 0
        self._readers: Dict[int, int] = {}
        self._writers_waiting = 0

    def acquire_read(self):
        me = threading.get_ident()
        with self._cond:
            if self._writer == me or me in self._readers:
                self._readers[me] = self._readers.get(me, 0) + 1
                return
            # Waiting writers go first so a steady stream of readers cannot starve them
            while self._writer is not None or self._writers_waiting:
                self._cond.wait()
            self._readers[me] = 1

    def release_read(self):
        me = threading.get_ident()
        with self._cond:
            count = self._readers.get(me, 0)
            if count == 0:
                raise RuntimeError("cannot release un-acquired read lock")
            if count == 1:
                del self._readers[me]
                if not self._readers:
                    self._cond.notify_all()
            else:
                self._readers[me] = count - 1

    def acquire_write(self):
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                self._write_holds += 1
                return
            if me in self._readers:
                raise RuntimeError("cannot upgrade a read lock to a write lock")
            self._writers_waiting += 1
            try:
                while self._writer is not None or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = me
            self._write_holds = 1

    def release_write(self):
        me = threading.get_ident()
        with self._cond:
            if self._writer != me:
                raise RuntimeError("cannot release un-acquired write lock")
            self._write_holds -= 1
            if self._write_holds == 0:
                self._writer = None
                self._cond.notify_all()

    @contextmanager
    def read(self):
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self):
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    def is_write_locked_by_current_thread(self) -> bool:
        with self._cond:
            return self._writer == threading.get_ident()

    def read_hold_count(self) -> int:
        with self._cond:
            return self._readers.get(threading.get_ident(), 0)
