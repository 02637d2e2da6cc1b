"""Threading utilities for the port registry."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from threading import Condition, Event, Lock, Thread
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from port_registry.service import PortsService


class ReadWriteLock:
    """Lock allowing many concurrent readers or a single writer.

    Waiting writers block new readers so a steady stream of reads cannot
    starve a refresh.
    """

    def __init__(self) -> None:
        self._condition = Condition(Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._condition:
            while self._writer or self._writers_waiting:
                self._condition.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._condition:
            self._readers -= 1
            if self._readers == 0:
                self._condition.notify_all()

    def acquire_write(self) -> None:
        with self._condition:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._condition.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._condition:
            self._writer = False
            self._condition.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the lock in shared mode."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the lock in exclusive mode."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class RefreshWorker(Thread):
    """Background thread that periodically re-downloads and rebuilds the catalog."""

    def __init__(
        self,
        service: PortsService,
        interval: float,
        logger: logging.Logger,
    ) -> None:
        super().__init__(daemon=True)
        self._service = service
        self._interval = interval
        self._logger = logger
        self._stop_event = Event()
        self._refreshed = Event()

    def stop(self) -> None:
        """Stop the refresh worker thread."""
        self._stop_event.set()

    def wait_for_refresh(self, timeout: float | None = None) -> bool:
        """Block until the next completed refresh attempt, successful or not."""
        signalled = self._refreshed.wait(timeout)
        self._refreshed.clear()
        return signalled

    def run(self) -> None:
        while not self._stop_event.wait(self._interval):
            self._refresh()

    def _refresh(self) -> None:
        try:
            catalog = self._service.refresh(force_download=True)
            self._logger.info(
                "Refreshed port registry: %d registered, %d unregistered",
                len(catalog.registered_ports),
                len(catalog.unregistered_ports),
            )
        except Exception:
            self._logger.exception("Port registry refresh failed; keeping previous catalog")
        finally:
            self._refreshed.set()
