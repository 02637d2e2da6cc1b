"""Ports service: owns the current catalog and answers lookups against it."""

from __future__ import annotations

import logging
import random
from typing import Protocol

from port_registry.catalog import build_catalog
from port_registry.errors import NotLoadedError
from port_registry.models import PortCatalog, PortRecord, Row
from port_registry.threading_utils import ReadWriteLock

_logger = logging.getLogger(__name__)


class RowSource(Protocol):
    """Anything that can supply registry rows, such as a RegistryLoader."""

    def rows(self, force_download: bool = False) -> list[Row]: ...


class PortsService:
    """Thread-safe holder of the current port catalog.

    Refreshes build a new catalog off-lock and swap it in under the write
    lock; readers only hold the read lock long enough to grab the current
    catalog reference.
    """

    def __init__(
        self,
        loader: RowSource,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._loader = loader
        self._rng = rng if rng is not None else random.Random()
        self._logger = logger or _logger
        self._lock = ReadWriteLock()
        self._catalog: PortCatalog | None = None

    @property
    def catalog(self) -> PortCatalog | None:
        """The current catalog, or None before the first successful refresh."""
        with self._lock.read_locked():
            return self._catalog

    @property
    def is_loaded(self) -> bool:
        """Whether a catalog has been successfully built."""
        return self.catalog is not None

    def refresh(self, force_download: bool = False) -> PortCatalog:
        """Reload the registry and replace the current catalog.

        On failure the previous catalog stays in effect and the error is
        raised to the caller.

        Args:
            force_download: Fetch a fresh copy of the registry even if cached

        Returns:
            The newly installed catalog

        Raises:
            SourceUnavailableError: If the registry cannot be obtained
            MalformedTableError: If a row has the wrong number of fields
            ParseError: If a port field is invalid
        """
        self._logger.info("Loading ports...")
        rows = self._loader.rows(force_download=force_download)
        catalog = build_catalog(rows, logger=self._logger)

        with self._lock.write_locked():
            self._catalog = catalog

        self._logger.info("Loaded %d ports", len(catalog.registered_ports))
        return catalog

    def _require_catalog(self) -> PortCatalog:
        catalog = self.catalog
        if catalog is None:
            raise NotLoadedError("ports data is not loaded")
        return catalog

    def random_unassigned_port(self) -> int:
        """Pick a random port from the unregistered user-port range.

        Raises:
            NotLoadedError: If no catalog is loaded or it has no unregistered ports
        """
        unregistered = self._require_catalog().unregistered_ports
        if not unregistered:
            raise NotLoadedError("ports data is not loaded")
        return self._rng.choice(unregistered)

    def registered_ports(self) -> tuple[PortRecord, ...]:
        """Registered ports of the current catalog, in registry order."""
        return self._require_catalog().registered_ports

    def unregistered_ports(self) -> tuple[int, ...]:
        """Unregistered user ports of the current catalog, ascending."""
        return self._require_catalog().unregistered_ports
