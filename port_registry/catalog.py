"""Catalog building: range expansion and unregistered port detection."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from port_registry.errors import ParseError
from port_registry.models import (
    MAX_USER_PORT,
    MIN_USER_PORT,
    PORT_FIELD_INDEX,
    PortCatalog,
    PortRecord,
    Row,
)
from port_registry.parser import parse_row

_logger = logging.getLogger(__name__)


def _user_range_gap(previous: int, offset: int) -> range:
    """Ports strictly between previous and offset that fall in the user range."""
    return range(max(previous + 1, MIN_USER_PORT), min(offset - 1, MAX_USER_PORT) + 1)


def build_catalog(rows: Iterable[Row], logger: logging.Logger | None = None) -> PortCatalog:
    """Build a catalog from registry rows.

    The first row is the header and is skipped without validation. Rows are
    expected in ascending port order, as the registry publishes them.

    Gap detection tracks the first port of each row: after a row, the cursor
    moves to its range start, not its range end. Ports above the last
    registered row are never reported.

    Args:
        rows: Registry rows, header included
        logger: Logger instance

    Returns:
        PortCatalog with registered ports in source order and unregistered
        user ports in ascending order

    Raises:
        ParseError: If any row has an invalid port field
    """
    logger = logger or _logger
    registered: list[PortRecord] = []
    unregistered: list[int] = []
    previous = 0

    for row_index, row in enumerate(rows):
        if row_index == 0:
            continue

        try:
            records = parse_row(row, row_index)
        except ParseError:
            logger.warning(
                "Error parsing port number: %s at index %d", row[PORT_FIELD_INDEX], row_index
            )
            raise

        if not records:
            continue

        offset = records[0].port_number
        if offset > previous + 1:
            unregistered.extend(_user_range_gap(previous, offset))

        registered.extend(records)
        previous = offset

    logger.debug(
        "Built catalog with %d registered and %d unregistered ports",
        len(registered),
        len(unregistered),
    )
    return PortCatalog(registered_ports=tuple(registered), unregistered_ports=tuple(unregistered))
