"""Parsing of registry rows into port records."""

from __future__ import annotations

from port_registry.errors import ParseError
from port_registry.models import MAX_PORT, PORT_FIELD_INDEX, PortRecord, Row

PORT_FIELD_NAME = "port"


def _is_decimal(token: str) -> bool:
    return token.isascii() and token.isdigit()


def _parse_port(token: str, row_index: int, raw_value: str) -> int:
    if not _is_decimal(token):
        raise ParseError(row_index, PORT_FIELD_NAME, raw_value)
    digits = token.lstrip("0") or "0"
    # Bound the digit count before int() so huge fields fail as out of range
    if len(digits) > len(str(MAX_PORT)) or int(digits) > MAX_PORT:
        raise ParseError(row_index, PORT_FIELD_NAME, raw_value, reason=f"port out of range (0-{MAX_PORT})")
    return int(digits)


def parse_port_field(value: str, row_index: int) -> tuple[int, int]:
    """Parse a port field into an inclusive (start, end) pair.

    Accepts a single port ("80") or a range of two decimal bounds joined by
    a hyphen ("6000-6063"). A single port yields start == end.

    Args:
        value: Raw port field text
        row_index: Index of the row in the registry, used in errors

    Returns:
        Tuple of (start, end)

    Raises:
        ParseError: If the value is not a port, a bound exceeds 65535, or
            the range is reversed
    """
    parts = value.split("-")
    if len(parts) == 2 and _is_decimal(parts[0]) and _is_decimal(parts[1]):
        start = _parse_port(parts[0], row_index, value)
        end = _parse_port(parts[1], row_index, value)
        if start > end:
            raise ParseError(row_index, PORT_FIELD_NAME, value, reason="invalid port range (start > end)")
        return start, end

    port = _parse_port(value, row_index, value)
    return port, port


def parse_row(row: Row, row_index: int) -> list[PortRecord]:
    """Convert one registry row into port records.

    Rows without a port number (reserved or unassigned service names) yield
    nothing. A range yields one record per port, in ascending order.
    """
    raw_port = row[PORT_FIELD_INDEX]
    if raw_port == "":
        return []

    start, end = parse_port_field(raw_port, row_index)
    return [PortRecord.from_row(row, port_number) for port_number in range(start, end + 1)]
