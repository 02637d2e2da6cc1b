"""Data models for the port registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# One CSV record: 12 positional text fields
Row = list[str]

# Constants
MIN_PORT = 0
MAX_PORT = 65535
MIN_USER_PORT = 1024
MAX_USER_PORT = 49151
FIELD_COUNT = 12
PORT_FIELD_INDEX = 1


@dataclass(frozen=True)
class PortRecord:
    """A single registered port assignment."""

    service_name: str
    port_number: int
    transport: str
    description: str = ""
    assignee: str = ""
    contact: str = ""
    registration_date: str = ""
    modification_date: str = ""
    reference: str = ""
    service_code: str = ""
    unauthorized_use: str = ""
    notes: str = ""

    def __post_init__(self) -> None:
        if not MIN_PORT <= self.port_number <= MAX_PORT:
            raise ValueError(f"Port out of range ({MIN_PORT}-{MAX_PORT}): {self.port_number}")

    @classmethod
    def from_row(cls, row: Row, port_number: int) -> PortRecord:
        """Build a record from a registry row, overriding the port field."""
        return cls(
            service_name=row[0],
            port_number=port_number,
            transport=row[2],
            description=row[3],
            assignee=row[4],
            contact=row[5],
            registration_date=row[6],
            modification_date=row[7],
            reference=row[8],
            service_code=row[9],
            unauthorized_use=row[10],
            notes=row[11],
        )

    def to_payload(self) -> dict[str, Any]:
        """Convert to JSON-serializable payload."""
        return {
            "service_name": self.service_name,
            "port_number": self.port_number,
            "transport": self.transport,
            "description": self.description,
            "assignee": self.assignee,
            "contact": self.contact,
            "registration_date": self.registration_date,
            "modification_date": self.modification_date,
            "reference": self.reference,
            "service_code": self.service_code,
            "unauthorized_use": self.unauthorized_use,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class PortCatalog:
    """Snapshot of registered ports and the unregistered user-range ports."""

    registered_ports: tuple[PortRecord, ...]
    unregistered_ports: tuple[int, ...]
