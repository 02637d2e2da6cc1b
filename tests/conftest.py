"""Pytest configuration and fixtures for port registry tests."""

from __future__ import annotations

import logging
from collections.abc import Callable

import pytest

from port_registry.models import Row

HEADER: Row = [
    "Service Name",
    "Port Number",
    "Transport Protocol",
    "Description",
    "Assignee",
    "Contact",
    "Registration Date",
    "Modification Date",
    "Reference",
    "Service Code",
    "Unauthorized Use Reported",
    "Assignment Notes",
]


def make_row(service_name: str, port: str, transport: str = "tcp", description: str = "") -> Row:
    """Build a 12-field registry row."""
    return [service_name, port, transport, description, "", "", "", "", "", "", "", ""]


@pytest.fixture()
def logger() -> logging.Logger:
    return logging.getLogger("test")


@pytest.fixture()
def row() -> Callable[..., Row]:
    return make_row


@pytest.fixture()
def header() -> Row:
    return list(HEADER)
