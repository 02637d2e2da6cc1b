"""Registry loader: fetches and caches the IANA port registry CSV."""

from __future__ import annotations

import csv
import io
import logging
import os
import tempfile
from pathlib import Path

import httpx

from port_registry.errors import MalformedTableError, SourceUnavailableError
from port_registry.models import FIELD_COUNT, Row

# IANA Service Name and Transport Protocol Port Number Registry
REGISTRY_URL = (
    "https://www.iana.org/assignments/service-names-port-numbers/service-names-port-numbers.csv"
)
DEFAULT_CACHE_PATH = "ports.csv"
REQUEST_TIMEOUT_SECONDS = 30.0

_logger = logging.getLogger(__name__)


def parse_rows(data: bytes) -> list[Row]:
    """Decode raw CSV bytes into rows of exactly FIELD_COUNT fields.

    Blank lines are skipped. Quoted fields may span several lines.

    Raises:
        MalformedTableError: If the bytes are not UTF-8, the CSV is broken,
            or a row has the wrong number of fields
    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MalformedTableError(f"Registry is not valid UTF-8: {exc}") from exc

    rows: list[Row] = []
    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        for record in reader:
            if not record:
                continue
            if len(record) != FIELD_COUNT:
                row_index = len(rows)
                raise MalformedTableError(
                    f"Row {row_index} has {len(record)} fields, expected {FIELD_COUNT}",
                    row_index=row_index,
                    field_count=len(record),
                )
            rows.append(record)
    except csv.Error as exc:
        raise MalformedTableError(
            f"Invalid CSV near line {reader.line_num}: {exc}", row_index=len(rows)
        ) from exc
    return rows


class RegistryLoader:
    """Loads registry rows from a local cache file, downloading it when needed."""

    def __init__(
        self,
        url: str = REGISTRY_URL,
        cache_path: str | os.PathLike[str] = DEFAULT_CACHE_PATH,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        logger: logging.Logger | None = None,
    ) -> None:
        self._url = url
        self._cache_path = Path(cache_path)
        self._timeout = timeout
        self._logger = logger or _logger

    @property
    def cache_path(self) -> Path:
        """Location of the cached registry file."""
        return self._cache_path

    def cache_exists(self) -> bool:
        """Check if the cache file is present."""
        return self._cache_path.exists()

    def download(self) -> None:
        """Download the registry and replace the cache file.

        The body is written to a temporary file next to the cache and moved
        into place, so a failed download never leaves a truncated cache.

        Raises:
            SourceUnavailableError: On transport errors, a non-200 response,
                or if the cache file cannot be written
        """
        self._logger.info("Downloading port registry from %s", self._url)
        try:
            with httpx.Client(timeout=self._timeout, follow_redirects=True) as client:
                response = client.get(self._url)
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(
                f"Failed to fetch registry: {exc}", url=self._url
            ) from exc

        if response.status_code != httpx.codes.OK:
            raise SourceUnavailableError(
                f"HTTP response code: {response.status_code}",
                url=self._url,
                status_code=response.status_code,
            )

        cache_dir = self._cache_path.parent
        temp_path: str | None = None
        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                delete=False, dir=cache_dir, suffix=".tmp", mode="wb"
            ) as output_file:
                temp_path = output_file.name
                output_file.write(response.content)
            os.replace(temp_path, self._cache_path)
        except OSError as exc:
            if temp_path:
                try:
                    os.remove(temp_path)
                except OSError:
                    pass
            raise SourceUnavailableError(
                f"Failed to write cache file {self._cache_path}: {exc}", url=self._url
            ) from exc

        self._logger.info("File saved to %s", self._cache_path)

    def read_bytes(self) -> bytes:
        """Read the cached registry."""
        try:
            return self._cache_path.read_bytes()
        except OSError as exc:
            raise SourceUnavailableError(
                f"Failed to read cache file {self._cache_path}: {exc}", url=self._url
            ) from exc

    def rows(self, force_download: bool = False) -> list[Row]:
        """Return registry rows, header included.

        Args:
            force_download: Fetch a fresh copy even if the cache exists

        Raises:
            SourceUnavailableError: If the registry cannot be obtained
            MalformedTableError: If a row does not have 12 fields
        """
        if force_download or not self.cache_exists():
            self.download()
        else:
            self._logger.info("File already exists at %s", self._cache_path)

        rows = parse_rows(self.read_bytes())
        self._logger.debug("Read %d rows from %s", len(rows), self._cache_path)
        return rows
