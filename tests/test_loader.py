"""Unit tests for the registry loader."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from port_registry.errors import MalformedTableError, SourceUnavailableError
from port_registry.loader import RegistryLoader, parse_rows

REGISTRY_CSV = (
    "Service Name,Port Number,Transport Protocol,Description,Assignee,Contact,"
    "Registration Date,Modification Date,Reference,Service Code,"
    "Unauthorized Use Reported,Assignment Notes\n"
    ",0,tcp,Reserved,[Jon_Postel],[Jon_Postel],,,,,,\n"
    "ftp,21,tcp,File Transfer Protocol [Control],[Jon_Postel],[Jon_Postel],,,[RFC959],,,"
    '"Defined TXT keys: u=<username>\n p=<password> path=<path>"\n'
    "x11,6000-6063,tcp,X Window System,[Stephen_Gildea],[Stephen_Gildea],,,,,,\n"
)


def _mock_client(mock_client_cls: MagicMock) -> MagicMock:
    mock_client = MagicMock()
    mock_client.__enter__ = MagicMock(return_value=mock_client)
    mock_client.__exit__ = MagicMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client


def _response(status_code: int, content: bytes = b"") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    return response


class TestParseRows:
    def test_parses_registry(self) -> None:
        rows = parse_rows(REGISTRY_CSV.encode())
        assert len(rows) == 4
        assert rows[1][:3] == ["", "0", "tcp"]
        assert rows[3][1] == "6000-6063"

    def test_quoted_multiline_field(self) -> None:
        rows = parse_rows(REGISTRY_CSV.encode())
        assert rows[2][0] == "ftp"
        assert rows[2][11] == "Defined TXT keys: u=<username>\n p=<password> path=<path>"

    def test_utf8_bom(self) -> None:
        rows = parse_rows(b"\xef\xbb\xbf" + REGISTRY_CSV.encode())
        assert rows[0][0] == "Service Name"

    def test_skips_blank_lines(self) -> None:
        data = REGISTRY_CSV.replace("\nx11", "\n\nx11").encode()
        assert len(parse_rows(data)) == 4

    def test_wrong_field_count(self) -> None:
        data = (REGISTRY_CSV + "short,1,tcp\n").encode()
        with pytest.raises(MalformedTableError) as exc_info:
            parse_rows(data)
        assert exc_info.value.row_index == 4
        assert exc_info.value.field_count == 3

    def test_header_field_count_checked(self) -> None:
        with pytest.raises(MalformedTableError) as exc_info:
            parse_rows(b"Service Name,Port Number\n")
        assert exc_info.value.row_index == 0

    def test_invalid_utf8(self) -> None:
        with pytest.raises(MalformedTableError, match="UTF-8"):
            parse_rows(b"\xff\xfe\x00")


class TestRegistryLoader:
    @pytest.fixture()
    def loader(self, tmp_path: Path) -> RegistryLoader:
        return RegistryLoader(
            url="https://example.test/ports.csv",
            cache_path=tmp_path / "cache" / "ports.csv",
            timeout=5.0,
            logger=logging.getLogger("test"),
        )

    @patch("port_registry.loader.httpx.Client")
    def test_uses_existing_cache(self, mock_client_cls: MagicMock, loader: RegistryLoader) -> None:
        loader.cache_path.parent.mkdir(parents=True)
        loader.cache_path.write_text(REGISTRY_CSV)

        rows = loader.rows()

        assert len(rows) == 4
        mock_client_cls.assert_not_called()

    @patch("port_registry.loader.httpx.Client")
    def test_downloads_missing_cache(self, mock_client_cls: MagicMock, loader: RegistryLoader) -> None:
        mock_client = _mock_client(mock_client_cls)
        mock_client.get.return_value = _response(200, REGISTRY_CSV.encode())

        rows = loader.rows()

        assert len(rows) == 4
        assert loader.cache_exists()
        assert loader.cache_path.read_text() == REGISTRY_CSV
        mock_client.get.assert_called_once_with("https://example.test/ports.csv")
        mock_client_cls.assert_called_once_with(timeout=5.0, follow_redirects=True)

    @patch("port_registry.loader.httpx.Client")
    def test_force_download_replaces_cache(
        self, mock_client_cls: MagicMock, loader: RegistryLoader
    ) -> None:
        loader.cache_path.parent.mkdir(parents=True)
        loader.cache_path.write_text("stale")
        mock_client = _mock_client(mock_client_cls)
        mock_client.get.return_value = _response(200, REGISTRY_CSV.encode())

        rows = loader.rows(force_download=True)

        assert len(rows) == 4
        assert loader.cache_path.read_text() == REGISTRY_CSV
        assert list(loader.cache_path.parent.glob("*.tmp")) == []

    @patch("port_registry.loader.httpx.Client")
    def test_non_success_status(self, mock_client_cls: MagicMock, loader: RegistryLoader) -> None:
        mock_client = _mock_client(mock_client_cls)
        mock_client.get.return_value = _response(503)

        with pytest.raises(SourceUnavailableError, match="503") as exc_info:
            loader.rows()

        assert exc_info.value.status_code == 503
        assert exc_info.value.url == "https://example.test/ports.csv"
        assert not loader.cache_exists()

    @patch("port_registry.loader.httpx.Client")
    def test_transport_error(self, mock_client_cls: MagicMock, loader: RegistryLoader) -> None:
        mock_client = _mock_client(mock_client_cls)
        mock_client.get.side_effect = httpx.ConnectError("Connection refused")

        with pytest.raises(SourceUnavailableError, match="Connection refused") as exc_info:
            loader.rows()

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert not loader.cache_exists()

    @patch("port_registry.loader.httpx.Client")
    def test_failed_download_keeps_old_cache(
        self, mock_client_cls: MagicMock, loader: RegistryLoader
    ) -> None:
        loader.cache_path.parent.mkdir(parents=True)
        loader.cache_path.write_text(REGISTRY_CSV)
        mock_client = _mock_client(mock_client_cls)
        mock_client.get.return_value = _response(404)

        with pytest.raises(SourceUnavailableError):
            loader.download()

        assert loader.cache_path.read_text() == REGISTRY_CSV

    def test_unreadable_cache(self, loader: RegistryLoader) -> None:
        with pytest.raises(SourceUnavailableError, match="Failed to read cache file"):
            loader.read_bytes()

    def test_malformed_cache(self, loader: RegistryLoader) -> None:
        loader.cache_path.parent.mkdir(parents=True)
        loader.cache_path.write_text("a,b,c\n")

        with pytest.raises(MalformedTableError):
            loader.rows()
