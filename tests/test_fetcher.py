"""Tests for the configuration fetcher."""

from unittest.mock import MagicMock

import pytest
import requests

from anyflip_dl.errors import RemoteError, TransportError
from anyflip_dl.fetcher import ConfigFetcher, build_session, config_url
from conftest import LEGACY_CONFIG, make_response


class TestConfigFetcher:
    """Tests for ConfigFetcher."""

    def test_config_url(self, reference):
        """Test the configuration location for a reference."""
        assert config_url(reference) == (
            "https://online.anyflip.com/abcd/1234/mobile/javascript/config.js"
        )

    def test_fetch_returns_text(self, reference):
        """Test the body is returned as text with the timeout applied."""
        session = MagicMock()
        session.get.return_value = make_response(content=LEGACY_CONFIG.encode("utf-8"))

        raw = ConfigFetcher(session, timeout=5).fetch(reference)

        assert raw == LEGACY_CONFIG
        session.get.assert_called_once_with(
            "https://online.anyflip.com/abcd/1234/mobile/javascript/config.js",
            timeout=5,
        )

    def test_accepts_any_2xx(self, reference):
        """Test any 2xx status counts as success."""
        session = MagicMock()
        session.get.return_value = make_response(status_code=203, content=b"totalPageCount=1")

        assert ConfigFetcher(session).fetch(reference) == "totalPageCount=1"

    @pytest.mark.parametrize("status", [301, 403, 404, 500])
    def test_non_success_status_is_remote_error(self, reference, status):
        """Test non-2xx statuses raise RemoteError with the status."""
        session = MagicMock()
        session.get.return_value = make_response(status_code=status, reason="Nope")

        with pytest.raises(RemoteError) as excinfo:
            ConfigFetcher(session).fetch(reference)

        assert excinfo.value.status == status

    def test_empty_body_is_remote_error(self, reference):
        """Test a blank body raises RemoteError."""
        session = MagicMock()
        session.get.return_value = make_response(content=b"  \n")

        with pytest.raises(RemoteError):
            ConfigFetcher(session).fetch(reference)

    @pytest.mark.parametrize(
        "exc",
        [
            requests.ConnectionError("dns"),
            requests.exceptions.SSLError("tls"),
            requests.Timeout("slow"),
        ],
    )
    def test_transport_failures(self, reference, exc):
        """Test request failures raise TransportError without retry."""
        session = MagicMock()
        session.get.side_effect = exc

        with pytest.raises(TransportError):
            ConfigFetcher(session).fetch(reference)

        assert session.get.call_count == 1


class TestBuildSession:
    """Tests for build_session."""

    def test_verifies_certificates_by_default(self):
        """Test certificates are verified by default."""
        assert build_session().verify is True

    def test_insecure_disables_verification(self):
        """Test insecure mode turns verification off."""
        assert build_session(insecure=True).verify is False
