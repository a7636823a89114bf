"""Tests for authentication and the shared transport headers."""

from unittest.mock import patch

import pytest
import requests
from requests.auth import HTTPBasicAuth

from harvest.authentication import HarvestOAuth, basic_auth_header
from harvest.session import HarvestSession


class TestBasicAuthHeader:
    """Test basic_auth_header."""

    def test_known_value(self) -> None:
        """Test the header against the RFC 7617 example."""
        assert basic_auth_header("Aladdin", "open sesame") == "Basic QWxhZGRpbjpvcGVuIHNlc2FtZQ=="


class TestHarvestSession:
    """Test HarvestSession configuration."""

    def test_basic_auth_headers(self) -> None:
        """Test the shared headers for username and password."""
        transport = HarvestSession("acme", username="Aladdin", password="open sesame")
        try:
            assert transport.base_url == "https://acme.harvestapp.com"
            assert transport.session.headers["Accept"] == "application/json"
            assert transport.session.headers["Authorization"] == "Basic QWxhZGRpbjpvcGVuIHNlc2FtZQ=="
        finally:
            transport.close()

    def test_header_credential(self) -> None:
        """Test that a string credential is used as the Authorization header."""
        transport = HarvestSession("acme", auth="Bearer abc123")
        try:
            assert transport.session.headers["Authorization"] == "Bearer abc123"
        finally:
            transport.close()

    def test_auth_object_credential(self) -> None:
        """Test that a requests auth object is attached to the session."""
        credential = HTTPBasicAuth("user", "secret")
        transport = HarvestSession("acme", auth=credential)
        try:
            assert transport.session.auth is credential
            assert "Authorization" not in transport.session.headers
        finally:
            transport.close()

    def test_authorized_session(self) -> None:
        """Test that an externally authorized session is used as is."""
        session = requests.Session()
        transport = HarvestSession("acme", session=session)
        try:
            assert transport.session is session
            assert session.headers["Accept"] == "application/json"
        finally:
            transport.close()

    @pytest.mark.parametrize(
        "kwargs",
        [{}, {"username": "user"}, {"password": "secret"}],
    )
    def test_missing_credentials(self, kwargs) -> None:
        """Test that incomplete credentials are rejected."""
        with pytest.raises(ValueError):
            HarvestSession("acme", **kwargs)

    def test_missing_account(self) -> None:
        """Test that an account name is required."""
        with pytest.raises(ValueError):
            HarvestSession("", username="user", password="secret")

    def test_callback_runs_once_per_request(self, make_response) -> None:
        """Test that the callback gets the response and no error."""
        transport = HarvestSession("acme", username="user", password="secret")
        calls = []
        response = make_response(200, [])
        try:
            with patch.object(transport.session, "request", return_value=response):
                transport.request("GET", "/people", lambda *args: calls.append(args)).result()
        finally:
            transport.close()

        assert calls == [(response, None)]


class TestHarvestOAuth:
    """Test HarvestOAuth."""

    def test_authorization_url(self) -> None:
        """Test that the authorization URL points at the account and records the state."""
        oauth = HarvestOAuth("acme", "client-id", "client-secret", "https://localhost:8443/callback")

        url = oauth.get_authorization_url()

        assert url.startswith("https://acme.harvestapp.com/oauth2/authorize?")
        assert "client_id=client-id" in url
        assert oauth.state is not None
        assert oauth.token_url == "https://acme.harvestapp.com/oauth2/token"

    def test_authorized_session_needs_token(self) -> None:
        """Test that no session is handed out before authorization."""
        oauth = HarvestOAuth("acme", "client-id", "client-secret", "https://localhost:8443/callback")

        with pytest.raises(ValueError):
            oauth.authorized_session()
        with pytest.raises(ValueError):
            oauth.refresh_token()

    def test_authorized_session_with_token(self) -> None:
        """Test that a stored token gives an authorized session."""
        token = {"access_token": "abc", "token_type": "Bearer"}
        oauth = HarvestOAuth("acme", "client-id", "client-secret", "https://localhost:8443/callback", token=token)

        session = oauth.authorized_session()

        assert session.token["access_token"] == "abc"
        assert session.headers["Accept"] == "application/json"

    def test_fetch_token(self) -> None:
        """Test exchanging the callback URL for a token."""
        oauth = HarvestOAuth("acme", "client-id", "client-secret", "https://localhost:8443/callback")
        token = {"access_token": "abc", "token_type": "Bearer"}

        with patch.object(oauth.oauth, "fetch_token", return_value=token) as fetch:
            result = oauth.fetch_token("https://localhost:8443/callback?code=xyz&state=s")

        fetch.assert_called_once_with(
            "https://acme.harvestapp.com/oauth2/token",
            client_secret="client-secret",
            authorization_response="https://localhost:8443/callback?code=xyz&state=s",
        )
        assert result == token
        assert oauth.token == token
