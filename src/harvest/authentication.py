import base64
import logging
from requests_oauthlib import OAuth2Session


def basic_auth_header(username, password):
    """
    Build the value of a Basic Authorization header.

    Args:
        username: Harvest login, usually the user's email address
        password: Password for that login

    Returns:
        String of the form "Basic <base64 of username:password>"
    """
    credential = f"{username}:{password}".encode('utf-8')
    return f"Basic {base64.b64encode(credential).decode('ascii')}"


class HarvestOAuth:
    """OAuth2 authorization-code flow for a Harvest account.

    The token is only held in memory. Persisting it between runs is left to
    the caller: pass a previously fetched token back in through `token`.
    """

    AUTH_PATH = "/oauth2/authorize"
    TOKEN_PATH = "/oauth2/token"

    def __init__(self, account_name, client_id, client_secret, redirect_uri, token=None):
        self.base_url = f"https://{account_name}.harvestapp.com"
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.token = token
        self.state = None

        self.oauth = OAuth2Session(
            client_id=self.client_id,
            redirect_uri=self.redirect_uri,
            token=self.token,
        )
        self.oauth.headers.update({'Accept': 'application/json'})

    @property
    def auth_url(self):
        return f"{self.base_url}{self.AUTH_PATH}"

    @property
    def token_url(self):
        return f"{self.base_url}{self.TOKEN_PATH}"

    def get_authorization_url(self):
        """Get the URL the user has to visit to grant access."""
        authorization_url, state = self.oauth.authorization_url(self.auth_url)
        self.state = state
        return authorization_url

    def fetch_token(self, authorization_response):
        """Exchange the redirect URL carrying the authorization code for an access token."""
        self.token = self.oauth.fetch_token(
            self.token_url,
            client_secret=self.client_secret,
            authorization_response=authorization_response,
        )
        logging.info("Obtained Harvest OAuth token")
        return self.token

    def refresh_token(self):
        """Refresh the access token if it has expired."""
        if not self.token:
            raise ValueError("No token exists. Need to authorize first.")

        self.token = self.oauth.refresh_token(
            self.token_url,
            client_id=self.client_id,
            client_secret=self.client_secret,
        )
        logging.info("Refreshed Harvest OAuth token")
        return self.token

    def authorized_session(self):
        """Return an authorized session for making API requests."""
        if not self.token:
            raise ValueError("No token exists. Need to authorize first.")
        return self.oauth
