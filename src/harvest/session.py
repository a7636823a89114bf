import logging
from concurrent.futures import Future, ThreadPoolExecutor
import requests

from harvest.authentication import basic_auth_header
from harvest.errors import SessionClosedError


class HarvestSession:
    """
    Authenticated transport shared by every controller of one account.

    Holds a single requests.Session whose headers are configured once here
    and never touched afterwards. Requests run on a small thread pool; each
    one hands (response, error) to its callback exactly once.
    """

    def __init__(self, account_name, username=None, password=None, auth=None, session=None, max_workers=4):
        """
        Args:
            account_name: The xxxx in https://xxxx.harvestapp.com
            username: Login for Basic auth
            password: Password for Basic auth
            auth: Authorization header value, or any requests auth object
            session: An already authorized requests.Session (e.g. from HarvestOAuth)
            max_workers: Size of the worker pool running the requests
        """
        if not account_name:
            raise ValueError("An account name is required")

        self.account_name = account_name
        self.base_url = f"https://{account_name}.harvestapp.com"
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Accept": "application/json"})

        if username is not None and password is not None:
            self.session.headers["Authorization"] = basic_auth_header(username, password)
        elif isinstance(auth, str):
            self.session.headers["Authorization"] = auth
        elif auth is not None:
            self.session.auth = auth
        elif session is None:
            raise ValueError("Harvest needs a username and password, an auth credential or an authorized session")

        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="harvest")

    def url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method, path, callback, params=None, json=None):
        """
        Send a request on the worker pool.

        The callback receives (response, error). Connection failures arrive
        as (None, RequestException); non-2xx answers as (response, HTTPError).
        After close() the callback gets (None, SessionClosedError) straight away.

        Returns:
            Future resolved once the callback has returned
        """
        try:
            return self.executor.submit(self._perform, method, path, callback, params, json)
        except RuntimeError:
            logging.error(f"Cannot send {method} /{path.lstrip('/')}: the session is closed")
            return completed(callback, None, SessionClosedError())

    def _perform(self, method, path, callback, params, json):
        endpoint = self.url(path)

        try:
            response = self.session.request(method, endpoint, params=params, json=json)
        except requests.RequestException as e:
            logging.error(f"Error calling {method} {endpoint}: {str(e)}")
            callback(None, e)
            return

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            logging.error(f"Request {method} {endpoint} failed. Status code: {response.status_code}")
            logging.error(f"Response: {response.text}")
            callback(response, e)
            return

        callback(response, None)

    def close(self):
        self.executor.shutdown(wait=True)
        self.session.close()


def completed(function, *args):
    """Run a completion on the caller's thread and return an already resolved future."""
    future = Future()
    try:
        future.set_result(function(*args))
    except Exception as e:
        future.set_exception(e)
    return future


def decode_json(response):
    """
    Decode a response body. Callers treat a None result as malformed data.

    Returns:
        The decoded JSON value, or None when the body is not JSON
    """
    try:
        return response.json()
    except ValueError:
        logging.error(f"Response from {response.url} was not valid JSON: {response.text}")
        return None
