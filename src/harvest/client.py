import logging

from harvest.clients import ClientsController
from harvest.errors import MalformedDataError, MissingIdentifierError, UnexpectedResponseCodeError
from harvest.models import User, Timer, Project, Client
from harvest.session import HarvestSession, completed, decode_json


def decode_list(data, model):
    """
    Decode a JSON array into model objects, failing on the first bad element.

    Raises:
        MalformedDataError: if data is not a list or any element cannot be decoded
    """
    if not isinstance(data, list):
        raise MalformedDataError(f"Expected a list of {model.__name__} objects")
    return [model.from_dict(item) for item in data]


class HarvestController:
    """
    Entry point for the Harvest API.

    Every operation returns immediately with a Future; the completion passed
    in is called exactly once, on a worker thread, with either the result or
    an error. Errors are delivered, never raised.
    """

    def __init__(self, account_name, username=None, password=None, auth=None, session=None, max_workers=4):
        """
        Initialize the controller for one Harvest account.

        Args:
            account_name: Name used when logging in at https://xxxx.harvestapp.com
            username: Account login, usually an email address
            password: Password for the login
            auth: Authorization header value or requests auth object, instead of username/password
            session: Already authorized requests.Session, e.g. HarvestOAuth.authorized_session()
            max_workers: Number of requests that may run at the same time
        """
        self.transport = HarvestSession(
            account_name,
            username=username,
            password=password,
            auth=auth,
            session=session,
            max_workers=max_workers,
        )
        self.clients = ClientsController(self.transport)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        self.transport.close()

    def _get_list(self, path, model, completion):
        def handle(response, error):
            if error:
                completion(None, error)
                return
            try:
                items = decode_list(decode_json(response), model)
            except MalformedDataError as e:
                logging.error(f"Unexpected response format from /{path}: {str(e)}")
                completion(None, e)
                return
            logging.info(f"Retrieved {len(items)} {path} from Harvest")
            completion(items, None)

        return self.transport.request("GET", path, handle)

    # Users

    def get_users(self, completion):
        """
        Get all people registered on the account.

        Args:
            completion: Called with (users, error)
        """
        return self._get_list("people", User, completion)

    # Timers

    def get_timers(self, user, completion):
        """
        Get today's timers for a user.

        Args:
            user: The User to look up, must have an identifier
            completion: Called with (timers, error)
        """
        if user is None or user.identifier is None:
            return completed(completion, None, MissingIdentifierError("No user supplied or user did not have an ID"))

        def handle(response, error):
            if error:
                completion(None, error)
                return
            data = decode_json(response)
            if not isinstance(data, dict) or not isinstance(data.get('day_entries'), list):
                logging.error(f"Unexpected response format from /daily: {data}")
                completion(None, MalformedDataError("Daily response did not contain day_entries"))
                return
            try:
                timers = [Timer.from_dict(entry) for entry in data['day_entries']]
            except MalformedDataError as e:
                completion(None, e)
                return
            completion(timers, None)

        return self.transport.request("GET", "daily", handle, params={"of_user": user.identifier})

    def toggle(self, timer, completion):
        """
        Toggle a timer: a running timer stops, a stopped one starts.

        If the account uses timestamp timers a stopped timer cannot restart;
        Harvest creates a new timer with the same project, task and notes.

        Args:
            timer: The Timer to toggle, must have an identifier
            completion: Called with (success, updated_timer, error)
        """
        if timer is None or timer.identifier is None:
            return completed(completion, False, None, MissingIdentifierError("No timer supplied or timer did not have an ID"))

        def handle(response, error):
            if error:
                completion(False, None, error)
                return
            if response.status_code != 200:
                completion(False, None, UnexpectedResponseCodeError(response.status_code))
                return
            updated = None
            data = decode_json(response)
            if isinstance(data, dict):
                try:
                    updated = Timer.from_dict(data)
                except MalformedDataError as e:
                    logging.warning(f"Toggled timer {timer.identifier} but could not read it back: {str(e)}")
            completion(True, updated, None)

        return self.transport.request("GET", f"daily/timer/{timer.identifier}", handle)

    # Projects

    def get_projects(self, completion):
        """
        Get all projects on the account.

        Args:
            completion: Called with (projects, error)
        """
        return self._get_list("projects", Project, completion)

    # Clients

    def get_clients(self, completion):
        """
        Get all clients on the account.

        Unlike ClientsController.get_clients this fails the whole call when
        any client in the list cannot be decoded.

        Args:
            completion: Called with (clients, error)
        """
        return self._get_list("clients", Client, completion)
