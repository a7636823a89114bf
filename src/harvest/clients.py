import logging

from harvest.errors import (
    HasActiveProjectsError,
    HasProjectsOrInvoicesError,
    MalformedDataError,
    MissingIdentifierError,
    MissingNameError,
    UnexpectedResponseCodeError,
)
from harvest.models import Client
from harvest.session import completed, decode_json


def _status_code(response):
    return response.status_code if response is not None else None


def create_status_error(response, error):
    """Map the outcome of POST /clients to the error to report, None on success."""
    if error:
        return error
    if _status_code(response) == 201:
        return None
    return UnexpectedResponseCodeError(_status_code(response))


def update_status_error(response, error):
    """Map the outcome of PUT /clients/{id}."""
    if error:
        return error
    if _status_code(response) == 200:
        return None
    return UnexpectedResponseCodeError(_status_code(response))


def delete_status_error(response, error):
    """
    Map the outcome of DELETE /clients/{id}.

    Harvest refuses to delete a client with projects or invoices with a bare
    400; the body does not say why.
    """
    if error:
        if _status_code(response) == 400:
            return HasProjectsOrInvoicesError()
        return error
    if _status_code(response) == 200:
        return None
    return UnexpectedResponseCodeError(_status_code(response))


def toggle_status_error(response, error):
    """Map the outcome of POST /clients/{id}/toggle. A 400 means the client still has active projects."""
    if error:
        if _status_code(response) == 400:
            return HasActiveProjectsError()
        return error
    if _status_code(response) == 200:
        return None
    return UnexpectedResponseCodeError(_status_code(response))


class ClientsController:
    """
    Adds, reads, updates and deletes clients. Only works on accounts with
    the clients module enabled.

    Shares the transport, and so the authentication, of the HarvestController
    that created it.
    """

    def __init__(self, transport):
        self.transport = transport

    def _write(self, method, path, status_error, completion, body=None):
        def handle(response, error):
            completion(status_error(response, error))

        return self.transport.request(method, path, handle, json=body)

    # Creating clients

    def create(self, client, completion):
        """
        Create a new client. Every property set on the client is sent.

        Args:
            client: The new Client, `name` is required
            completion: Called with (error)
        """
        if client is None or not client.name:
            return completed(completion, MissingNameError())
        return self._write("POST", "clients", create_status_error, completion, body=client.to_dict())

    # Requesting clients

    def get(self, client_id, completion):
        """
        Request a single client by identifier.

        Args:
            client_id: Identifier of the client to look up
            completion: Called with (client, error)
        """
        if client_id is None:
            return completed(completion, None, MissingIdentifierError())

        def handle(response, error):
            if error:
                completion(None, error)
                return
            try:
                client = Client.from_dict(decode_json(response))
            except MalformedDataError as e:
                logging.error(f"Unexpected response format for client {client_id}: {str(e)}")
                completion(None, MalformedDataError())
                return
            completion(client, None)

        return self.transport.request("GET", f"clients/{client_id}", handle)

    def get_clients(self, completion):
        """
        Request all clients of the account.

        Entries that cannot be decoded are skipped, the rest are returned.

        Args:
            completion: Called with (clients, error)
        """
        def handle(response, error):
            if error:
                completion(None, error)
                return
            data = decode_json(response)
            if not isinstance(data, list):
                logging.error(f"Unexpected response format from /clients: {data}")
                completion(None, MalformedDataError())
                return

            clients = []
            for item in data:
                try:
                    clients.append(Client.from_dict(item))
                except MalformedDataError as e:
                    logging.warning(f"Skipping client that could not be decoded: {str(e)}")
            logging.info(f"Retrieved {len(clients)} clients from Harvest")
            completion(clients, None)

        return self.transport.request("GET", "clients", handle)

    # Modifying clients

    def update(self, client, completion):
        """
        Update a client. Every property set on the client is sent; Harvest
        ignores the ones it does not allow to change.

        Args:
            client: The Client to update, `identifier` is required
            completion: Called with (error)
        """
        if client is None or client.identifier is None:
            return completed(completion, MissingIdentifierError())
        return self._write("PUT", f"clients/{client.identifier}", update_status_error, completion, body=client.to_dict())

    def delete(self, client, completion):
        """
        Delete a client. Clients with projects or invoices cannot be deleted.

        Args:
            client: The Client to delete, `identifier` is required
            completion: Called with (error)
        """
        if client is None or client.identifier is None:
            return completed(completion, MissingIdentifierError())
        return self._write("DELETE", f"clients/{client.identifier}", delete_status_error, completion)

    def toggle(self, client, completion):
        """
        Toggle the active status of a client. Clients with active projects cannot be deactivated.

        Args:
            client: The Client to toggle, `identifier` is required
            completion: Called with (error)
        """
        if client is None or client.identifier is None:
            return completed(completion, MissingIdentifierError())
        return self._write("POST", f"clients/{client.identifier}/toggle", toggle_status_error, completion)
