class HarvestError(Exception):
    """Base class for errors raised locally by the Harvest client."""

    message = "Harvest request failed"

    def __init__(self, message=None):
        super().__init__(message or self.message)


class MalformedDataError(HarvestError):
    """The response body could not be turned into the expected model objects."""

    message = "The data returned by Harvest was malformed"


class MissingNameError(HarvestError):
    """The client object has no name set so it cannot be saved."""

    message = "The client does not have a name"


class MissingIdentifierError(HarvestError):
    """The object has no identifier so it cannot be looked up or modified."""

    message = "No object supplied or the object did not have an identifier"


class UnexpectedResponseCodeError(HarvestError):
    """Harvest answered with a status code the endpoint does not expect."""

    def __init__(self, status_code=None, message=None):
        self.status_code = status_code
        super().__init__(message or f"Unexpected response code from Harvest: {status_code}")


class HasProjectsOrInvoicesError(HarvestError):
    """The client has associated projects or invoices and cannot be deleted."""

    message = "The client has associated projects or invoices"


class HasActiveProjectsError(HarvestError):
    """The client has active projects and cannot be deactivated."""

    message = "The client has active projects"


class SessionClosedError(HarvestError):
    """The controller was closed before the request could be sent."""

    message = "The Harvest session has been closed"
