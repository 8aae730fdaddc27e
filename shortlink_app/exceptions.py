"""Exceptions raised by the link service, its stores and its caches.

Classes:
    LinkServiceError:
        Base class for caller-visible outcomes. Carries the HTTP status code
        the API layer answers with.

    BadRequestError:
        Raised when the caller supplied an invalid custom id or TTL.

    ConflictError:
        Raised when the requested id is already taken.

    NotFoundError:
        Raised when no record exists for the requested id.

    LinkExpiredError:
        Raised when the record exists but its expiry time has passed.

    StorageError:
        Base class for infrastructure failures.

    DataStoreError:
        Raised when the authoritative store is unreachable or a query fails.

    LinkAlreadyExistsError:
        Raised by a store when an insert collides with an existing primary key.

    CacheError:
        Raised when the cache backend is unreachable or a command fails.

Example:
    >>> from shortlink_app.exceptions import NotFoundError
    >>> raise NotFoundError()
    Traceback (most recent call last):
        ...
    shortlink_app.exceptions.NotFoundError: The provided ID could not be found.
"""


class LinkServiceError(Exception):
    """Base class for errors returned to callers of the link service."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(LinkServiceError):
    """Exception raised when request input breaks a validation rule."""

    status_code = 400
    default_message = "Invalid request"


class ConflictError(LinkServiceError):
    """Exception raised when the requested id is already in use."""

    status_code = 409
    default_message = "The provided ID already exists. Please choose a different ID."


class NotFoundError(LinkServiceError):
    """Exception raised when no record exists for an id."""

    status_code = 404
    default_message = "The provided ID could not be found."


class LinkExpiredError(LinkServiceError):
    """Exception raised when a record exists but has expired."""

    status_code = 410
    default_message = "The requested short URL has expired and is no longer accessible."


class StorageError(Exception):
    """Generic base class for store and cache infrastructure failures."""

    pass


class DataStoreError(StorageError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, failed transactions, etc.
    """

    pass


class LinkAlreadyExistsError(StorageError):
    """Exception raised when inserting a record whose id already exists in the data store."""

    pass


class CacheError(StorageError):
    """Exception raised when a cache read, write or delete fails."""

    pass
