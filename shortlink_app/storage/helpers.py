import functools
from typing import Any, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from shortlink_app.exceptions import DataStoreError


F = TypeVar("F", bound=Callable[..., Any])


def handle_database_error(method: F) -> F:
    """Wrap SQLAlchemy store methods so database failures surface as DataStoreError

    The session is rolled back first so it stays usable for the next call.

    Example:
        >>> @handle_database_error
        ... def exists(self, link_id):
        ...     return self.db.get(Link, link_id) is not None
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DataStoreError(f"Database error in {method.__name__}: {e}") from e

    return wrapper
