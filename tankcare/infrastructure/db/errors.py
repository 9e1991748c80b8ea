"""Translation of driver-level failures into the scheduler's error taxonomy"""
from contextlib import contextmanager

from sqlalchemy import exc as sa_exc

from tankcare.domain.errors import TransientStoreError


def is_transient(error: sa_exc.SQLAlchemyError) -> bool:
    if isinstance(error, (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.TimeoutError)):
        return True
    return isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated


@contextmanager
def store_errors(operation: str):
    """
    Re-raise connectivity failures as TransientStoreError.

    Everything else (integrity errors, programming errors) propagates as is.
    """
    try:
        yield
    except sa_exc.SQLAlchemyError as exc:
        if is_transient(exc):
            raise TransientStoreError(f"{operation} failed: store unavailable ({exc.__class__.__name__})") from exc
        raise
