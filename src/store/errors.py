class StoreError(Exception):
    """Base class for failures talking to the remote store."""


class StoreNotConfiguredError(StoreError):
    """Raised by connect() when the store URL or key is missing."""


class NetworkError(StoreError):
    """
    The identity exchange could not reach the backend.

    Only login raises this; callers show a connection message instead of
    the invalid-credentials one.
    """
