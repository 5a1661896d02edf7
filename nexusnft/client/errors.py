"""
Client-side failures.

These never cross the wire: they describe what happened to an action
from the point of view of the person driving the client.
"""

from nexusnft.models.failure import FailureKind


class UserCancelledError(Exception):
    """Raised when the signer declines to authorize an action."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"User rejected {action}")


class TransactionFailedError(Exception):
    """
    Raised when the service rejects a submitted action.

    Carries the failure kind and message from the response envelope when
    the service returned one.
    """

    def __init__(
        self,
        message: str,
        kind: FailureKind | None = None,
        status_code: int | None = None,
    ):
        self.message = message
        self.kind = kind
        self.status_code = status_code
        super().__init__(message)
