"""
Failure classification for registry and gallery operations.

Every failure the service can report is one of the exception types below.
Each carries a FailureKind and an HTTP status, and renders into the shared
ApiResponse envelope so clients can tell failures apart without parsing
prose.

Outcome types:
- Refusal: The registry refused a mutation because of a standing constraint
  (metadata is frozen)
- KnownFailure: The request or the caller was wrong, or a collaborator
  was unavailable

Registry rejections happen before anything is committed, so a failed
operation never leaves partial state behind.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    MISSING_REQUIRED = "missing_required"

    # Authorization
    UNAUTHORIZED = "unauthorized"

    # Resource failures
    NOT_FOUND = "not_found"

    # Constraint violations
    METADATA_FROZEN = "metadata_frozen"

    # Service failures
    SERVICE_UNAVAILABLE = "service_unavailable"

    # Internal errors
    INVARIANT_VIOLATION = "invariant_violation"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    REFUSAL = "refusal"
    KNOWN_FAILURE = "known_failure"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="Explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )


class ApiResponse(BaseModel):
    """
    Response envelope used for every failure the API reports.

    Successful registry calls return their own response models; failures are
    always wrapped here so the client sees a stable shape.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    failure: FailureDetail = Field(
        ...,
        description="Failure details",
    )

    @classmethod
    def refusal(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
    ) -> "ApiResponse":
        """
        Create a refusal response.

        Use when the registry refuses a mutation due to a standing constraint.
        """
        return cls(
            outcome=OutcomeType.REFUSAL,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
            ),
        )

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
    ) -> "ApiResponse":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
            ),
        )


class KnownError(Exception):
    """
    Base exception for failures with a known cause.

    Raise this (or a subclass) when the system knows exactly why it failed.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
        )


class RefusalError(Exception):
    """
    Exception for constraint-based refusals.

    Use when the registry refuses to proceed due to a standing constraint.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        status_code: int = 409,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse:
        """Convert to an ApiResponse."""
        return ApiResponse.refusal(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
        )


class UnauthorizedError(KnownError):
    """
    Raised when the caller lacks the role an operation requires.

    The rejected caller address is kept on the exception and reported
    in the response detail.
    """

    def __init__(self, account: str):
        self.account = account
        super().__init__(
            kind=FailureKind.UNAUTHORIZED,
            message=f"Account {account} is not authorized to perform this operation.",
            detail=account,
            status_code=403,
        )


class MetadataFrozenError(RefusalError):
    """Raised when the base URI is changed after the metadata was frozen."""

    def __init__(self, contract_address: str):
        self.contract_address = contract_address
        super().__init__(
            kind=FailureKind.METADATA_FROZEN,
            message="Metadata is frozen",
            detail=f"Collection {contract_address} no longer accepts base URI changes.",
        )


class TokenNotFoundError(KnownError):
    """Raised for any operation on a token ID that was never minted."""

    def __init__(self, token_id: int):
        self.token_id = token_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Token {token_id} does not exist.",
            status_code=404,
        )


class CollectionNotFoundError(KnownError):
    """Raised when no collection is deployed at an address."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"No collection deployed at {address}.",
            status_code=404,
        )


class MissingParameterError(KnownError):
    """Raised when a required request parameter is absent or empty."""

    def __init__(self, parameter: str, message: str | None = None):
        self.parameter = parameter
        super().__init__(
            kind=FailureKind.MISSING_REQUIRED,
            message=message or f"{parameter} is required",
            detail=parameter,
            status_code=400,
        )


class InvalidInputError(KnownError):
    """Raised when a request parameter is present but malformed."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            detail=detail,
            status_code=400,
        )


class InvalidMetadataError(KnownError):
    """
    Raised when a resolved metadata document fails validation.

    This is an internal defect, not a client error.
    """

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVARIANT_VIOLATION,
            message="Invalid metadata structure",
            detail=detail,
            status_code=500,
        )


class UpstreamUnavailableError(KnownError):
    """Raised when the asset store or another collaborator cannot be reached."""

    def __init__(self, service: str, detail: str | None = None):
        self.service = service
        super().__init__(
            kind=FailureKind.SERVICE_UNAVAILABLE,
            message=f"{service} is unavailable. Please try again later.",
            detail=detail,
            status_code=503,
        )
