"""
Tests for failure classification.

Every failure the service reports must carry a kind and render into the
shared envelope with the right HTTP status.
"""

import pytest

from nexusnft.models.failure import (
    ApiResponse,
    CollectionNotFoundError,
    FailureKind,
    InvalidInputError,
    InvalidMetadataError,
    KnownError,
    MetadataFrozenError,
    MissingParameterError,
    OutcomeType,
    RefusalError,
    TokenNotFoundError,
    UnauthorizedError,
    UpstreamUnavailableError,
)


class TestFailureEnvelope:
    """Tests for the ApiResponse failure envelope."""

    def test_refusal_response_structure(self) -> None:
        response = ApiResponse.refusal(
            kind=FailureKind.METADATA_FROZEN,
            message="Metadata is frozen",
        )

        assert response.outcome == OutcomeType.REFUSAL
        assert response.failure.message == "Metadata is frozen"
        assert response.failure.kind == FailureKind.METADATA_FROZEN

    def test_known_failure_serializes_kind_as_string(self) -> None:
        response = ApiResponse.known_failure(
            kind=FailureKind.NOT_FOUND,
            message="Token 3 does not exist.",
        )

        dumped = response.model_dump(mode="json")

        assert dumped["outcome"] == "known_failure"
        assert dumped["failure"] == {
            "kind": "not_found",
            "message": "Token 3 does not exist.",
            "detail": None,
        }


class TestFailureTypes:
    @pytest.mark.parametrize(
        ("error", "kind", "status_code"),
        [
            (UnauthorizedError("0xabc"), FailureKind.UNAUTHORIZED, 403),
            (TokenNotFoundError(7), FailureKind.NOT_FOUND, 404),
            (CollectionNotFoundError("0xabc"), FailureKind.NOT_FOUND, 404),
            (MissingParameterError("contract"), FailureKind.MISSING_REQUIRED, 400),
            (InvalidInputError("bad"), FailureKind.INVALID_INPUT, 400),
            (InvalidMetadataError("image is empty"), FailureKind.INVARIANT_VIOLATION, 500),
            (UpstreamUnavailableError("Asset store"), FailureKind.SERVICE_UNAVAILABLE, 503),
        ],
    )
    def test_known_errors(self, error: KnownError, kind: FailureKind, status_code: int) -> None:
        assert isinstance(error, KnownError)
        assert error.kind == kind
        assert error.status_code == status_code
        assert error.to_response().outcome == OutcomeType.KNOWN_FAILURE

    def test_metadata_frozen_is_a_refusal(self) -> None:
        error = MetadataFrozenError("0xabc")

        assert isinstance(error, RefusalError)
        assert error.status_code == 409
        assert error.message == "Metadata is frozen"
        assert error.to_response().outcome == OutcomeType.REFUSAL

    def test_unauthorized_reports_account(self) -> None:
        error = UnauthorizedError("0xabc")

        assert error.account == "0xabc"
        assert error.to_response().failure.detail == "0xabc"

    def test_missing_parameter_default_message(self) -> None:
        assert MissingParameterError("tokenId").message == "tokenId is required"
