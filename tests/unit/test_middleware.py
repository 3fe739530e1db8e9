"""Unit tests for middleware helpers."""

import logging

from storefront.api.middleware.error_handler import BadRequestError, UpstreamServiceError, create_error_response
from storefront.api.middleware.latency_logging import choose_log_level


class TestChooseLogLevel:
    """Tests for latency log level selection."""

    def test_fast_success_is_info(self) -> None:
        assert choose_log_level(200, 50) == logging.INFO

    def test_client_error_is_warning(self) -> None:
        assert choose_log_level(404, 50) == logging.WARNING

    def test_slow_request_is_warning(self) -> None:
        assert choose_log_level(200, 1500) == logging.WARNING

    def test_very_slow_or_failed_is_error(self) -> None:
        assert choose_log_level(200, 3500) == logging.ERROR
        assert choose_log_level(500, 10) == logging.ERROR
        assert choose_log_level(200, 10, error_occurred=True) == logging.ERROR


class TestErrorResponses:
    """Tests for error classes and response formatting."""

    def test_upstream_payload_included(self) -> None:
        response = create_error_response(
            error_type="bad_request",
            message="Address validation failed.",
            status_code=400,
            upstream={"resultater": []},
        )

        assert response.status_code == 400
        assert b'"upstream":{"resultater":[]}' in response.body

    def test_none_fields_omitted(self) -> None:
        response = create_error_response(error_type="not_found", message="Order not found", status_code=404)

        assert b"upstream" not in response.body
        assert b"details" not in response.body

    def test_upstream_service_error_defaults(self) -> None:
        error = UpstreamServiceError("QuickPay")

        assert error.status_code == 500
        assert error.error_type == "upstream_error"
        assert error.message == "QuickPay request failed"

    def test_bad_request_error(self) -> None:
        error = BadRequestError("nope", upstream={"a": 1})

        assert error.status_code == 400
        assert error.upstream == {"a": 1}
