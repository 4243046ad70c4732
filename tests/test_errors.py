"""
Tests for the error taxonomy and the classifier.

No HTTP round trips except where request validation is involved.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from campbook.common.errors import (
    AppError,
    AuthorizationError,
    NotFoundError,
    UnclassifiedError,
    ValidationError,
)
from campbook.common.exception_handlers import classify, error_body, resource_not_found
from campbook.domain import models
from campbook.domain.validation import FieldViolation, ModelValidationError


class TestErrorVariants:
    """Tests for the closed error variants."""

    def test_not_found_defaults(self) -> None:
        err = resource_not_found()
        assert isinstance(err, NotFoundError)
        assert err.status_code == 404
        assert err.title == "Resource Not Found"
        assert err.errors == ["The requested resource couldn't be found"]

    def test_validation_errors_never_empty(self) -> None:
        err = ValidationError(fields=[])
        assert err.errors == ["Validation error"]
        assert err.title == "Validation error"

    def test_authorization_error(self) -> None:
        err = AuthorizationError()
        assert err.status_code == 403
        assert err.message == "invalid csrf token"

    def test_unclassified_keeps_status(self) -> None:
        err = UnclassifiedError("nope", status_code=405)
        assert err.status_code == 405
        assert err.errors is None
        assert str(err) == "nope"


class TestClassifier:
    """Tests for classify()."""

    def test_variants_pass_through(self) -> None:
        err = AuthorizationError()
        assert classify(err) is err

    def test_model_validation_preserves_order(self) -> None:
        exc = ModelValidationError(
            [
                FieldViolation("check_out", "checkOut must be after checkIn"),
                FieldViolation("total_guests", "totalGuests must be at least 1"),
            ]
        )
        err = classify(exc)
        assert isinstance(err, ValidationError)
        assert err.errors == ["checkOut must be after checkIn", "totalGuests must be at least 1"]

    def test_integrity_error_becomes_validation(self, db, user) -> None:
        db.add(
            models.User(
                email="other@example.com",
                username=user.username,
                hashed_password=user.hashed_password,
            )
        )
        with pytest.raises(IntegrityError) as excinfo:
            db.commit()
        db.rollback()

        err = classify(excinfo.value)
        assert isinstance(err, ValidationError)
        assert err.title == "Validation error"
        assert err.errors == ["username must be unique"]

    def test_http_404_uses_fallback(self) -> None:
        err = classify(StarletteHTTPException(status_code=404))
        assert isinstance(err, NotFoundError)

    def test_other_http_status_is_unclassified(self) -> None:
        err = classify(StarletteHTTPException(status_code=405, detail="Method Not Allowed"))
        assert isinstance(err, UnclassifiedError)
        assert err.status_code == 405
        assert err.message == "Method Not Allowed"

    def test_bare_app_error_is_unclassified(self) -> None:
        err = classify(AppError(message="legacy", status_code=418))
        assert isinstance(err, UnclassifiedError)
        assert err.status_code == 418

    def test_foreign_exception_is_unclassified(self) -> None:
        err = classify(KeyError())
        assert isinstance(err, UnclassifiedError)
        assert err.status_code == 500
        assert err.message == "KeyError"


class TestErrorBody:
    """Tests for the fixed response shape."""

    def test_shape(self) -> None:
        body = error_body(NotFoundError(), stack=None)
        assert body == {
            "title": "Resource Not Found",
            "message": "The requested resource couldn't be found.",
            "errors": ["The requested resource couldn't be found"],
            "stack": None,
        }

    def test_unclassified_has_null_errors(self) -> None:
        body = error_body(UnclassifiedError("x"), stack="trace")
        assert body["errors"] is None
        assert body["stack"] == "trace"

    def test_unknown_variant_rejected(self) -> None:
        with pytest.raises(TypeError):
            error_body(AppError(message="x"), stack=None)


class TestRequestValidation:
    """Malformed request bodies are reported as validation errors."""

    def test_missing_fields(self, dev_client: TestClient, csrf_headers) -> None:
        headers = csrf_headers(dev_client)
        resp = dev_client.post("/api/bookings", json={"userId": 1}, headers=headers)
        assert resp.status_code == 400
        body = resp.json()
        assert body["title"] == "Validation error"
        # campsiteId, checkIn, checkOut
        assert len(body["errors"]) == 3

    def test_malformed_json(self, dev_client: TestClient, csrf_headers) -> None:
        headers = csrf_headers(dev_client)
        headers["Content-Type"] = "application/json"
        resp = dev_client.post("/api/bookings", content=b"{not json", headers=headers)
        assert resp.status_code == 400
        assert resp.json()["title"] == "Validation error"
        assert resp.json()["errors"]
