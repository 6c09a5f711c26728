"""Configuration, error responses and logger setup."""

import json

import pytest

from inquiry_resolution.config import Settings
from inquiry_resolution.utils.error_handling import (
    AppError,
    ConflictError,
    NotFoundError,
    PartialMultiProductFailure,
    SessionStateError,
    TransientStoreError,
    ValidationError,
    to_response,
)
from inquiry_resolution.utils.logging_config import get_logger


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.auto_match_threshold == 95.0
        assert settings.inclusion_floor == 60.0
        assert settings.max_candidates == 10
        assert settings.default_country == "Indonesia"
        assert settings.database_url is None

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("AUTO_MATCH_THRESHOLD", "90")
        monkeypatch.setenv("MATCH_INCLUSION_FLOOR", "70")
        monkeypatch.setenv("MAX_MATCH_CANDIDATES", "5")
        monkeypatch.setenv("DEFAULT_CUSTOMER_COUNTRY", "Malaysia")
        monkeypatch.setenv("DATABASE_URL", "")
        monkeypatch.setenv("DB_SECRET_ARN", "arn:aws:secretsmanager:eu-west-2:1:secret:db")

        settings = Settings.from_environment()

        assert settings.auto_match_threshold == 90.0
        assert settings.inclusion_floor == 70.0
        assert settings.max_candidates == 5
        assert settings.default_country == "Malaysia"
        assert settings.database_url is None
        assert settings.db_secret_arn.endswith(":db")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"inclusion_floor": 96.0},
            {"auto_match_threshold": 101.0},
            {"inclusion_floor": -1.0},
            {"max_candidates": 0},
        ],
    )
    def test_inconsistent_thresholds_are_rejected(self, overrides):
        with pytest.raises(ValueError):
            Settings(**overrides)


class TestErrors:
    @pytest.mark.parametrize(
        "error, status",
        [
            (NotFoundError(), 404),
            (ValidationError(), 422),
            (ConflictError(), 409),
            (SessionStateError(), 409),
            (TransientStoreError(), 503),
            (PartialMultiProductFailure("renumbering failed"), 500),
        ],
    )
    def test_status_codes(self, error, status):
        assert isinstance(error, AppError)
        assert error.status_code == status

    def test_conflict_message_is_user_facing(self):
        assert str(ConflictError()) == (
            "This inquiry number already exists. Please use a different number."
        )

    def test_to_response(self):
        response = to_response(NotFoundError("Customer c-1 not found"))
        assert response["statusCode"] == 404
        body = json.loads(response["body"])
        assert body == {
            "message": "Customer c-1 not found",
            "status": "error",
            "error_type": "NotFoundError",
        }


def test_logger_is_configured_once():
    first = get_logger("inquiry_resolution.tests")
    second = get_logger("inquiry_resolution.tests")
    assert first is second
    assert len(second.handlers) == 1
    assert second.propagate is False
