"""
Unit Tests for the Domain Exception Hierarchy
=============================================

Test Coverage
-------------
- Structured fields (message, details, severity, error_code, is_retryable)
- Serialization through to_dict() and the string forms
- Severity and retry helpers, and the log level BaseService.log_error picks
"""

import logging

import pytest

from apiary.modules.shared.base_service import BaseService
from apiary.modules.shared.exceptions import (
    ApiaryDomainException,
    ConfigurationError,
    ErrorSeverity,
    NotFoundError,
    PersistenceError,
    ValidationError,
    get_error_severity,
    is_transient_error,
)


@pytest.mark.unit
class TestApiaryDomainException:
    def test_defaults(self):
        exc = ApiaryDomainException("Hatch failed")

        assert exc.details == {}
        assert exc.severity is ErrorSeverity.ERROR
        assert exc.is_retryable is False
        assert exc.error_code == "ApiaryDomainException"
        assert str(exc) == "[ApiaryDomainException] Hatch failed"

    def test_to_dict(self):
        exc = ApiaryDomainException(
            "Hatch failed",
            {"species_id": "bee-worker"},
            severity=ErrorSeverity.WARNING,
            is_retryable=True,
            error_code="HATCH_FAILED",
        )

        assert exc.to_dict() == {
            "error_type": "ApiaryDomainException",
            "error_code": "HATCH_FAILED",
            "message": "Hatch failed",
            "details": {"species_id": "bee-worker"},
            "severity": "warning",
            "is_retryable": True,
        }
        assert "Details: {'species_id': 'bee-worker'}" in str(exc)


@pytest.mark.unit
class TestSubclasses:
    def test_not_found(self):
        exc = NotFoundError("RewardProfile", "chess")

        assert exc.message == "RewardProfile not found: chess"
        assert exc.error_code == "REWARDPROFILE_NOT_FOUND"
        assert exc.severity is ErrorSeverity.INFO

    def test_not_found_without_identifier(self):
        assert NotFoundError("BeeSpecies").message == "BeeSpecies not found"

    def test_validation(self):
        exc = ValidationError("amount", "must be non-negative")

        assert exc.field == "amount"
        assert exc.error_code == "VALIDATION_AMOUNT"
        assert exc.details == {"field": "amount", "validation_message": "must be non-negative"}

    def test_configuration(self):
        exc = ConfigurationError("perks.effects.focus", "unknown modifier")

        assert exc.severity is ErrorSeverity.CRITICAL
        assert exc.details == {"config_key": "perks.effects.focus"}

    def test_persistence(self):
        cause = OSError("disk full")

        exc = PersistenceError("save", "hive:guild", cause)

        assert exc.message == "Persistence save failed for 'hive:guild': disk full"
        assert exc.error_code == "PERSISTENCE_SAVE_FAILED"
        assert exc.details["cause_type"] == "OSError"
        assert exc.is_retryable is True


@pytest.mark.unit
class TestHelpers:
    @pytest.mark.parametrize(
        "exc, expected",
        [
            (PersistenceError("load", "hive:guild"), True),
            (ValidationError("score", "negative"), False),
            (RuntimeError("boom"), False),
        ],
    )
    def test_is_transient_error(self, exc, expected):
        assert is_transient_error(exc) is expected

    def test_get_error_severity(self):
        assert get_error_severity(PersistenceError("load", "k")) is ErrorSeverity.WARNING
        assert get_error_severity(KeyError("k")) is ErrorSeverity.ERROR


@pytest.mark.unit
class TestServiceErrorLogging:
    @pytest.fixture
    def service(self, config_manager, event_bus, mocker):
        return BaseService(config_manager, event_bus, mocker.MagicMock())

    @pytest.mark.parametrize(
        "exc, level, retryable",
        [
            (PersistenceError("save", "hive:guild"), logging.WARNING, True),
            (NotFoundError("BeeSpecies", "bee-x"), logging.INFO, False),
            (ConfigurationError("rewards", "broken"), logging.CRITICAL, False),
            (ConnectionError("down"), logging.ERROR, False),
        ],
    )
    def test_level_follows_severity(self, service, exc, level, retryable):
        service.log_error("add_fragment", exc, user_id="u1")

        args, kwargs = service.log.log.call_args
        assert args[0] == level
        assert kwargs["extra"]["retryable"] is retryable
        assert kwargs["extra"]["user_id"] == "u1"
        assert kwargs["extra"]["error_type"] == type(exc).__name__
