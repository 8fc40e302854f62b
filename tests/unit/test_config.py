"""Unit tests for environment validation and the error taxonomy."""

import pytest
from libs.common.config import validate_settings
from libs.common.errors import ConfigurationError, InvalidTransition, NotFound
from libs.common.error_handler import format_validation_errors


class TestValidateSettings:
    def test_test_environment_is_valid(self):
        settings = validate_settings()
        assert settings.ENVIRONMENT == "test"
        assert settings.SUPABASE_STORAGE_BUCKET == "products"
        assert settings.site_url == "http://localhost:3000"

    def test_missing_and_invalid_values_all_reported(self, monkeypatch, tmp_path):
        # No stray .env file may fill the gaps
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
        monkeypatch.setenv("SUPABASE_URL", "not-a-url")
        monkeypatch.setenv("SUPABASE_JWT_SECRET", "")

        with pytest.raises(ConfigurationError) as exc_info:
            validate_settings()

        problems = exc_info.value.problems
        fields = {problem.split(":")[0] for problem in problems}
        assert {"STRIPE_SECRET_KEY", "SUPABASE_URL", "SUPABASE_JWT_SECRET"} <= fields
        assert str(exc_info.value).startswith("Environment validation failed:")

    def test_postgres_url_uses_psycopg_driver(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://bakery:pw@localhost/bakery")
        settings = validate_settings()
        assert settings.DATABASE_URL.startswith("postgresql+psycopg://")


class TestErrors:
    def test_status_codes(self):
        assert InvalidTransition().status_code == 409
        assert NotFound("Order not found").message == "Order not found"

    def test_validation_message_format(self):
        errors = [
            {"loc": ("body", "items", 0, "quantity"), "msg": "Input should be less than or equal to 100"},
            {"loc": ("body", "pickup_date"), "msg": "Value error, Invalid pickup date format"},
        ]
        assert format_validation_errors(errors) == (
            "items.0.quantity: Input should be less than or equal to 100, "
            "pickup_date: Invalid pickup date format"
        )
