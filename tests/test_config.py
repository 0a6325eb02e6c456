"""Tests for Settings validation and the startup fail-fast path."""

import unittest

from pydantic import ValidationError

from caveworld.core.errors import ConfigurationError
from caveworld.main import create_app

from api_support import make_settings


class TestSettingsDefaults(unittest.TestCase):
    """Defaults are safe for a deployed environment."""

    def test_prod_by_default(self) -> None:
        settings = make_settings()
        self.assertEqual(settings.APP_ENV, "prod")
        self.assertFalse(settings.expose_error_details)
        self.assertTrue(settings.cookie_secure)
        self.assertEqual(settings.JWT_ALGORITHM, "HS256")
        self.assertEqual(settings.JWT_COOKIE_EXPIRES_DAYS, 90)

    def test_error_details_need_dev_and_debug(self) -> None:
        self.assertFalse(make_settings(APP_ENV="prod", DEBUG=True).expose_error_details)
        self.assertFalse(make_settings(APP_ENV="dev", DEBUG=False).expose_error_details)
        self.assertTrue(make_settings(APP_ENV="dev", DEBUG=True).expose_error_details)


class TestSettingsValidation(unittest.TestCase):
    """Invalid values are rejected when settings load."""

    def test_short_secret_rejected_in_prod(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(APP_ENV="prod", JWT_SECRET="short")

    def test_short_secret_allowed_in_dev(self) -> None:
        settings = make_settings(APP_ENV="dev", JWT_SECRET="short")
        self.assertEqual(settings.JWT_SECRET.get_secret_value(), "short")

    def test_wildcard_cors_rejected_in_prod(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(APP_ENV="prod", CORS_ORIGINS=["*"])

    def test_unknown_algorithm_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(JWT_ALGORITHM="none")

    def test_cookie_days_out_of_range(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(JWT_COOKIE_EXPIRES_DAYS=0)

    def test_database_url_scheme(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(DATABASE_URL="mysql://localhost/caveworld")

    def test_log_level_normalized(self) -> None:
        self.assertEqual(make_settings(LOG_LEVEL="debug").LOG_LEVEL, "DEBUG")

    def test_max_body_bytes(self) -> None:
        self.assertEqual(make_settings().MAX_BODY_BYTES, 10240)
        with self.assertRaises(ValidationError):
            make_settings(MAX_BODY_BYTES=0)


class TestCreateAppFailsFast(unittest.TestCase):
    """The app refuses to start without a signing secret."""

    def test_missing_secret(self) -> None:
        with self.assertRaises(ConfigurationError):
            create_app(make_settings(JWT_SECRET=""))


if __name__ == "__main__":
    unittest.main()
