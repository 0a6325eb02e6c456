"""Unit tests for AuthService with a mocked user store."""

import unittest
from unittest.mock import MagicMock, patch

from caveworld.core.errors import AuthenticationError, ConflictError, ValidationError
from caveworld.core.security import TokenIssuer, verify_password
from caveworld.models.user import User
from caveworld.services.auth import (
    INVALID_CREDENTIALS_MESSAGE,
    AuthService,
    build_user,
)

from api_support import make_settings


def _service(users: MagicMock) -> tuple[AuthService, TokenIssuer]:
    issuer = TokenIssuer(make_settings())
    return AuthService(users, issuer), issuer


class TestSignUpService(unittest.TestCase):
    """sign_up validates, hashes, then makes a single create call."""

    def setUp(self) -> None:
        self.users = MagicMock()
        self.users.find_by_email_or_user_name.return_value = None
        self.users.create.side_effect = lambda user: user
        self.service, self.issuer = _service(self.users)

    def test_success_hashes_and_issues_token(self) -> None:
        result = self.service.sign_up("A@x.com", " abc ", "password1", "password1")
        self.users.create.assert_called_once()
        created: User = self.users.create.call_args.args[0]
        self.assertEqual(created.email, "a@x.com")
        self.assertEqual(created.user_name, "abc")
        self.assertEqual(created.role, "user")
        self.assertNotEqual(created.password_hash, "password1")
        self.assertTrue(created.password_hash.startswith("$2b$12$"))
        self.assertFalse(hasattr(created, "password_confirm"))
        self.assertEqual(created.updated_at, created.created_at)
        self.assertIs(result.user, created)
        self.assertEqual(self.issuer.verify(result.token)["sub"], created.id)

    def test_existence_check_uses_normalized_values(self) -> None:
        self.service.sign_up("A@X.com", "abc", "password1", "password1")
        self.users.find_by_email_or_user_name.assert_called_once_with("a@x.com", "abc")

    def test_missing_field_skips_store(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.sign_up("a@x.com", None, "password1", "password1")
        self.users.find_by_email_or_user_name.assert_not_called()
        self.users.create.assert_not_called()

    def test_mismatch_skips_store(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.sign_up("a@x.com", "abc", "password1", "password2")
        self.assertEqual(ctx.exception.field, "password_confirm")
        self.users.create.assert_not_called()

    def test_existing_user_is_conflict(self) -> None:
        self.users.find_by_email_or_user_name.return_value = MagicMock()
        with self.assertRaises(ConflictError):
            self.service.sign_up("a@x.com", "abc", "password1", "password1")
        self.users.create.assert_not_called()

    def test_conflict_from_store_propagates(self) -> None:
        self.users.create.side_effect = ConflictError("User already exists")
        with self.assertRaises(ConflictError):
            self.service.sign_up("a@x.com", "abc", "password1", "password1")


class TestSignInService(unittest.TestCase):
    """sign_in verifies the stored hash and never reveals which check failed."""

    @classmethod
    def setUpClass(cls) -> None:
        cls.stored = build_user("a@x.com", "abc", "password1")

    def setUp(self) -> None:
        self.users = MagicMock()
        self.users.find_by_email.return_value = self.stored
        self.service, self.issuer = _service(self.users)

    def test_success(self) -> None:
        result = self.service.sign_in("a@x.com", "password1")
        self.users.find_by_email.assert_called_once_with("a@x.com", include_password=True)
        self.assertEqual(self.issuer.verify(result.token)["sub"], self.stored.id)
        self.assertIsNone(result.user)
        self.users.create.assert_not_called()

    def test_wrong_password(self) -> None:
        with self.assertRaises(AuthenticationError) as ctx:
            self.service.sign_in("a@x.com", "wrong")
        self.assertEqual(ctx.exception.message, INVALID_CREDENTIALS_MESSAGE)

    def test_unknown_email_burns_a_hash_check(self) -> None:
        self.users.find_by_email.return_value = None
        with patch("caveworld.services.auth.burn_password_check") as burn:
            with self.assertRaises(AuthenticationError) as ctx:
                self.service.sign_in("nobody@x.com", "password1")
        burn.assert_called_once_with("password1")
        self.assertEqual(ctx.exception.message, INVALID_CREDENTIALS_MESSAGE)
        self.assertEqual(ctx.exception.status_code, 401)

    def test_lookup_uses_sign_up_normalization(self) -> None:
        self.service.sign_in("  A@ｘ.COM ", "password1")
        self.users.find_by_email.assert_called_once_with("a@x.com", include_password=True)

    def test_malformed_email_burns_a_hash_check(self) -> None:
        with patch("caveworld.services.auth.burn_password_check") as burn:
            with self.assertRaises(AuthenticationError) as ctx:
                self.service.sign_in("not-an-email", "password1")
        burn.assert_called_once_with("password1")
        self.assertEqual(ctx.exception.message, INVALID_CREDENTIALS_MESSAGE)
        self.users.find_by_email.assert_not_called()

    def test_plaintext_stored_password_never_matches(self) -> None:
        plain = build_user("b@x.com", "bcd", "password1")
        plain.password_hash = "password1"
        self.users.find_by_email.return_value = plain
        with self.assertRaises(AuthenticationError):
            self.service.sign_in("b@x.com", "password1")

    def test_missing_fields(self) -> None:
        for email, password in ((None, "password1"), ("a@x.com", None), ("", "")):
            with self.subTest(email=email, password=password):
                with self.assertRaises(ValidationError):
                    self.service.sign_in(email, password)
        self.users.find_by_email.assert_not_called()


class TestBuildUser(unittest.TestCase):
    """build_user applies the field rules used by sign-up and the CLI."""

    def test_role_and_hash(self) -> None:
        user = build_user("boss@x.com", "boss", "adminpass1", role="admin")
        self.assertEqual(user.role, "admin")
        self.assertTrue(verify_password("adminpass1", user.password_hash))
        self.assertEqual(len(user.id), 36)

    def test_rejects_bad_email(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            build_user("nope", "abc", "password1")
        self.assertEqual(ctx.exception.field, "email")

    def test_password_limited_to_72_bytes(self) -> None:
        build_user("boss@x.com", "boss", "p" * 72)
        for password in ("p" * 73, "é" * 37):
            with self.subTest(password=password):
                with self.assertRaises(ValidationError) as ctx:
                    build_user("boss@x.com", "boss", password)
                self.assertEqual(ctx.exception.field, "password")


if __name__ == "__main__":
    unittest.main()
