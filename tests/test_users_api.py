"""HTTP tests for user lookup, the current-user endpoint and admin-only listing."""

import uuid

from api_support import API, ApiTestCase, signup_body
from sqlalchemy import delete

from caveworld.models import User
from caveworld.services.auth import build_user


class TestGetUserById(ApiTestCase):
    """GET /users/{id}."""

    def test_returns_user_without_password(self) -> None:
        created = self.client.post(f"{API}/auth/signup", json=signup_body()).json()
        user_id = created["data"]["user"]["id"]
        resp = self.client.get(f"{API}/users/{user_id}")
        self.assertEqual(resp.status_code, 200)
        user = resp.json()["data"]["user"]
        self.assertEqual(user["id"], user_id)
        self.assertNotIn("password_hash", user)

    def test_unknown_id_is_404(self) -> None:
        resp = self.client.get(f"{API}/users/{uuid.uuid4()}")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"status": "fail", "message": "User not found"})

    def test_malformed_id_is_400_naming_field(self) -> None:
        resp = self.client.get(f"{API}/users/not-a-uuid")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Invalid id: not-a-uuid.")


class TestGetMe(ApiTestCase):
    """GET /users/me requires a valid session token."""

    def setUp(self) -> None:
        super().setUp()
        resp = self.client.post(f"{API}/auth/signup", json=signup_body())
        self.token = resp.json()["token"]

    def test_bearer_token(self) -> None:
        resp = self.client.get(
            f"{API}/users/me", headers={"Authorization": f"Bearer {self.token}"}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["user"]["email"], "a@x.com")

    def test_cookie_token(self) -> None:
        self.client.cookies.clear()
        self.client.cookies.set("jwt", self.token)
        resp = self.client.get(f"{API}/users/me")
        self.assertEqual(resp.status_code, 200)

    def test_missing_token_is_401(self) -> None:
        self.client.cookies.clear()
        resp = self.client.get(f"{API}/users/me")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["status"], "fail")

    def test_tampered_token_is_401(self) -> None:
        head, payload, signature = self.token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
        resp = self.client.get(
            f"{API}/users/me",
            headers={"Authorization": f"Bearer {head}.{payload}.{flipped}"},
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["message"], "Invalid token. Please log in again!")

    def test_token_for_deleted_user_is_401(self) -> None:
        with self.SessionTesting() as db:
            db.execute(delete(User))
            db.commit()
        resp = self.client.get(
            f"{API}/users/me", headers={"Authorization": f"Bearer {self.token}"}
        )
        self.assertEqual(resp.status_code, 401)


class TestListUsers(ApiTestCase):
    """GET /users is admin only."""

    def _token(self, email: str, password: str) -> str:
        resp = self.client.post(
            f"{API}/auth/signin", json={"email": email, "password": password}
        )
        self.assertEqual(resp.status_code, 200)
        return resp.json()["token"]

    def test_admin_lists_users(self) -> None:
        self.add_user(build_user("boss@x.com", "boss", "adminpass1", role="admin"))
        self.client.post(f"{API}/auth/signup", json=signup_body())
        token = self._token("boss@x.com", "adminpass1")
        resp = self.client.get(f"{API}/users", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["results"], 2)
        for user in body["data"]["users"]:
            self.assertNotIn("password_hash", user)

    def test_regular_user_is_403(self) -> None:
        self.client.post(f"{API}/auth/signup", json=signup_body())
        token = self._token("a@x.com", "password1")
        resp = self.client.get(f"{API}/users", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(resp.status_code, 403)

    def test_anonymous_is_401(self) -> None:
        resp = self.client.get(f"{API}/users")
        self.assertEqual(resp.status_code, 401)
