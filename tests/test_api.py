"""HTTP tests through FastAPI's TestClient with the database and settings overridden."""

import unittest
from datetime import timedelta

from fastapi.testclient import TestClient

from rolegate.api.v1.deps import (
    HEADER_MAINTENANCE,
    HEADER_NEW_REFRESH_TOKEN,
    HEADER_NEW_TOKEN,
    HEADER_REFRESH_TOKEN,
    HEADER_RESET_TOKEN,
    HEADER_USER_PERMISSIONS,
)
from rolegate.core.config import get_settings
from rolegate.core.database import get_db
from rolegate.core.messages import AUTH, GENERAL
from rolegate.core.security import TokenCodec, token_user_for
from rolegate.main import app
from rolegate.models import User
from rolegate.models.role import RoleId
from rolegate.services.sessions import SessionStore, TokenPair
from sqlite_support import DEFAULT_PASSWORD, add_user, make_session_factory, make_settings

PREFIX = "/api/v1"


class ApiTestCase(unittest.TestCase):
    maintenance = False

    def setUp(self) -> None:
        self.factory = make_session_factory()
        self.settings = make_settings(MAINTENANCE_MODE=self.maintenance)

        def override_db():
            db = self.factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_db
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.client = TestClient(app)
        self.db = self.factory()

    def tearDown(self) -> None:
        self.db.close()
        app.dependency_overrides.clear()

    def _add(self, email: str, role_id: int, **kwargs: object) -> User:
        return add_user(self.db, email, role_id, **kwargs)

    def _login(self, email: str, password: str = DEFAULT_PASSWORD) -> dict:
        response = self.client.post(
            f"{PREFIX}/session/login", json={"email": email, "password": password}
        )
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["body"]

    @staticmethod
    def _bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


class TestRegistrationAndLogin(ApiTestCase):
    def test_first_signin_is_super_admin_then_guest(self) -> None:
        payload = {
            "email": "root@example.com",
            "password": "Secret123",
            "first_name": "Root",
            "last_name": "User",
        }
        first = self.client.post(f"{PREFIX}/signin", json=payload)
        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.json()["body"]["role_name"], "SuperAdmin")

        payload.update(email="me@example.com", role_id=1)
        second = self.client.post(f"{PREFIX}/signin", json=payload)
        self.assertEqual(second.status_code, 201)
        self.assertEqual(second.json()["body"]["role_name"], "Guest")

        duplicate = self.client.post(f"{PREFIX}/signin", json=payload)
        self.assertEqual(duplicate.status_code, 409)
        self.assertFalse(duplicate.json()["success"])

    def test_validation_error_is_400_with_first_message(self) -> None:
        response = self.client.post(
            f"{PREFIX}/signin",
            json={
                "email": "root@example.com",
                "password": "weak",
                "first_name": "Root",
                "last_name": "User",
            },
        )
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertTrue(body["message"].startswith("password: Password must"))

    def test_login_failure_is_401(self) -> None:
        self._add("ada@example.com", RoleId.GUEST)
        response = self.client.post(
            f"{PREFIX}/session/login", json={"email": "ada@example.com", "password": "Wrong1234"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"success": False, "message": AUTH.INVALID_CREDENTIALS})

    def test_unknown_route_uses_envelope(self) -> None:
        response = self.client.get(f"{PREFIX}/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"success": False, "message": GENERAL.NOT_FOUND})

    def test_openapi_documents_envelopes(self) -> None:
        schema = self.client.get("/openapi.json").json()
        components = schema["components"]["schemas"]
        for name in ("Envelope", "LoginResponse", "TokenBody"):
            self.assertIn(name, components)
        login = schema["paths"][f"{PREFIX}/session/login"]["post"]["responses"]
        self.assertIn("LoginResponse", str(login["200"]))
        self.assertIn("Envelope", str(login["401"]))
        search = schema["paths"][f"{PREFIX}/admin/search"]["post"]["responses"]
        self.assertIn("Envelope", str(search["403"]))


class TestAuthenticatedRequests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.guest = self._add("guest@example.com", RoleId.GUEST, first_name="Grace")
        self.tokens = self._login("guest@example.com")

    def test_missing_token(self) -> None:
        response = self.client.get(f"{PREFIX}/guest")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], AUTH.NO_TOKEN)

    def test_guest_profile(self) -> None:
        response = self.client.get(f"{PREFIX}/guest", headers=self._bearer(self.tokens["token"]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json()["body"],
            {"first_name": "Grace", "last_name": "User", "email": "guest@example.com"},
        )
        self.assertNotIn(HEADER_NEW_TOKEN, response.headers)

    def test_guest_cannot_set_own_role(self) -> None:
        response = self.client.patch(
            f"{PREFIX}/guest", json={"role_id": 1}, headers=self._bearer(self.tokens["token"])
        )
        self.assertEqual(response.status_code, 403)
        self.db.expire_all()
        self.assertEqual(self.db.get(User, self.guest.id).role_id, RoleId.GUEST)

    def test_guest_is_kept_out_of_admin_routes(self) -> None:
        response = self.client.post(
            f"{PREFIX}/admin/search", headers=self._bearer(self.tokens["token"])
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], AUTH.FORBIDDEN)

    def test_logout_ends_session(self) -> None:
        headers = self._bearer(self.tokens["token"])
        self.assertEqual(self.client.post(f"{PREFIX}/session/logout", headers=headers).status_code, 200)
        response = self.client.get(f"{PREFIX}/guest", headers=headers)
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], AUTH.SESSION_NOT_FOUND)

    def test_blocked_user_is_rejected(self) -> None:
        self.guest.is_blocked = True
        self.db.commit()
        response = self.client.get(f"{PREFIX}/guest", headers=self._bearer(self.tokens["token"]))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], AUTH.BLOCKED)

    def test_change_password(self) -> None:
        response = self.client.post(
            f"{PREFIX}/password/change",
            json={"current_password": DEFAULT_PASSWORD, "new_password": "Changed123"},
            headers=self._bearer(self.tokens["token"]),
        )
        self.assertEqual(response.status_code, 200)
        self._login("guest@example.com", "Changed123")


class TestTokenRenewal(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self._add("ada@example.com", RoleId.ADMIN)
        codec = TokenCodec(self.settings)
        codec.access_ttl = timedelta(seconds=-10)
        identity = token_user_for(self.user)
        self.expired_access = codec.issue_access(identity)
        self.refresh = codec.issue_refresh(identity)
        SessionStore(self.db).replace_for_device(
            self.user.id, "ip", "dev", TokenPair(self.expired_access, self.refresh)
        )

    def test_expired_access_is_renewed_from_refresh_header(self) -> None:
        headers = self._bearer(self.expired_access)
        headers[HEADER_REFRESH_TOKEN] = self.refresh
        response = self.client.get(f"{PREFIX}/admin", headers=headers)
        self.assertEqual(response.status_code, 200, response.text)
        new_access = response.headers[HEADER_NEW_TOKEN]
        self.assertIn(HEADER_NEW_REFRESH_TOKEN, response.headers)
        self.assertEqual(response.headers[HEADER_USER_PERMISSIONS], str(int(RoleId.ADMIN)))

        again = self.client.get(f"{PREFIX}/admin", headers=self._bearer(new_access))
        self.assertEqual(again.status_code, 200)
        self.assertNotIn(HEADER_NEW_TOKEN, again.headers)

        replay = self.client.get(f"{PREFIX}/admin", headers=headers)
        self.assertEqual(replay.status_code, 401)

    def test_expired_access_without_refresh(self) -> None:
        response = self.client.get(f"{PREFIX}/admin", headers=self._bearer(self.expired_access))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], AUTH.INVALID_TOKEN)


class TestAdminRoutes(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.root = self._add("root@example.com", RoleId.SUPER_ADMIN)
        self.admin = self._add("admin@example.com", RoleId.ADMIN)
        self.other_admin = self._add("admin2@example.com", RoleId.ADMIN)
        self.guest = self._add("guest@example.com", RoleId.GUEST)
        self.headers = self._bearer(self._login("admin@example.com")["token"])

    def test_search_hides_super_admin(self) -> None:
        response = self.client.post(
            f"{PREFIX}/admin/search", json={"role_id": [1, 2, 3]}, headers=self.headers
        )
        self.assertEqual(response.status_code, 200)
        emails = {u["email"] for u in response.json()["body"]["users"]}
        self.assertEqual(emails, {"admin@example.com", "admin2@example.com", "guest@example.com"})

    def test_admin_cannot_view_super_admin(self) -> None:
        response = self.client.get(f"{PREFIX}/admin/users/{self.root.id}", headers=self.headers)
        self.assertEqual(response.status_code, 403)

    def test_admin_cannot_promote_to_super_admin(self) -> None:
        response = self.client.patch(
            f"{PREFIX}/admin/users/{self.other_admin.id}", json={"role_id": 1}, headers=self.headers
        )
        self.assertEqual(response.status_code, 403)
        self.db.expire_all()
        self.assertEqual(self.db.get(User, self.other_admin.id).role_id, RoleId.ADMIN)

    def test_admin_blocks_guest(self) -> None:
        response = self.client.patch(
            f"{PREFIX}/admin/users/{self.guest.id}", json={"is_blocked": True}, headers=self.headers
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["body"]["is_blocked"])

    def test_admin_creates_guest_only(self) -> None:
        payload = {
            "email": "new@example.com",
            "password": "Secret123",
            "first_name": "New",
            "last_name": "User",
            "role_id": 2,
        }
        denied = self.client.post(f"{PREFIX}/admin/users", json=payload, headers=self.headers)
        self.assertEqual(denied.status_code, 403)
        payload["role_id"] = 3
        created = self.client.post(f"{PREFIX}/admin/users", json=payload, headers=self.headers)
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["body"]["created_by"], self.admin.id)


class TestPasswordReset(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self._add("ada@example.com", RoleId.GUEST)

    def test_reset_flow_token_is_single_use(self) -> None:
        issued = self.client.post(f"{PREFIX}/password/reset", json={"email": "ada@example.com"})
        self.assertEqual(issued.status_code, 200)
        token = issued.json()["body"]["resetToken"]

        headers = {HEADER_RESET_TOKEN: token}
        first = self.client.post(
            f"{PREFIX}/password/update", json={"new_password": "Changed123"}, headers=headers
        )
        self.assertEqual(first.status_code, 200)
        self._login("ada@example.com", "Changed123")

        second = self.client.post(
            f"{PREFIX}/password/update", json={"new_password": "Again1234"}, headers=headers
        )
        self.assertEqual(second.status_code, 401)
        self.assertEqual(second.json()["message"], AUTH.RESET_INVALID)

    def test_unknown_email(self) -> None:
        response = self.client.post(f"{PREFIX}/password/reset", json={"email": "x@example.com"})
        self.assertEqual(response.status_code, 404)

    def test_missing_reset_token(self) -> None:
        response = self.client.post(f"{PREFIX}/password/update", json={"new_password": "Changed123"})
        self.assertEqual(response.status_code, 401)


class TestMaintenanceMode(ApiTestCase):
    maintenance = True

    def test_authenticated_routes_answer_503(self) -> None:
        response = self.client.get(f"{PREFIX}/guest", headers=self._bearer("anything"))
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.headers[HEADER_MAINTENANCE], "true")
        self.assertEqual(response.json()["message"], GENERAL.MAINTENANCE)

    def test_health_reports_maintenance(self) -> None:
        response = self.client.get(f"{PREFIX}/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["maintenance"])
        self.assertEqual(body["database"], "connected")


if __name__ == "__main__":
    unittest.main()
