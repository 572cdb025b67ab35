"""Session handling, sign-in/up/out and page guards."""

from agrox.models.models import User, UserCompliance, UserVerification
from conftest import bearer, make_token


class TestLogin:
    def test_login_bootstraps_rows_and_sets_cookie(self, client, db_session, auth_client):
        user_id = auth_client.add("new@example.com", "pw123456")
        res = client.post("/auth/login", json={"email": "new@example.com", "password": "pw123456"})
        assert res.status_code == 200
        body = res.json()
        assert body["user_id"] == str(user_id)
        assert "access_token" in res.cookies

        assert db_session.query(User).filter(User.id == user_id).count() == 1
        assert db_session.query(UserCompliance).filter(UserCompliance.user_id == user_id).count() == 1
        assert db_session.query(UserVerification).filter(UserVerification.user_id == user_id).count() == 1

    def test_login_twice_keeps_single_rows(self, client, db_session, auth_client):
        user_id = auth_client.add("twice@example.com", "pw123456")
        for _ in range(2):
            assert client.post("/auth/login", json={"email": "twice@example.com", "password": "pw123456"}).status_code == 200
        assert db_session.query(User).filter(User.id == user_id).count() == 1
        assert db_session.query(UserCompliance).filter(UserCompliance.user_id == user_id).count() == 1

    def test_bad_password_is_401(self, client, auth_client):
        auth_client.add("x@example.com", "right-one")
        res = client.post("/auth/login", json={"email": "x@example.com", "password": "wrong"})
        assert res.status_code == 401
        assert res.json()["code"] == "invalid_login"

    def test_signup_password_mismatch(self, client):
        res = client.post(
            "/auth/signup",
            json={"email": "a@example.com", "password": "one", "confirm_password": "two"},
        )
        assert res.status_code == 400
        assert res.json()["code"] == "passwords_dont_match"

    def test_signup_ok(self, client, auth_client):
        res = client.post(
            "/auth/signup",
            json={"email": "b@example.com", "password": "pw", "confirm_password": "pw", "first_name": "B"},
        )
        assert res.status_code == 200
        assert "b@example.com" in auth_client.accounts

    def test_logout_clears_cookie(self, client, operator, auth_client):
        headers = bearer(operator)
        res = client.post("/auth/logout", headers=headers)
        assert res.status_code == 200
        assert len(auth_client.signed_out) == 1


class TestTokens:
    def test_me_requires_session(self, client):
        assert client.get("/auth/me").status_code == 401

    def test_expired_token_rejected(self, client, operator):
        token = make_token(operator.id, operator.email, expires_in=-60)
        res = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 401

    def test_me_operator_tiles(self, client, operator):
        res = client.get("/auth/me", headers=bearer(operator))
        assert res.status_code == 200
        body = res.json()
        assert body["name"] == "Ana Silva"
        assert body["is_admin"] is False
        keys = [t["key"] for t in body["tiles"]]
        assert keys[0] == "activity"
        assert "approvals" not in keys and "admin-activities" not in keys

    def test_me_admin_tiles_first(self, client, admin):
        keys = [t["key"] for t in client.get("/auth/me", headers=bearer(admin)).json()["tiles"]]
        assert keys[:2] == ["admin-activities", "approvals"]

    def test_me_coordinator_sees_approvals_only(self, client, coordinator):
        keys = [t["key"] for t in client.get("/auth/me", headers=bearer(coordinator)).json()["tiles"]]
        assert keys[0] == "approvals"
        assert "admin-activities" not in keys


class TestPageGuards:
    def test_anonymous_redirected_to_login(self, client):
        res = client.get("/dashboard", follow_redirects=False)
        assert res.status_code == 303
        assert res.headers["location"] == "/login"

    def test_operator_kept_out_of_admin_pages(self, client, operator):
        for path in ("/admin/activities", "/admin/machines", "/admin/approvals", "/super-admin", "/admin/roles-audit"):
            res = client.get(path, headers=bearer(operator), follow_redirects=False)
            assert res.status_code == 303, path
            assert res.headers["location"] == "/dashboard"

    def test_coordinator_reaches_approvals_not_validation(self, client, coordinator):
        assert client.get("/admin/approvals", headers=bearer(coordinator), follow_redirects=False).status_code == 200
        res = client.get("/admin/activities", headers=bearer(coordinator), follow_redirects=False)
        assert res.status_code == 303

    def test_admin_not_super_admin(self, client, admin):
        assert client.get("/admin/machines", headers=bearer(admin), follow_redirects=False).status_code == 200
        assert client.get("/super-admin", headers=bearer(admin), follow_redirects=False).status_code == 303

    def test_super_admin_pages(self, client, super_admin):
        for path in ("/super-admin", "/admin/roles-audit", "/admin/activities", "/admin/approvals"):
            assert client.get(path, headers=bearer(super_admin), follow_redirects=False).status_code == 200, path

    def test_user_without_role_can_use_dashboard(self, client, make_user):
        user = make_user(None)
        res = client.get("/dashboard", headers=bearer(user), follow_redirects=False)
        assert res.status_code == 200
        assert "/my-documents" in res.text

    def test_language_cookie(self, client):
        res = client.get("/language/en-GB", follow_redirects=False)
        assert res.status_code == 303
        assert res.cookies.get("fleet_language") == "en"

    def test_placeholder_pages(self, client, operator):
        res = client.get("/fuel", headers=bearer(operator), follow_redirects=False)
        assert res.status_code == 200
        assert "em breve" in res.text

    def test_unknown_subject_rejected(self, client):
        token = make_token("not-a-uuid", "x@example.com")
        assert client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401
