"""Role assignment by email, the audit listing and super-admin batch assignment."""

from agrox.models.models import UserRole
from agrox.services.permissions import role_names
from conftest import bearer


class TestSetRole:
    def test_admin_assigns_role(self, client, db_session, admin, make_user):
        target = make_user(None, email="worker@example.com")
        res = client.post("/roles", headers=bearer(admin), json={"email": " Worker@Example.com ", "role": "COORDENADOR"})
        assert res.status_code == 200
        assert role_names(target.id, db_session) == {"COORDENADOR"}

    def test_assign_replaces_existing_role(self, client, db_session, admin, operator):
        client.post("/roles", headers=bearer(admin), json={"email": operator.email, "role": "ADMIN"})
        assert role_names(operator.id, db_session) == {"ADMIN"}
        assert db_session.query(UserRole).filter(UserRole.user_id == operator.id).count() == 1

    def test_operator_not_authorized(self, client, operator, make_user):
        make_user(None, email="t@example.com")
        res = client.post("/roles", headers=bearer(operator), json={"email": "t@example.com", "role": "ADMIN"})
        assert res.status_code == 403
        assert res.json()["code"] == "not_authorized"

    def test_invalid_email(self, client, admin):
        res = client.post("/roles/remove", headers=bearer(admin), json={"email": "not-an-email"})
        assert res.status_code == 400
        assert res.json()["code"] == "invalid_email"

    def test_unknown_user(self, client, admin):
        res = client.post("/roles", headers=bearer(admin), json={"email": "ghost@example.com", "role": "OPERADOR"})
        assert res.status_code == 404
        assert res.json()["code"] == "user_not_found"

    def test_cannot_change_self(self, client, admin):
        res = client.post("/roles", headers=bearer(admin), json={"email": admin.email, "role": "OPERADOR"})
        assert res.status_code == 400
        assert res.json()["code"] == "cannot_change_self"

    def test_admin_cannot_grant_super_admin(self, client, admin, operator):
        res = client.post("/roles", headers=bearer(admin), json={"email": operator.email, "role": "SUPER_ADMIN"})
        assert res.status_code == 403

    def test_admin_cannot_demote_super_admin(self, client, admin, super_admin):
        res = client.post("/roles/remove", headers=bearer(admin), json={"email": super_admin.email})
        assert res.status_code == 403

    def test_super_admin_grants_super_admin(self, client, db_session, super_admin, operator):
        res = client.post("/roles", headers=bearer(super_admin), json={"email": operator.email, "role": "SUPER_ADMIN"})
        assert res.status_code == 200
        assert role_names(operator.id, db_session) == {"SUPER_ADMIN"}

    def test_remove_role(self, client, db_session, admin, operator):
        assert client.post("/roles/remove", headers=bearer(admin), json={"email": operator.email}).status_code == 200
        assert role_names(operator.id, db_session) == set()


class TestAudit:
    def test_audit_shows_actor_and_target(self, client, super_admin, operator):
        client.post("/roles", headers=bearer(super_admin), json={"email": operator.email, "role": "COORDENADOR"})
        rows = client.get("/roles/audit?email=operator", headers=bearer(super_admin)).json()
        assert len(rows) == 1
        assert rows[0]["target_email"] == "operator@example.com"
        assert rows[0]["actor_email"] == "root@example.com"
        assert rows[0]["role"] == "COORDENADOR"

    def test_audit_super_admin_only(self, client, admin):
        assert client.get("/roles/audit", headers=bearer(admin)).status_code == 403


class TestSuperAdminAssign:
    URL = "/functions/v1/superadmin-assign"

    def test_wrong_method(self, client):
        res = client.get(self.URL)
        assert res.status_code == 405
        assert res.json() == {"error": "method_not_allowed"}

    def test_requires_bearer(self, client):
        assert client.post(self.URL, json={"emails": ["a@example.com"]}).json() == {"error": "unauthorized"}

    def test_requires_super_admin(self, client, admin):
        res = client.post(self.URL, headers=bearer(admin), json={"emails": ["a@example.com"]})
        assert res.status_code == 403

    def test_invalid_json(self, client, super_admin):
        headers = dict(bearer(super_admin), **{"Content-Type": "application/json"})
        res = client.post(self.URL, headers=headers, content=b"{not json")
        assert res.status_code == 400
        assert res.json() == {"error": "invalid_json"}

    def test_missing_emails(self, client, super_admin):
        res = client.post(self.URL, headers=bearer(super_admin), json={"emails": ["  ", 3]})
        assert res.status_code == 400
        assert res.json() == {"error": "missing_emails"}

    def test_not_found_lists_emails(self, client, super_admin, auth_client):
        auth_client.add("known@example.com")
        res = client.post(
            self.URL,
            headers=bearer(super_admin),
            json={"emails": ["Known@example.com", "missing@example.com"]},
        )
        assert res.status_code == 404
        body = res.json()
        assert body["notFound"] == ["missing@example.com"]
        assert "/login" in body["hint"]

    def test_assigns_and_creates_profile(self, client, db_session, super_admin, auth_client):
        new_id = auth_client.add("boss@example.com")
        res = client.post(self.URL, headers=bearer(super_admin), json={"emails": ["boss@example.com", "BOSS@example.com"]})
        assert res.status_code == 200
        body = res.json()
        assert body["ok"] == 1 and body["err"] == 0
        assert body["results"][0]["user_id"] == str(new_id)
        assert role_names(new_id, db_session) == {"SUPER_ADMIN"}

    def test_list_failure(self, client, super_admin, auth_client):
        def broken(page=1, per_page=200):
            raise ValueError("SUPABASE_SERVICE_ROLE_KEY is required")

        auth_client.admin_list_users = broken
        res = client.post(self.URL, headers=bearer(super_admin), json={"emails": ["a@example.com"]})
        assert res.status_code == 500
        assert res.json() == {"error": "list_users_failed"}
