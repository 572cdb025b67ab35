"""Submitting documents for approval and the coordinator decision."""

from agrox.models.models import UserVerification
from conftest import bearer


def submit(client, user):
    client.get("/documents/me", headers=bearer(user))
    return client.post("/documents/submit", headers=bearer(user))


def test_submit_sets_pending(client, operator):
    res = submit(client, operator)
    assert res.status_code == 200
    assert res.json()["status"] == "PENDING"
    assert res.json()["submitted_at"] is not None


def test_operator_cannot_list(client, operator):
    assert client.get("/approvals", headers=bearer(operator)).status_code == 403


def test_coordinator_lists_pending(client, operator, coordinator):
    submit(client, operator)
    rows = client.get("/approvals", headers=bearer(coordinator)).json()
    assert [r["email"] for r in rows] == ["operator@example.com"]
    assert rows[0]["name"] == "Ana Silva"


def test_detail_is_masked(client, operator, coordinator):
    client.post("/functions/v1/compliance-upsert", headers=bearer(operator), json={"nif": "123456789"})
    submit(client, operator)
    detail = client.get(f"/approvals/{operator.id}", headers=bearer(coordinator)).json()
    assert detail["compliance"]["nif_last4"] == "6789"
    assert "nif_enc" not in detail["compliance"]
    assert detail["verification"]["status"] == "PENDING"


def test_reject_requires_notes(client, operator, coordinator):
    submit(client, operator)
    res = client.post(f"/approvals/{operator.id}/decision", headers=bearer(coordinator), json={"status": "REJECTED", "notes": "  "})
    assert res.status_code == 400
    assert res.json()["code"] == "rejection_notes_required"


def test_approve_records_reviewer(client, db_session, operator, coordinator):
    submit(client, operator)
    res = client.post(f"/approvals/{operator.id}/decision", headers=bearer(coordinator), json={"status": "APPROVED"})
    assert res.status_code == 200
    row = db_session.query(UserVerification).filter(UserVerification.user_id == operator.id).one()
    db_session.refresh(row)
    assert row.status == "APPROVED"
    assert row.reviewed_by == coordinator.id
    assert client.get("/approvals", headers=bearer(coordinator)).json() == []


def test_resubmit_clears_previous_review(client, operator, coordinator):
    submit(client, operator)
    client.post(f"/approvals/{operator.id}/decision", headers=bearer(coordinator), json={"status": "REJECTED", "notes": "ilegível"})
    res = client.post("/documents/submit", headers=bearer(operator))
    assert res.json()["status"] == "PENDING"
    assert res.json()["review_notes"] is None


def test_coordinator_opens_user_document(client, operator, coordinator):
    client.post(
        "/documents/NIF_PROOF",
        headers=bearer(operator),
        files={"file": ("nif.pdf", b"%PDF-1.4", "application/pdf")},
    )
    res = client.get(f"/approvals/{operator.id}/documents/NIF_PROOF/url", headers=bearer(coordinator))
    assert res.status_code == 200
    assert "sig=" in res.json()["url"]
