"""Operator activity flow: photos, start, close and admin validation."""

import pytest

from agrox.models.models import Activity
from conftest import bearer

JPEG = b"\xff\xd8\xff\xe0" + b"0" * 128
GPS = {"lat": 38.7223, "lng": -9.1393}


def upload_photo(client, user, prefix="start", data=JPEG, content_type="image/jpeg"):
    return client.post(
        "/activities/photos",
        headers=bearer(user),
        data={"prefix": prefix},
        files={"file": ("photo.jpg", data, content_type)},
    )


def start_payload(client, user, machine, **overrides):
    body = {
        "machine_id": str(machine.id),
        "start_odometer": 1234.5,
        "start_gps": GPS,
        "start_photo_path": upload_photo(client, user, "start").json()["path"],
        "start_odometer_photo_path": upload_photo(client, user, "start-odometer").json()["path"],
    }
    body.update(overrides)
    return body


def close_payload(**overrides):
    body = {"end_odometer": 1240.0, "end_gps": GPS, "performance_rating": 4}
    body.update(overrides)
    return body


class TestPhotos:
    def test_photo_stored_under_user_folder(self, client, operator, storage):
        res = upload_photo(client, operator)
        assert res.status_code == 201
        path = res.json()["path"]
        assert path.startswith(f"{operator.id}/")
        assert path.endswith("-start.jpg")
        assert storage.exists("activity-photos", path)

    def test_png_extension(self, client, operator):
        path = upload_photo(client, operator, content_type="image/png").json()["path"]
        assert path.endswith(".png")

    def test_non_image_rejected(self, client, operator):
        res = upload_photo(client, operator, data=b"%PDF-1.4", content_type="application/pdf")
        assert res.status_code == 400
        assert res.json()["code"] == "invalid_image_type"

    def test_empty_image_rejected(self, client, operator):
        res = upload_photo(client, operator, data=b"")
        assert res.status_code == 400
        assert res.json()["code"] == "empty_image"

    def test_oversized_image_rejected(self, client, operator, monkeypatch):
        from agrox.config import settings
        monkeypatch.setattr(settings, "max_photo_bytes", 10)
        res = upload_photo(client, operator)
        assert res.status_code == 400
        assert res.json()["code"] == "image_too_large"

    def test_svg_rejected(self, client, operator):
        svg = b"<svg xmlns='http://www.w3.org/2000/svg' onload='alert(1)'/>"
        res = upload_photo(client, operator, data=svg, content_type="image/svg+xml")
        assert res.status_code == 400
        assert res.json()["code"] == "invalid_image_type"


class TestStart:
    def test_start_creates_pending_activity(self, client, db_session, operator, machine):
        res = client.post("/activities/start", headers=bearer(operator), json=start_payload(client, operator, machine))
        assert res.status_code == 201
        body = res.json()
        assert body["status"] == "PENDING_VALIDATION"
        assert body["end_time"] is None
        assert body["start_gps"] == GPS

        open_res = client.get("/activities/open", headers=bearer(operator)).json()
        assert open_res["machine_label"] == "T-01 - John Deere Trator 6120M (AA-00-BB)"

    @pytest.mark.parametrize(
        "field,code",
        [
            ("machine_id", "machine_required"),
            ("start_odometer", "odometer_required"),
            ("start_gps", "gps_required"),
            ("start_photo_path", "photo_required"),
        ],
    )
    def test_missing_required_field(self, client, db_session, operator, machine, field, code):
        payload = start_payload(client, operator, machine, **{field: None})
        res = client.post("/activities/start", headers=bearer(operator), json=payload)
        assert res.status_code == 400
        assert res.json()["code"] == code
        assert db_session.query(Activity).count() == 0

    def test_validation_order_machine_first(self, client, operator):
        res = client.post("/activities/start", headers=bearer(operator), json={})
        assert res.json()["code"] == "machine_required"

    def test_cannot_reference_foreign_photo(self, client, operator, make_user, machine):
        other = make_user("OPERADOR")
        foreign = upload_photo(client, other).json()["path"]
        payload = start_payload(client, operator, machine, start_photo_path=foreign)
        res = client.post("/activities/start", headers=bearer(operator), json=payload)
        assert res.status_code == 403

    def test_made_up_photo_paths_rejected(self, client, db_session, operator, machine):
        payload = start_payload(
            client, operator, machine,
            start_photo_path=f"{operator.id}/made-up-start.jpg",
            start_odometer_photo_path=f"{operator.id}/made-up-odometer.jpg",
        )
        res = client.post("/activities/start", headers=bearer(operator), json=payload)
        assert res.status_code == 400
        assert res.json()["code"] == "photo_required"
        assert db_session.query(Activity).count() == 0

    def test_second_open_activity_rejected(self, client, operator, machine):
        assert client.post("/activities/start", headers=bearer(operator), json=start_payload(client, operator, machine)).status_code == 201
        res = client.post("/activities/start", headers=bearer(operator), json=start_payload(client, operator, machine))
        assert res.status_code == 409
        assert res.json()["code"] == "activity_already_open"

    def test_location_must_belong_to_client(self, client, operator, machine, master_data, db_session):
        from agrox.models.models import Client
        other = Client(name="Outro")
        db_session.add(other)
        db_session.commit()
        payload = start_payload(
            client, operator, machine,
            client_id=str(other.id),
            location_id=str(master_data["location"].id),
        )
        assert client.post("/activities/start", headers=bearer(operator), json=payload).status_code == 404

    def test_unknown_location_rejected_without_client(self, client, db_session, operator, machine):
        payload = start_payload(client, operator, machine, location_id="00000000-0000-0000-0000-000000000001")
        res = client.post("/activities/start", headers=bearer(operator), json=payload)
        assert res.status_code == 404
        assert db_session.query(Activity).count() == 0

    def test_location_without_client_accepted(self, client, operator, machine, master_data):
        payload = start_payload(client, operator, machine, location_id=str(master_data["location"].id))
        res = client.post("/activities/start", headers=bearer(operator), json=payload)
        assert res.status_code == 201

    def test_localized_error_message(self, client, operator):
        client.cookies.set("fleet_language", "en")
        res = client.post("/activities/start", headers=bearer(operator), json={})
        assert res.json()["detail"] == "Select a machine."


class TestClose:
    def _start(self, client, operator, machine):
        res = client.post("/activities/start", headers=bearer(operator), json=start_payload(client, operator, machine))
        assert res.status_code == 201
        return res.json()["id"]

    def test_close_keeps_pending_status(self, client, operator, machine):
        activity_id = self._start(client, operator, machine)
        res = client.post(
            "/activities/close",
            headers=bearer(operator),
            json=close_payload(area_value=2.5, area_unit="  ha ", notes="  feito  "),
        )
        assert res.status_code == 200
        body = res.json()
        assert body["id"] == activity_id
        assert body["status"] == "PENDING_VALIDATION"
        assert body["end_time"] is not None
        assert body["area_unit"] == "ha"
        assert body["notes"] == "feito"
        assert client.get("/activities/open", headers=bearer(operator)).json() is None

    def test_close_without_open_activity(self, client, operator):
        res = client.post("/activities/close", headers=bearer(operator), json=close_payload())
        assert res.status_code == 404
        assert res.json()["code"] == "no_open_activity"

    @pytest.mark.parametrize(
        "overrides,code",
        [
            ({"end_gps": None}, "gps_required"),
            ({"performance_rating": None}, "rating_required"),
            ({"performance_rating": 6}, "invalid_rating"),
            ({"end_odometer": None}, "odometer_required"),
        ],
    )
    def test_close_validation(self, client, operator, machine, overrides, code):
        self._start(client, operator, machine)
        res = client.post("/activities/close", headers=bearer(operator), json=close_payload(**overrides))
        assert res.status_code == 400
        assert res.json()["code"] == code

    def test_made_up_end_photo_rejected(self, client, operator, machine):
        self._start(client, operator, machine)
        res = client.post(
            "/activities/close",
            headers=bearer(operator),
            json=close_payload(end_photo_path=f"{operator.id}/made-up-end.jpg"),
        )
        assert res.status_code == 400
        assert res.json()["code"] == "photo_required"
        assert client.get("/activities/open", headers=bearer(operator)).json() is not None

    def test_blank_area_unit_stored_as_null(self, client, operator, machine):
        self._start(client, operator, machine)
        res = client.post("/activities/close", headers=bearer(operator), json=close_payload(area_unit="   "))
        assert res.json()["area_unit"] is None

    def test_close_page_redirects_without_open_activity(self, client, operator):
        res = client.get("/activity/close", headers=bearer(operator), follow_redirects=False)
        assert res.status_code == 303
        assert res.headers["location"] == "/activity"

    def test_activity_page_redirects_when_open(self, client, operator, machine):
        self._start(client, operator, machine)
        res = client.get("/activity", headers=bearer(operator), follow_redirects=False)
        assert res.status_code == 303
        assert res.headers["location"] == "/activity/close"


class TestValidation:
    def _closed(self, client, operator, machine):
        client.post("/activities/start", headers=bearer(operator), json=start_payload(client, operator, machine))
        return client.post("/activities/close", headers=bearer(operator), json=close_payload()).json()["id"]

    def test_pending_list_requires_admin(self, client, operator):
        res = client.get("/validation/pending", headers=bearer(operator))
        assert res.status_code == 403
        assert res.json()["code"] == "not_authorized"

    def test_pending_list_joins_names(self, client, operator, admin, machine):
        self._closed(client, operator, machine)
        rows = client.get("/validation/pending", headers=bearer(admin)).json()
        assert len(rows) == 1
        assert rows[0]["machine_name"] == "Trator"
        assert rows[0]["operator_name"] == "Ana Silva"

    def test_approve_removes_from_pending(self, client, operator, admin, machine):
        activity_id = self._closed(client, operator, machine)
        res = client.post(f"/validation/{activity_id}/review", headers=bearer(admin), json={"status": "APPROVED"})
        assert res.status_code == 200
        assert res.json()["status"] == "APPROVED"
        assert client.get("/validation/pending", headers=bearer(admin)).json() == []

    def test_review_to_pending_not_allowed(self, client, operator, admin, machine):
        activity_id = self._closed(client, operator, machine)
        res = client.post(
            f"/validation/{activity_id}/review",
            headers=bearer(admin),
            json={"status": "PENDING_VALIDATION"},
        )
        assert res.status_code == 400

    def test_admin_gets_signed_photo_links(self, client, operator, admin, machine):
        activity_id = self._closed(client, operator, machine)
        links = client.get(f"/activities/{activity_id}/photos", headers=bearer(admin)).json()
        assert links["start_photo"] and "sig=" in links["start_photo"]
        assert links["end_photo"] is None

    def test_other_operator_cannot_see_photos(self, client, operator, make_user, machine):
        activity_id = self._closed(client, operator, machine)
        other = make_user("OPERADOR")
        assert client.get(f"/activities/{activity_id}/photos", headers=bearer(other)).status_code == 403

    def test_signed_link_downloads(self, client, operator, machine):
        activity_id = self._closed(client, operator, machine)
        url = client.get(f"/activities/{activity_id}/photos", headers=bearer(operator)).json()["start_photo"]
        res = client.get(url.replace("http://localhost:8000", ""))
        assert res.status_code == 200
        assert res.content == JPEG

    def test_signed_link_served_as_attachment(self, client, operator, machine):
        activity_id = self._closed(client, operator, machine)
        url = client.get(f"/activities/{activity_id}/photos", headers=bearer(operator)).json()["start_photo"]
        res = client.get(url.replace("http://localhost:8000", ""))
        assert res.headers["x-content-type-options"] == "nosniff"
        assert res.headers["content-disposition"].startswith("attachment;")
