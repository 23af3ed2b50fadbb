"""Tests for /api/cv routes using FastAPI TestClient."""

from unittest.mock import patch

from cvstore.cv.models import CVRecord
from cvstore.cv.service import CVStorageError


class TestReadCV:
    def test_creates_default_on_first_read(self, client, test_user):
        resp = client.get("/api/cv")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        data = body["data"]
        assert data["user"] == str(test_user.id)
        assert data["personalDetails"] == {"fullName": "", "phone": "", "email": "", "address": ""}
        assert data["about"] == {"profile": ""}
        assert data["education"] == [{"institution": "", "qualification": "", "time": ""}]
        assert data["workExperience"] == [{"company": "", "position": "", "time": ""}]
        assert data["projects"] == [{"name": "", "description": "", "languages": ""}]
        assert data["skills"] == []
        assert data["interests"] == []
        assert data["createdAt"]
        assert data["updatedAt"]

    def test_second_read_returns_same_record(self, client, db_session):
        first = client.get("/api/cv").json()["data"]
        second = client.get("/api/cv").json()["data"]
        assert first == second
        assert db_session.query(CVRecord).count() == 1

    def test_storage_fault_returns_500(self, client):
        with patch(
            "cvstore.cv.routes.get_or_create_cv",
            side_effect=CVStorageError("Server error while fetching CV data", "connection refused"),
        ):
            resp = client.get("/api/cv")
        assert resp.status_code == 500
        body = resp.json()
        assert body == {"success": False, "message": "Server error while fetching CV data"}


class TestSaveCV:
    def test_saves_and_returns_trimmed_record(self, client):
        resp = client.post(
            "/api/cv",
            json={
                "personalDetails": {"fullName": "  Jane Doe ", "email": " jane@example.com "},
                "about": {"profile": " Engineer "},
                "workExperience": [{"company": " ACME ", "position": "Dev", "time": "2020"}],
                "skills": [" python "],
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "CV saved successfully"
        data = body["data"]
        assert data["personalDetails"]["fullName"] == "Jane Doe"
        assert data["personalDetails"]["email"] == "jane@example.com"
        assert data["about"]["profile"] == "Engineer"
        assert data["workExperience"] == [{"company": "ACME", "position": "Dev", "time": "2020"}]
        assert data["skills"] == ["python"]
        assert len(data["education"]) == 1

    def test_numbers_saved_as_text(self, client):
        resp = client.post("/api/cv", json={"education": [{"institution": "MIT", "time": 2020}], "skills": [3]})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["education"] == [{"institution": "MIT", "qualification": "", "time": "2020"}]
        assert data["skills"] == ["3"]

    def test_empty_arrays_keep_placeholder_rows(self, client):
        resp = client.post("/api/cv", json={"education": [], "workExperience": [], "projects": []})
        data = resp.json()["data"]
        assert len(data["education"]) == 1
        assert len(data["workExperience"]) == 1
        assert len(data["projects"]) == 1

    def test_empty_body_creates_default(self, client):
        resp = client.post("/api/cv")
        assert resp.status_code == 200
        assert resp.json()["data"]["skills"] == []

    def test_validation_errors_listed_and_nothing_stored(self, client, db_session):
        resp = client.post(
            "/api/cv",
            json={
                "personalDetails": {"email": "not-an-email", "fullName": "a" * 101},
                "education": "MIT",
            },
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        fields = {e["field"] for e in body["errors"]}
        assert fields == {"personalDetails.email", "personalDetails.fullName", "education"}
        assert db_session.query(CVRecord).count() == 0

    def test_full_name_boundary(self, client):
        assert client.post("/api/cv", json={"personalDetails": {"fullName": "a" * 100}}).status_code == 200
        assert client.post("/api/cv", json={"personalDetails": {"fullName": "a" * 101}}).status_code == 400

    def test_non_object_body_rejected(self, client):
        resp = client.post("/api/cv", json=["skills"])
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_later_write_wins(self, client):
        client.post("/api/cv", json={"personalDetails": {"fullName": "First", "phone": "1"}, "skills": ["a"]})
        data = client.post("/api/cv", json={"personalDetails": {"fullName": "Second"}, "skills": ["b"]}).json()["data"]
        assert data["personalDetails"] == {"fullName": "Second", "phone": "", "email": "", "address": ""}
        assert data["skills"] == ["b"]

    def test_save_fault_returns_400_with_detail(self, client):
        with patch(
            "cvstore.cv.routes.upsert_cv",
            side_effect=CVStorageError("Error saving CV data", "deadlock detected", status_code=400),
        ):
            resp = client.post("/api/cv", json={"skills": ["python"]})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Error saving CV data", "error": "deadlock detected"}

    def test_malformed_rows_return_create_error(self, client):
        resp = client.post("/api/cv", json={"projects": ["just a string"]})
        assert resp.status_code == 400
        body = resp.json()
        assert body["message"] == "Error creating CV data"
        assert body["error"]

    def test_unexpected_fault_returns_500(self, client):
        with patch("cvstore.cv.routes.upsert_cv", side_effect=RuntimeError("boom")):
            resp = client.post("/api/cv", json={"skills": ["python"]})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Server error while saving CV data"}


class TestDeleteCV:
    def test_not_found(self, client):
        resp = client.delete("/api/cv")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "CV not found"}

    def test_delete_then_read_gives_fresh_default(self, client):
        old = client.post("/api/cv", json={"skills": ["python"]}).json()["data"]

        resp = client.delete("/api/cv")
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "CV deleted successfully"}

        fresh = client.get("/api/cv").json()["data"]
        assert fresh["id"] != old["id"]
        assert fresh["skills"] == []

    def test_storage_fault_returns_500(self, client):
        with patch(
            "cvstore.cv.routes.delete_cv",
            side_effect=CVStorageError("Server error while deleting CV data", "timeout"),
        ):
            resp = client.delete("/api/cv")
        assert resp.status_code == 500
        assert resp.json()["message"] == "Server error while deleting CV data"


class TestRequiresAuth:
    def test_read_requires_login(self, anon_client):
        resp = anon_client.get("/api/cv")
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Not authorized, please log in"}

    def test_write_requires_login(self, anon_client, db_session):
        resp = anon_client.post("/api/cv", json={"skills": ["python"]})
        assert resp.status_code == 401
        assert db_session.query(CVRecord).count() == 0

    def test_delete_requires_login(self, anon_client):
        assert anon_client.delete("/api/cv").status_code == 401
