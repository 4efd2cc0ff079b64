from chon.db import models


def _version(db_session, **overrides):
    fields = {
        "platform": "android",
        "version": "1.2.0",
        "build_number": 12,
        "app_store_url": "https://play.google.com/store/apps/details?id=net.chonapp",
        "release_notes": "Bug fixes",
        "is_force_update": False,
        "is_active": True,
    }
    fields.update(overrides)
    row = models.AppVersion(**fields)
    db_session.add(row)
    db_session.commit()
    return row


CHECK = {"platform": "android", "current_version": "1.1.0", "current_build_number": 11, "app_version": "1.1.0"}


def test_check_without_versions(client):
    response = client.post("/api/app-updates/check", json=CHECK)
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "update_available": False,
        "message": "No updates available",
        "data": None,
    }


def test_check_up_to_date(client, db_session):
    _version(db_session, build_number=11)
    body = client.post("/api/app-updates/check", json=CHECK).json()
    assert body["update_available"] is False
    assert body["message"] == "App is up to date"


def test_check_update_available_ignores_inactive(client, db_session):
    _version(db_session, version="1.2.0", build_number=12)
    _version(db_session, version="1.3.0", build_number=13, is_active=False)
    body = client.post("/api/app-updates/check", json=CHECK).json()
    assert body["update_available"] is True
    assert body["message"] == "Update available"
    assert body["data"]["latest_version"] == "1.2.0"
    assert body["data"]["is_force_update"] is False
    assert body["data"]["update_message"] == "A new version is available with exciting new features!"


def test_check_forced_update(client, db_session):
    _version(db_session, is_force_update=True)
    data = client.post("/api/app-updates/check", json=CHECK).json()["data"]
    assert data["is_force_update"] is True
    assert data["update_message"] == "This update is required to continue using the app."


def test_check_validation_is_400(client):
    response = client.post("/api/app-updates/check", json={"platform": "windows"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert "platform" in body["errors"]
    assert "current_build_number" in body["errors"]


def test_admin_routes_require_token(client, editor_headers):
    assert client.get("/api/app-updates").status_code == 401
    assert client.get("/api/app-updates", headers={"Authorization": "Bearer chon_pat_nope_nope"}).status_code == 401
    response = client.get("/api/app-updates", headers=editor_headers)
    assert response.status_code == 403
    assert response.json() == {"success": False, "message": "Access denied - Admin privileges required"}


def test_admin_crud_flow(client, admin_headers):
    payload = {"platform": "ios", "version": "2.0.0", "build_number": 20, "app_store_url": "https://apps.apple.com/app/id1"}
    created = client.post("/api/app-updates", json=payload, headers=admin_headers)
    assert created.status_code == 201
    version_id = created.json()["data"]["id"]

    duplicate = client.post("/api/app-updates", json=payload, headers=admin_headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["message"] == "Version already exists for this platform"

    updated = client.put(
        f"/api/app-updates/{version_id}",
        json={"release_notes": "New look", "is_force_update": True},
        headers=admin_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["release_notes"] == "New look"
    assert updated.json()["data"]["version"] == "2.0.0"

    stats = client.get("/api/app-updates/statistics", headers=admin_headers).json()["data"]
    assert stats["ios_versions"] == 1
    assert stats["force_updates"] == 1
    assert stats["latest_ios"]["id"] == version_id
    assert stats["latest_android"] is None

    assert client.delete(f"/api/app-updates/{version_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/app-updates/{version_id}", headers=admin_headers).status_code == 404


def test_update_to_existing_version_conflicts(client, db_session, admin_headers):
    _version(db_session, version="1.0.0", build_number=1)
    other = _version(db_session, version="1.1.0", build_number=2)
    response = client.put(f"/api/app-updates/{other.id}", json={"version": "1.0.0"}, headers=admin_headers)
    assert response.status_code == 409


def test_create_rejects_bad_url_with_400(client, admin_headers):
    response = client.post(
        "/api/app-updates",
        json={"platform": "android", "version": "3.0", "build_number": 30, "app_store_url": "not a url"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert "app_store_url" in response.json()["errors"]
