import jwt

from chon.db import models

URL = "/api/v1/player/fcm-token"


def _jwt(claims) -> str:
    return jwt.encode(claims, "companion-api-secret", algorithm="HS256")


def _token_of(db_session, player_id):
    db_session.expire_all()
    return db_session.get(models.Player, player_id).fcm_token


def test_update_by_player_id(client, db_session, player_factory):
    player = player_factory()
    response = client.post(URL, json={"fcm_token": "tok-1", "device_type": "android", "player_id": player.id})
    assert response.status_code == 200
    assert response.json()["data"] == {"player_id": player.id, "fcm_token": "tok-1", "device_type": "android"}
    assert _token_of(db_session, player.id) == "tok-1"


def test_update_by_whatsapp_number(client, db_session, player_factory):
    player = player_factory(whatsapp_number="+9647712345678")
    response = client.post(URL, json={"fcm_token": "tok-2", "whatsapp_number": "+9647712345678"})
    assert response.status_code == 200
    assert _token_of(db_session, player.id) == "tok-2"


def test_update_by_bearer_jwt(client, db_session, player_factory):
    player = player_factory()
    headers = {"Authorization": f"Bearer {_jwt({'player_id': player.id})}"}
    response = client.post(URL, json={"fcm_token": "tok-3", "device_type": "ios"}, headers=headers)
    assert response.status_code == 200
    assert _token_of(db_session, player.id) == "tok-3"


def test_missing_identifier_is_422(client):
    response = client.post(URL, json={"fcm_token": "tok"})
    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Validation failed"
    assert "player_id" in body["errors"]


def test_unknown_player_id_is_422(client):
    response = client.post(URL, json={"fcm_token": "tok", "player_id": 404})
    assert response.status_code == 422
    assert response.json()["errors"] == {"player_id": ["The selected player id is invalid."]}


def test_unknown_whatsapp_or_jwt_is_404(client):
    response = client.post(URL, json={"fcm_token": "tok", "whatsapp_number": "+100"})
    assert response.status_code == 404
    assert response.json()["message"].startswith("Player not found")

    headers = {"Authorization": f"Bearer {_jwt({'sub': 'nobody'})}"}
    assert client.post(URL, json={"fcm_token": "tok"}, headers=headers).status_code == 404


def test_invalid_device_type(client, player_factory):
    player = player_factory()
    response = client.post(URL, json={"fcm_token": "tok", "device_type": "desktop", "player_id": player.id})
    assert response.status_code == 422
    assert "device_type" in response.json()["errors"]
