from modules.auth.services.auth_service import AuthService


def test_register_login_and_me(client):
    resp = client.post("/auth/register", json={"name": "Dana", "email": "dana@x.com", "password": "longpassword"})
    assert resp.status_code == 201
    assert resp.json()["enabled"] is False
    assert "passwordHash" not in resp.json()

    dup = client.post("/auth/register", json={"name": "Dana", "email": "dana@x.com", "password": "longpassword"})
    assert dup.status_code == 409

    bad = client.post("/auth/login", json={"email": "dana@x.com", "password": "wrongpassword"})
    assert bad.status_code == 401

    login = client.post("/auth/login", json={"email": "dana@x.com", "password": "longpassword"})
    assert login.status_code == 200
    token = login.json()["accessToken"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "dana@x.com"


def test_initial_enable_binds_wallet(client, session, make_user, headers_for):
    user = make_user(wallet_address=None, enabled=False)
    headers = headers_for(user)

    missing = client.post("/users/initial-enable", json={"walletAddress": "0xNEW"}, headers=headers)
    assert missing.status_code == 400

    resp = client.post("/users/initial-enable",
                       json={"walletAddress": "0xNEW", "initialTransactionHash": "0xinit"},
                       headers=headers)
    assert resp.status_code == 200
    body = resp.json()["user"]
    assert body["walletAddress"] == "0xNEW"
    assert body["initialTransactionHash"] == "0xinit"
    assert body["enabled"] is True


def test_update_profile(client, make_user, headers_for):
    user = make_user(email="me@x.com")
    make_user(email="taken@x.com")
    headers = headers_for(user)

    resp = client.put("/users", json={"name": "New Name"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["user"]["name"] == "New Name"

    conflict = client.put("/users", json={"email": "taken@x.com"}, headers=headers)
    assert conflict.status_code == 409

    changed = client.put("/users", json={"password": "anotherpassword"}, headers=headers)
    assert changed.status_code == 200
    login = client.post("/auth/login", json={"email": "me@x.com", "password": "anotherpassword"})
    assert login.status_code == 200


def test_token_survives_email_change(client, make_user, headers_for):
    user = make_user(email="before@x.com")
    headers = headers_for(user)

    resp = client.put("/users", json={"email": "renamed@x.com"}, headers=headers)
    assert resp.status_code == 200

    me = client.get("/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["id"] == user.id
    assert me.json()["email"] == "renamed@x.com"


def test_token_for_deleted_or_foreign_subject_is_rejected(client):
    for subject in ("9999", "someone@x.com"):
        token = AuthService.create_access_token(data={"sub": subject})
        resp = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
