from dndspace.core.security import create_access_token, create_refresh_token


async def test_register_login_refresh_and_me(client):
    registered = await client.post(
        "/auth/register",
        json={"email": "gm@example.com", "username": "gamemaster", "password": "dragons-8"},
    )
    assert registered.status_code == 201
    assert registered.json()["username"] == "gamemaster"

    duplicate = await client.post(
        "/auth/register",
        json={"email": "gm@example.com", "username": "other", "password": "dragons-8"},
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "이미 등록된 이메일입니다."

    wrong = await client.post("/auth/login", json={"email": "gm@example.com", "password": "wrong-pass"})
    assert wrong.status_code == 401

    tokens = (await client.post("/auth/login", json={"email": "gm@example.com", "password": "dragons-8"})).json()
    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "gm@example.com"

    refreshed = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["user_id"] == tokens["user_id"]


async def test_short_password_is_rejected(client):
    response = await client.post(
        "/auth/register", json={"email": "a@example.com", "username": "abc", "password": "short"}
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "password"


async def test_me_requires_valid_access_token(client, make_user):
    user, _ = await make_user("gm")

    assert (await client.get("/auth/me")).status_code == 401
    assert (await client.get("/auth/me", headers={"Authorization": "Bearer nonsense"})).status_code == 401

    refresh = create_refresh_token({"sub": str(user.id)})
    assert (await client.get("/auth/me", headers={"Authorization": f"Bearer {refresh}"})).status_code == 401

    access = create_access_token({"sub": str(user.id)})
    assert (await client.get("/auth/me", headers={"Authorization": f"Bearer {access}"})).status_code == 200


async def test_refresh_rejects_access_token(client, make_user):
    user, _ = await make_user("gm")
    access = create_access_token({"sub": str(user.id)})

    response = await client.post("/auth/refresh", json={"refresh_token": access})

    assert response.status_code == 401
