import pytest


@pytest.fixture()
def auth_headers(client):
    client.post("/register", json={"email": "alice@example.com", "password": "s3cret-pass"})
    access = client.post(
        "/login", json={"email": "alice@example.com", "password": "s3cret-pass"}
    ).json()["access_token"]
    return {"Authorization": f"Bearer {access}"}


@pytest.fixture()
def other_headers(client):
    client.post("/register", json={"email": "bob@example.com", "password": "hunter22"})
    access = client.post(
        "/login", json={"email": "bob@example.com", "password": "hunter22"}
    ).json()["access_token"]
    return {"Authorization": f"Bearer {access}"}
