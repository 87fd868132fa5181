"""Тесты входа (POST /api/auth/login)."""

from __future__ import annotations

from pathlib import Path

from ergotype.core import config as config_module
from tests.helpers import login, make_client, signup


def _cookie_attributes(set_cookie: str) -> dict[str, str]:
    parts = [part.strip() for part in set_cookie.split(";")]
    name, _, value = parts[0].partition("=")
    attrs = {"name": name, "value": value}
    for part in parts[1:]:
        key, _, val = part.partition("=")
        attrs[key.lower()] = val
    return attrs


def test_signup_then_login_returns_same_user(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)

    created = signup(client, "user@example.com").json()["user"]
    response = login(client, "user@example.com")

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["id"] == created["id"]
    assert user["email"] == "user@example.com"
    assert "passwordHash" not in user
    assert "password_hash" not in user


def test_login_sets_session_cookie(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)
    signup(client, "cookie@example.com")

    response = login(client, "cookie@example.com")
    attrs = _cookie_attributes(response.headers["set-cookie"])

    assert attrs["name"] == "token"
    assert attrs["value"]
    assert "httponly" in attrs
    assert attrs["samesite"].lower() == "lax"
    assert attrs["max-age"] == str(7 * 24 * 60 * 60)
    assert attrs["path"] == "/"
    assert "secure" not in attrs


def test_login_cookie_is_secure_in_production(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "production")
    config_module.get_settings.cache_clear()
    client, _ = make_client(tmp_path)
    signup(client, "prod@example.com")

    response = login(client, "prod@example.com")
    attrs = _cookie_attributes(response.headers["set-cookie"])
    assert "secure" in attrs


def test_wrong_password_and_unknown_email_are_identical(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)
    signup(client, "known@example.com")

    wrong_password = login(client, "known@example.com", password="Wrong1!pass")
    unknown_email = login(client, "nobody@example.com")

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == {"error": "Invalid credentials"}
    assert unknown_email.json() == wrong_password.json()
    assert "set-cookie" not in wrong_password.headers


def test_login_validation_errors_are_not_auth_errors(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)

    response = client.post(
        "/api/auth/login",
        json={"email": "bad-email", "password": ""},
    )
    assert response.status_code == 400
    assert response.json() == {
        "error": "Validation error",
        "fields": {
            "email": "Please enter a valid email address",
            "password": "Password is required",
        },
    }


def test_login_does_not_apply_signup_password_policy(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)

    response = login(client, "weak@example.com", password="weak")
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_repeated_logins_issue_valid_tokens(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)
    signup(client, "multi@example.com")

    for _ in range(3):
        assert login(client, "multi@example.com").status_code == 200
        assert client.get("/api/auth/me").status_code == 200


def test_login_rejects_password_with_lone_surrogate(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)
    signup(client, "surrogate@example.com")

    response = client.post(
        "/api/auth/login",
        content=b'{"email": "surrogate@example.com", "password": "Password1!\\ud800"}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {
        "error": "Validation error",
        "fields": {"password": "Password contains invalid characters"},
    }
