import pytest
from django.contrib.auth.models import User

from auth_app.models import UserProfile

pytestmark = pytest.mark.django_db


def register(client, **overrides):
    payload = {
        "username": "alice",
        "email": "alice@example.com",
        "password": "secret123",
        "confirmed_password": "secret123",
        "role": "teacher",
        "display_name": "Alice",
        **overrides,
    }
    return client.post("/api/register/", payload, format="json")


def login(client, username="alice", password="secret123"):
    return client.post("/api/login/", {"username": username, "password": password}, format="json")


def test_registration_creates_user_and_profile(api_client):
    res = register(api_client)

    assert res.status_code == 201
    assert res.json() == {"detail": "User created successfully!"}
    profile = UserProfile.objects.get(user__username="alice")
    assert profile.role == UserProfile.Role.TEACHER
    assert profile.display_name == "Alice"


def test_registration_defaults_to_student(api_client):
    payload = {"username": "alice", "email": "alice@example.com", "password": "secret123", "confirmed_password": "secret123"}
    api_client.post("/api/register/", payload, format="json")

    profile = UserProfile.objects.get(user__username="alice")
    assert profile.role == UserProfile.Role.STUDENT
    assert profile.display_name == "alice"


def test_duplicate_email_is_rejected(api_client, student):
    res = register(api_client, email="STUDENT@example.com")

    assert res.status_code == 400
    assert res.json()["code"] == "auth/email-already-in-use"
    assert res.json()["message"] == "An account with this email already exists."


def test_weak_password_is_rejected(api_client):
    res = register(api_client, password="abc", confirmed_password="abc")

    assert res.status_code == 400
    assert res.json()["code"] == "auth/weak-password"
    assert not User.objects.filter(username="alice").exists()


def test_password_mismatch_is_rejected(api_client):
    res = register(api_client, confirmed_password="different")

    assert res.status_code == 400
    assert res.json()["code"] == "db/invalid-argument"
    assert "confirmed_password" in res.json()["detail"]


def test_login_sets_cookies_and_returns_profile(api_client):
    register(api_client)

    res = login(api_client)

    assert res.status_code == 200
    assert res.json()["user"]["role"] == "teacher"
    assert res.json()["user"]["display_name"] == "Alice"
    assert res.cookies["access_token"]["httponly"]
    assert res.cookies["refresh_token"]["path"] == "/api/token/refresh/"
    assert UserProfile.objects.get(user__username="alice").last_login_at is not None


def test_login_error_codes(api_client):
    register(api_client)

    wrong = login(api_client, password="nope12345")
    unknown = login(api_client, username="bob")

    assert wrong.status_code == 401
    assert wrong.json()["code"] == "auth/wrong-password"
    assert unknown.json()["code"] == "auth/user-not-found"


def test_cookie_authenticates_following_requests(api_client):
    register(api_client)
    login(api_client)

    res = api_client.get("/api/profile/")

    assert res.status_code == 200
    assert res.json()["username"] == "alice"


def test_token_refresh_uses_cookie(api_client):
    register(api_client)
    login(api_client)

    res = api_client.post("/api/token/refresh/")

    assert res.status_code == 200
    assert res.json()["access"]


def test_refresh_without_cookie_fails(api_client):
    res = api_client.post("/api/token/refresh/")

    assert res.status_code == 401
    assert res.json()["code"] == "auth/invalid-token"


def test_logout_blacklists_refresh_token(api_client):
    register(api_client)
    refresh = login(api_client).cookies["refresh_token"].value

    res = api_client.post("/api/logout/")
    assert res.status_code == 200

    api_client.cookies["refresh_token"] = refresh
    res = api_client.post("/api/token/refresh/")
    assert res.status_code == 401
    assert res.json()["code"] == "auth/invalid-token"


def test_profile_update_only_changes_display_name(client_for, student):
    res = client_for(student).patch("/api/profile/", {"display_name": "Stu", "role": "teacher"}, format="json")

    assert res.status_code == 200
    assert res.json()["display_name"] == "Stu"
    assert res.json()["role"] == "student"
    assert UserProfile.objects.get(user=student).role == UserProfile.Role.STUDENT


def test_profile_is_created_on_first_access(client_for, db):
    user = User.objects.create_user(username="legacy", password="secret123")

    res = client_for(user).get("/api/profile/")

    assert res.status_code == 200
    assert res.json()["role"] == "student"
