# backend/tests/test_main.py

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from jose import jwt

from app.main import app, SensitiveDataFilter
from app.core.config import settings

client = TestClient(app)

def make_token(**claims):
    payload = {
        "sub": "admin-1",
        "email": "owner@example.com",
        "aud": "authenticated",
        "iss": f"{settings.SUPABASE_URL}/auth/v1",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        "app_metadata": {"role": "admin"},
    }
    payload.update(claims)
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm=settings.ALGORITHM)

def test_root():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to the survey API"}

def test_unknown_api_route():
    response = client.get("/api/v1/")
    assert response.status_code == 404

def test_me_requires_bearer_token():
    response = client.get("/api/v1/users/me")
    assert response.status_code in (401, 403)

def test_me_with_valid_token():
    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {make_token()}"})
    assert response.status_code == 200
    assert response.json() == {
        "id": "admin-1",
        "email": "owner@example.com",
        "role": "admin",
        "can_manage_surveys": True,
    }

def test_me_without_staff_role():
    token = make_token(app_metadata={})
    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["can_manage_surveys"] is False

def test_expired_token():
    token = make_token(exp=datetime.now(timezone.utc) - timedelta(minutes=5))
    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token has expired"

def test_token_from_another_issuer():
    token = make_token(iss="https://elsewhere.example.com/auth/v1")
    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401

def test_token_with_wrong_signature():
    token = jwt.encode({"sub": "x", "email": "x@example.com"}, "other-secret", algorithm="HS256")
    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401

def test_sensitive_data_filter_redacts_messages():
    log_filter = SensitiveDataFilter()
    assert log_filter.sanitize_message("Authorization: Bearer abc") == "[REDACTED]"
    assert log_filter.sanitize_message("Survey stored") == "Survey stored"
    assert log_filter.sanitize_message({"not": "a string"}) == {"not": "a string"}
