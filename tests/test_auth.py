from datetime import datetime, timedelta, timezone

import jwt
import pytest

from fooddelivery.core.config import get_settings
from fooddelivery.core.exceptions import AuthenticationError
from fooddelivery.core.security import create_access_token, decode_access_token, hash_password, verify_password

REGISTRATION = {
    "email": "Priya.K@Email.com",
    "password": "Secret123",
    "firstName": "Priya",
    "lastName": "Kumar",
    "phone": "+91-9000000001",
}


def test_password_hashing():
    hashed = hash_password("Secret123")
    assert hashed != "Secret123"
    assert verify_password(hashed, "Secret123")
    assert not verify_password(hashed, "secret123")


def test_token_round_trip():
    claims = decode_access_token(create_access_token(42))
    assert claims["sub"] == "42"


def test_expired_token_is_rejected():
    with pytest.raises(AuthenticationError, match="Token expired"):
        decode_access_token(create_access_token(42, expires_minutes=-1))


def test_foreign_signature_is_rejected():
    settings = get_settings()
    token = jwt.encode(
        {"sub": "1", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "some-other-secret",
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(AuthenticationError, match="Invalid token"):
        decode_access_token(token)


@pytest.mark.asyncio
async def test_register_returns_user_and_token(api):
    response = await api.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered successfully"
    user = body["data"]["user"]
    assert user["email"] == "priya.k@email.com"
    assert user["role"] == "CUSTOMER"
    assert "password" not in user and "passwordHash" not in user

    me = await api.get("/api/auth/me", headers={"Authorization": f"Bearer {body['data']['token']}"})
    assert me.status_code == 200
    assert me.json()["data"]["id"] == user["id"]


@pytest.mark.asyncio
async def test_register_duplicate_is_refused(api, seed):
    response = await api.post(
        "/api/auth/register", json={**REGISTRATION, "email": "john.doe@email.com"}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "User with this email or phone already exists"


@pytest.mark.asyncio
async def test_register_as_admin_is_refused(api):
    response = await api.post("/api/auth/register", json={**REGISTRATION, "role": "ADMIN"})
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field,value",
    [
        ("email", "not-an-email"),
        ("password", "short1A"),
        ("password", "alllowercase1"),
        ("firstName", "A"),
        ("phone", "12"),
    ],
)
async def test_register_validation(api, field, value):
    response = await api.post("/api/auth/register", json={**REGISTRATION, field: value})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert body["details"][0]["field"] == field


@pytest.mark.asyncio
async def test_login(api, seed):
    response = await api.post(
        "/api/auth/login", json={"email": "JOHN.DOE@email.com", "password": "Password123"}
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["id"] == seed.customer_id
    assert decode_access_token(data["token"])["sub"] == str(seed.customer_id)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email,password",
    [("john.doe@email.com", "WrongPass1"), ("nobody@email.com", "Password123")],
)
async def test_login_with_bad_credentials(api, seed, email, password):
    response = await api.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid credentials"}


@pytest.mark.asyncio
async def test_me_with_garbage_token(api):
    response = await api.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid token"


@pytest.mark.asyncio
async def test_health_and_root(api):
    health = await api.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert health.json()["database"] == "healthy"

    root = await api.get("/")
    assert root.json()["health"] == "/health"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(api):
    response = await api.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Not Found"}
