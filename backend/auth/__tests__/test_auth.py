"""
Endpoint tests for local registration and login.

Tests:
1. Health check is public
2. Register returns 201 with the user and no password material
3. Login with correct credentials returns the same user
4. Login failures are indistinguishable
5. Validation errors are aggregated into one response

Run: python3 -m pytest auth/__tests__/test_auth.py -v
"""
import pytest

REGISTER_BODY = {"email": "a@b.com", "password": "secret1", "name": "A"}


def contains_key(value, needle: str) -> bool:
    """True if needle appears as a key anywhere in a JSON structure"""
    if isinstance(value, dict):
        return any(needle.lower() in key.lower() or contains_key(v, needle) for key, v in value.items())
    if isinstance(value, list):
        return any(contains_key(item, needle) for item in value)
    return False


class TestHealth:

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestRegister:

    def test_register_success(self, client):
        response = client.post("/auth/register", json=REGISTER_BODY)

        assert response.status_code == 201
        body = response.json()
        assert body["statusCode"] == 201
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        assert body["data"]["email"] == "a@b.com"
        assert body["data"]["name"] == "A"
        assert body["data"]["provider"] == "LOCAL"
        assert body["data"]["id"] is not None
        assert "createdAt" in body["data"]
        assert "timestamp" in body
        assert not contains_key(body, "password")
        assert "secret1" not in response.text
        assert "$2b$" not in response.text

    def test_register_under_versioned_prefix(self, client):
        response = client.post("/api/v1/auth/register", json=REGISTER_BODY)

        assert response.status_code == 201

    def test_register_duplicate_email(self, client):
        client.post("/auth/register", json=REGISTER_BODY)

        response = client.post("/auth/register", json={**REGISTER_BODY, "password": "another1", "name": "B"})

        assert response.status_code == 400
        body = response.json()
        assert body == {
            "statusCode": 400,
            "success": False,
            "message": "Email already registered",
            "data": None,
            "timestamp": body["timestamp"],
        }

    def test_register_short_password(self, client):
        response = client.post("/auth/register", json={**REGISTER_BODY, "password": "12345"})

        assert response.status_code == 400
        assert response.json()["message"] == "Password must be at least 6 characters"

    def test_register_validation_errors_aggregated(self, client):
        response = client.post("/auth/register", json={"email": "not-an-email", "password": "", "name": ""})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        fields = {error["field"] for error in body["data"]}
        assert fields == {"email", "password", "name"}

    def test_register_missing_body_fields(self, client):
        response = client.post("/auth/register", json={})

        assert response.status_code == 400
        assert {error["field"] for error in response.json()["data"]} == {"email", "password", "name"}


class TestLogin:

    def test_login_success_returns_same_id(self, client):
        registered = client.post("/auth/register", json=REGISTER_BODY).json()["data"]

        response = client.post("/auth/login", json={"email": "a@b.com", "password": "secret1"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["data"]["id"] == registered["id"]
        assert not contains_key(body, "password")

    @pytest.mark.parametrize("email,password", [
        ("a@b.com", "wrong-password"),
        ("nobody@b.com", "secret1"),
    ])
    def test_login_failures_identical(self, client, email, password):
        client.post("/auth/register", json=REGISTER_BODY)

        response = client.post("/auth/login", json={"email": email, "password": password})

        assert response.status_code == 401
        body = response.json()
        assert body["message"] == "Invalid email or password"
        assert body["data"] is None
        assert body["success"] is False
