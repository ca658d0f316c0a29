"""
Integration tests for authentication flow
"""
from fastapi import status


class TestAuthenticationFlow:
    """Test complete authentication flow"""

    def test_signup(self, client, store):
        """Test seller signup"""
        response = client.post(
            "/api/signup",
            json={"email": "new@example.com", "password": "secret"}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["user"]["email"] == "new@example.com"
        assert isinstance(data["user"]["id"], int)
        assert data["token"]
        assert "password_hash" not in data["user"]
        assert store.find_by_email("new@example.com") is not None

    def test_signup_token_is_usable(self, client):
        response = client.post(
            "/api/signup",
            json={"email": "new@example.com", "password": "secret"}
        )
        token = response.json()["token"]

        me = client.get("/api/me", headers={"Authorization": f"Bearer {token}"})

        assert me.status_code == status.HTTP_200_OK
        assert me.json()["email"] == "new@example.com"

    def test_signup_duplicate_email(self, client, store, seller):
        """Test signup with duplicate email leaves the store unchanged"""
        original_hash = seller.password_hash

        response = client.post(
            "/api/signup",
            json={"email": seller.email, "password": "another"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Email already exists"}
        assert len(store) == 1
        assert store.find_by_email(seller.email).password_hash == original_hash

    def test_signup_missing_fields(self, client, store):
        for body in ({"email": "new@example.com"}, {"password": "secret"}, {}):
            response = client.post("/api/signup", json=body)

            assert response.status_code == status.HTTP_400_BAD_REQUEST
            assert "error" in response.json()

        assert len(store) == 0

    def test_signup_without_body(self, client):
        response = client.post("/api/signup")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_login_success(self, client, seller, seller_password):
        """Test successful login"""
        response = client.post(
            "/api/login",
            json={"email": seller.email, "password": seller_password}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["user"] == {"id": seller.id, "email": seller.email}
        assert data["token"]

    def test_login_wrong_password(self, client, seller):
        """Test login with wrong password"""
        response = client.post(
            "/api/login",
            json={"email": seller.email, "password": "WrongPassword123!"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "Invalid credentials"}
        assert "token" not in response.json()

    def test_login_nonexistent_user(self, client):
        """Test login with nonexistent email"""
        response = client.post(
            "/api/login",
            json={"email": "nonexistent@example.com", "password": "SomePassword123!"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_missing_fields(self, client):
        response = client.post("/api/login", json={"email": "a@example.com"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_get_current_seller(self, client, seller, auth_headers):
        """Test getting current seller info"""
        response = client.get("/api/me", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"id": seller.id, "email": seller.email}

    def test_unauthorized_access(self, client):
        """Test accessing protected endpoint without auth"""
        response = client.get("/api/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "Unauthorized"}

    def test_invalid_token(self, client):
        """Test accessing protected endpoint with invalid token"""
        response = client.get(
            "/api/me",
            headers={"Authorization": "Bearer invalid_token_12345"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_signup_token_decodes_to_stored_seller(self, client, store, jwt_manager):
        response = client.post(
            "/api/signup",
            json={"email": "new@example.com", "password": "secret"}
        )

        payload = jwt_manager.verify_token(response.json()["token"])
        stored = store.find_by_email("new@example.com")
        assert payload["id"] == stored.id
        assert payload["email"] == stored.email
