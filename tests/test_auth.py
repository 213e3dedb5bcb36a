from datetime import datetime, timedelta, timezone

from sqlmodel import select

from techpedia.core.security import create_refresh_token, verify_password
from techpedia.models.user import ADMIN, CUSTOMER, InvalidToken, User
from techpedia.routers.dependencies import auth_service

from tests.conftest import API, PASSWORD, auth_headers


class TestRegister:
    def test_creates_customer_with_hashed_password(self, client, session):
        response = client.post(
            f"{API}/auth/register",
            json={"name": "  Carol ", "email": "carol@example.com", "password": "hunter22"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["role"] == CUSTOMER
        assert body["user"]["name"] == "Carol"
        assert body["access_token"]
        assert "password" not in body["user"]

        user = session.exec(select(User).where(User.email == "carol@example.com")).one()
        assert user.password != "hunter22"
        assert verify_password("hunter22", user.password)

    def test_duplicate_email(self, client, customer):
        response = client.post(
            f"{API}/auth/register",
            json={"name": "Again", "email": customer.email, "password": "hunter22"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "User with this email already exists"

    def test_short_password(self, client):
        response = client.post(
            f"{API}/auth/register",
            json={"name": "Dan", "email": "dan@example.com", "password": "123"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert response.json()["issues"]

    def test_role_cannot_be_chosen(self, client):
        response = client.post(
            f"{API}/auth/register",
            json={"name": "Eve", "email": "eve@example.com", "password": "hunter22", "role": "ADMIN"},
        )

        assert response.status_code == 400


class TestLogin:
    def test_returns_tokens_and_sets_cookie(self, client, customer):
        response = client.post(
            f"{API}/auth/login", json={"email": customer.email, "password": PASSWORD}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["access_token"]
        assert body["refresh_token"]
        assert response.cookies.get("refreshToken") == body["refresh_token"]

    def test_wrong_password(self, client, customer):
        response = client.post(
            f"{API}/auth/login", json={"email": customer.email, "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password", "code": "UNAUTHORIZED"}

    def test_unknown_email(self, client):
        response = client.post(
            f"{API}/auth/login", json={"email": "ghost@example.com", "password": PASSWORD}
        )

        assert response.status_code == 401


class TestRefresh:
    def test_refresh_from_body(self, client, customer):
        token = create_refresh_token(customer.id)

        response = client.post(f"{API}/auth/refresh", json={"refresh_token": token})

        assert response.status_code == 200
        access = response.json()["access_token"]
        me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {access}"})
        assert me.json()["email"] == customer.email

    def test_access_token_is_not_a_refresh_token(self, client, customer):
        access = auth_headers(customer)["Authorization"].split()[1]

        response = client.post(f"{API}/auth/refresh", json={"refresh_token": access})

        assert response.status_code == 401

    def test_missing_token(self, client):
        response = client.post(f"{API}/auth/refresh", json={})

        assert response.status_code == 401

    def test_refresh_token_is_not_an_access_token(self, client, customer):
        token = create_refresh_token(customer.id)

        response = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401


class TestLogout:
    def test_revokes_access_token(self, client, session, customer):
        headers = auth_headers(customer)

        response = client.post(f"{API}/auth/logout", headers=headers)

        assert response.json()["message"] == "Logged out successfully"
        again = client.get(f"{API}/auth/me", headers=headers)
        assert again.status_code == 401
        assert again.json()["error"] == "Token has been revoked"

    def test_revokes_refresh_cookie(self, client, customer):
        login = client.post(
            f"{API}/auth/login", json={"email": customer.email, "password": PASSWORD}
        ).json()
        headers = {"Authorization": f"Bearer {login['access_token']}"}

        client.post(f"{API}/auth/logout", headers=headers)

        response = client.post(
            f"{API}/auth/refresh", json={"refresh_token": login["refresh_token"]}
        )
        assert response.status_code == 401

    def test_anonymous(self, client):
        response = client.post(f"{API}/auth/logout")

        assert response.status_code == 200
        assert response.json()["message"] == "Already logged out"

    def test_sweep_removes_only_expired_entries(self, session, customer):
        now = datetime.now(timezone.utc)
        session.add(InvalidToken(token="old", user_id=customer.id, expires_at=now - timedelta(hours=1)))
        session.add(InvalidToken(token="live", user_id=customer.id, expires_at=now + timedelta(hours=1)))
        session.commit()

        removed = auth_service.sweep_expired_tokens(session)

        assert removed == 1
        assert [t.token for t in session.exec(select(InvalidToken)).all()] == ["live"]


class TestMe:
    def test_customer_sees_orders_and_cart(
        self, client, customer, make_product, put_in_cart
    ):
        put_in_cart(customer, make_product(price="3.00"), 2)

        body = client.get(f"{API}/auth/me", headers=auth_headers(customer)).json()

        assert body["email"] == customer.email
        assert body["orders"] == []
        assert body["cart"]["item_count"] == 1
        assert float(body["cart"]["total_price"]) == 6.0

    def test_admin_profile_has_no_cart(self, client, admin):
        body = client.get(f"{API}/auth/me", headers=auth_headers(admin)).json()

        assert body["role"] == ADMIN
        assert body["cart"] is None

    def test_requires_auth(self, client):
        assert client.get(f"{API}/auth/me").status_code == 401


class TestAdminAccounts:
    def test_admin_creates_admin(self, client, session, admin):
        response = client.post(
            f"{API}/auth/admin",
            json={"name": "Root", "email": "root@example.com", "password": "longenough"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 201
        assert response.json()["role"] == ADMIN
        listed = client.get(f"{API}/auth/admin", headers=auth_headers(admin)).json()
        assert {u["email"] for u in listed} == {"admin@example.com", "root@example.com"}

    def test_duplicate_admin_email(self, client, admin):
        response = client.post(
            f"{API}/auth/admin",
            json={"name": "Root", "email": admin.email, "password": "longenough"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    def test_customer_cannot_create_admin(self, client, customer):
        response = client.post(
            f"{API}/auth/admin",
            json={"name": "Sneaky", "email": "sneaky@example.com", "password": "longenough"},
            headers=auth_headers(customer),
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Unauthorized - Admin access required"
