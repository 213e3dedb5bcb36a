from tests.conftest import API, auth_headers, make_user


class TestListUsers:
    def test_paginates(self, client, session, admin):
        for i in range(3):
            make_user(session, f"user{i}@example.com", name=f"User {i}")

        response = client.get(
            f"{API}/users", params={"page": 1, "limit": 2}, headers=auth_headers(admin)
        )

        body = response.json()
        assert len(body["data"]) == 2
        assert body["meta"] == {"total": 4, "page": 1, "limit": 2, "total_pages": 2}

    def test_filter_by_role(self, client, admin, customer):
        response = client.get(
            f"{API}/users", params={"role": "CUSTOMER"}, headers=auth_headers(admin)
        )

        assert [u["email"] for u in response.json()["data"]] == [customer.email]

    def test_search_name_or_email(self, client, admin, customer, other_customer):
        response = client.get(
            f"{API}/users", params={"search": "bob"}, headers=auth_headers(admin)
        )

        assert [u["email"] for u in response.json()["data"]] == [other_customer.email]

    def test_unknown_role(self, client, admin):
        response = client.get(
            f"{API}/users", params={"role": "OWNER"}, headers=auth_headers(admin)
        )

        assert response.status_code == 400

    def test_customers_are_forbidden(self, client, customer):
        assert client.get(f"{API}/users", headers=auth_headers(customer)).status_code == 403
