from tests.conftest import API


def test_health_check(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_unknown_route_is_404(client):
    assert client.get(f"{API}/nope").status_code == 404


def test_malformed_uuid_is_a_validation_error(client):
    response = client.get(f"{API}/products/not-a-uuid")

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
