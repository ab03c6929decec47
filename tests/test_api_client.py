import pytest

from core.api_client import TOO_LARGE_MESSAGE, ApiClient
from core.errors import AuthRequired, NetworkError, ServerError
from core.session import AdminSession


def test_get_sends_bearer_token_and_returns_envelope(api, http):
    http.queue(200, {"success": True, "data": [{"id": 1}]})

    body = api.get("/api/categories")

    assert body["data"] == [{"id": 1}]
    assert http.last["method"] == "GET"
    assert http.last["url"] == "http://backend.test/api/categories"
    assert http.last["headers"]["Authorization"] == "Bearer test-token"
    assert http.last["timeout"] == 5


def test_request_without_token_never_hits_the_network(http):
    client = ApiClient(AdminSession(), base_url="http://backend.test", http=http)

    with pytest.raises(AuthRequired):
        client.get("/api/orders")
    assert http.calls == []


def test_unauthenticated_request_skips_auth_header(http):
    client = ApiClient(AdminSession(), base_url="http://backend.test", http=http)
    http.queue(200, {"success": True, "token": "t"})

    client.post("/api/admin/login", json={"email": "a@b.co", "password": "x"}, auth=False)

    assert "Authorization" not in http.last["headers"]


def test_401_expires_session(api, http, session):
    http.queue(401, {"success": False, "message": "Token expired"})

    with pytest.raises(AuthRequired) as exc:
        api.get("/api/orders")

    assert exc.value.message == "Token expired"
    assert session.expired
    assert not session.is_authenticated
    # Later calls fail locally
    with pytest.raises(AuthRequired):
        api.get("/api/orders")
    assert len(http.calls) == 1


def test_413_maps_to_too_large_message(api, http):
    http.queue(413, content=b"<html>Request Entity Too Large</html>")

    with pytest.raises(ServerError) as exc:
        api.post("/api/categories", files={"name": (None, "x")})

    assert exc.value.status == 413
    assert exc.value.message == TOO_LARGE_MESSAGE


def test_server_error_uses_body_message(api, http):
    http.queue(400, {"success": False, "message": "Code already exists"})

    with pytest.raises(ServerError) as exc:
        api.post("/api/offers", json={})

    assert exc.value.message == "Code already exists"
    assert exc.value.status == 400


def test_server_error_without_message_falls_back_to_status(api, http):
    http.queue(502, content=b"Bad Gateway")

    with pytest.raises(ServerError) as exc:
        api.get("/api/orders")

    assert exc.value.message == "Error 502"


def test_success_false_on_2xx_is_an_error(api, http):
    http.queue(200, {"success": False, "message": "Nope"})

    with pytest.raises(ServerError, match="Nope"):
        api.put("/api/orders/1/status", json={"status": "confirmed"})


def test_empty_body_counts_as_success(api, http):
    http.queue(204)

    assert api.delete("/api/categories/1") == {"success": True}


def test_non_json_2xx_body_is_invalid(api, http):
    http.queue(200, content=b"<html>maintenance</html>")

    with pytest.raises(ServerError, match="Invalid response"):
        api.get("/api/categories")


def test_bare_list_body_is_wrapped(api, http):
    http.queue(200, [{"id": 1}, {"id": 2}])

    assert api.get("/api/categories") == {"success": True, "data": [{"id": 1}, {"id": 2}]}


def test_transport_failure_is_network_error(api, http, connection_error, session):
    http.fail(connection_error)

    with pytest.raises(NetworkError):
        api.get("/api/orders")
    assert not session.expired


def test_success_refreshes_session_activity(api, http, session):
    session.last_activity = session.last_activity.replace(year=2000)
    http.queue(200, {"success": True, "data": []})

    api.get("/api/orders")

    assert session.is_active()
