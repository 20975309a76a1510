from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from schemagate.server.middleware import AccessLogMiddleware, redact_query


def _app(enabled: bool = True) -> Starlette:
    async def echo(request):  # type: ignore[no-untyped-def]
        return PlainTextResponse(request.state.request_id, headers={"x-request-id": "stale"})

    return Starlette(
        routes=[Route("/echo", echo)],
        middleware=[Middleware(AccessLogMiddleware, enabled=enabled)],
    )


def test_request_id_is_generated_and_exposed(capsys) -> None:  # type: ignore[no-untyped-def]
    with TestClient(_app()) as client:
        response = client.get("/echo?key=secret")

    rid = response.headers["x-request-id"]
    assert rid == response.text
    assert len(rid) == 16
    assert response.headers.get_list("x-request-id") == [rid]

    stderr = capsys.readouterr().err
    assert f"request_id={rid}" in stderr
    assert "path=/echo" in stderr
    assert "secret" not in stderr


def test_inbound_request_id_is_propagated() -> None:
    with TestClient(_app()) as client:
        response = client.get("/echo", headers={"x-request-id": "abc123"})

    assert response.headers["x-request-id"] == "abc123"
    assert response.text == "abc123"


def test_access_log_can_be_disabled(capsys) -> None:  # type: ignore[no-untyped-def]
    with TestClient(_app(enabled=False)) as client:
        client.get("/echo")

    assert "server.access" not in capsys.readouterr().err


def test_query_credentials_are_masked() -> None:
    assert redact_query(b"alt=sse&key=abc") == "alt=sse&key=%2A%2A%2A"
    assert redact_query(b"") is None


def test_response_size_is_logged(capsys) -> None:  # type: ignore[no-untyped-def]
    with TestClient(_app()) as client:
        response = client.get("/echo", headers={"x-request-id": "abcd"})

    assert response.text == "abcd"
    assert "bytes=4" in capsys.readouterr().err
