"""Tests for the HTTP transport."""

import base64

import httpx
import pytest

from pyretdec import (
    AnalysisArguments,
    DecompilationArguments,
    Decompiler,
    Fileinfo,
    InputFile,
    MalformedResponseError,
    RetdecAPIError,
    RetdecAuthenticationError,
    RetdecConnectionError,
    Transport,
)


@pytest.fixture
def transport(config):
    with Transport(config) as t:
        yield t


def test_requests_carry_basic_auth_and_user_agent(api, transport, config):
    route = api.get("/test/echo").mock(return_value=httpx.Response(200, json={}))

    transport.get("/test/echo")

    request = route.calls.last.request
    expected = base64.b64encode(b"abc123:").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"
    assert request.headers["User-Agent"] == config.user_agent


def test_post_sends_multipart_form(api, transport):
    route = api.post("/fileinfo/analyses").mock(return_value=httpx.Response(200, json={"id": "1"}))

    reply = transport.post_json(
        "/fileinfo/analyses",
        data={"verbose": "1"},
        files={"input": InputFile.from_content(b"BINARY", name="a.exe")},
    )

    assert reply == {"id": "1"}
    request = route.calls.last.request
    body = request.read()
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="verbose"' in body
    assert b'filename="a.exe"' in body
    assert b"BINARY" in body


def test_api_error_uses_message_from_json_body(api, transport):
    route = api.get("/decompiler/decompilations/1/status").mock(
        return_value=httpx.Response(
            400,
            json={"code": 400, "message": "Missing input file.", "description": "No file was given."},
        )
    )

    with pytest.raises(RetdecAPIError) as exc_info:
        transport.get("/decompiler/decompilations/1/status")

    assert exc_info.value.status == 400
    assert exc_info.value.message == "Missing input file."
    assert exc_info.value.description == "No file was given."
    assert route.call_count == 1


def test_api_error_without_json_body_uses_reason_phrase(api, transport):
    api.get("/test/echo").mock(return_value=httpx.Response(500, text="<html>oops</html>"))

    with pytest.raises(RetdecAPIError) as exc_info:
        transport.get("/test/echo")

    assert exc_info.value.status == 500
    assert exc_info.value.message == "Internal Server Error"


def test_api_error_uses_error_field_when_message_is_absent(api, transport):
    api.get("/test/echo").mock(return_value=httpx.Response(404, json={"error": "No such decompilation."}))

    with pytest.raises(RetdecAPIError) as exc_info:
        transport.get("/test/echo")

    assert exc_info.value.status == 404
    assert exc_info.value.message == "No such decompilation."
    assert exc_info.value.description is None


def test_unauthorized_raises_authentication_error(api, transport):
    api.get("/test/echo").mock(return_value=httpx.Response(401, json={"message": "Unauthorized"}))

    with pytest.raises(RetdecAuthenticationError, match="Unauthorized"):
        transport.get("/test/echo")


def test_network_failure_is_not_retried(api, transport):
    route = api.get("/test/echo").mock(side_effect=httpx.ConnectError("connection refused"))

    with pytest.raises(RetdecConnectionError, match="connection refused"):
        transport.get("/test/echo")

    assert route.call_count == 1


def test_timeout_is_a_connection_error(api, transport):
    api.get("/test/echo").mock(side_effect=httpx.ReadTimeout("timed out"))

    with pytest.raises(RetdecConnectionError):
        transport.get("/test/echo")


@pytest.mark.parametrize("body", [b"not json", b"[1, 2]"])
def test_get_json_rejects_non_object_bodies(api, transport, body):
    api.get("/test/echo").mock(return_value=httpx.Response(200, content=body))

    with pytest.raises(MalformedResponseError):
        transport.get_json("/test/echo")


def test_one_transport_serves_several_services(api, transport, config, sample):
    api.post("/decompiler/decompilations").mock(return_value=httpx.Response(200, json={"id": "d1"}))
    api.post("/fileinfo/analyses").mock(return_value=httpx.Response(200, json={"id": "a1"}))

    decompilation = Decompiler(config, transport=transport).start(DecompilationArguments(input_file=sample))
    analysis = Fileinfo(config, transport=transport).start(AnalysisArguments(input_file=sample))

    assert (decompilation.id, analysis.id) == ("d1", "a1")
