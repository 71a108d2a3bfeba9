"""Tests for the Thoughts HTTP client."""
import base64
import json

import httpx
import pytest

from portal.client import PortalApiError, ThoughtsClient, UnauthorizedError

API_URL = "https://api.example.com/"
THOUGHT = {"id": "thought_T1", "timestamp": "T1", "content": "hi", "category": "general"}


def _client(handler):
    return ThoughtsClient(API_URL, "alice", "pw", http_client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_sends_basic_auth_and_parses_list():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["authorization"]
        seen["method"] = request.method
        return httpx.Response(200, json={"message": "ok", "thoughts": [THOUGHT]})

    thoughts = _client(handler).list_thoughts()

    assert thoughts == [THOUGHT]
    assert seen["method"] == "GET"
    assert seen["auth"] == "Basic " + base64.b64encode(b"alice:pw").decode()


def test_create_posts_content_and_category():
    def handler(request):
        assert request.method == "POST"
        assert json.loads(request.content) == {"content": "hi", "category": "work"}
        return httpx.Response(200, json={"message": "ok", "thought": THOUGHT})

    assert _client(handler).create_thought("hi", "work") == THOUGHT


def test_update_sends_key_and_changes():
    def handler(request):
        assert request.method == "PUT"
        assert json.loads(request.content) == {"id": "thought_T1", "timestamp": "T1", "isAcknowledged": True}
        return httpx.Response(200, json={"message": "ok", "thought": {**THOUGHT, "isAcknowledged": True}})

    assert _client(handler).update_thought(THOUGHT, isAcknowledged=True)["isAcknowledged"] is True


def test_delete_sends_body():
    def handler(request):
        assert request.method == "DELETE"
        assert json.loads(request.content) == {"id": "thought_T1", "timestamp": "T1"}
        return httpx.Response(200, json={"message": "ok", "thought": {**THOUGHT, "isDeleted": True}})

    assert _client(handler).delete_thought(THOUGHT)["isDeleted"] is True


def test_unauthorized():
    def handler(request):
        return httpx.Response(401, json={"message": "Unauthorized"})

    with pytest.raises(UnauthorizedError):
        _client(handler).list_thoughts()


def test_server_error_carries_detail():
    def handler(request):
        return httpx.Response(500, json={"message": "Error processing request", "error": "boom"})

    with pytest.raises(PortalApiError) as exc_info:
        _client(handler).list_thoughts()

    assert exc_info.value.status_code == 500
    assert "boom" in str(exc_info.value)


def test_non_json_error_body():
    def handler(request):
        return httpx.Response(502, text="Bad Gateway")

    with pytest.raises(PortalApiError) as exc_info:
        _client(handler).list_thoughts()

    assert exc_info.value.message == "Bad Gateway"
