"""Tests for the remote user-record service client."""

import json

import httpx
import pytest
from pydantic import ValidationError

from src.fitness.core.clients import UserServiceClient
from src.fitness.core.errors import IdentityConflict
from src.fitness.core.models.identity import IdentityAssertion

PROFILE = {
    "internalId": "0b7d5c8e-0000-4000-8000-000000000001",
    "externalId": "kc-1",
    "email": "ada@example.com",
    "givenName": "Ada",
    "familyName": None,
    "role": "USER",
    "createdAt": "2024-01-01T12:00:00Z",
    "modifiedAt": "2024-01-01T12:00:00Z",
}


def _client(handler) -> UserServiceClient:
    return UserServiceClient(
        "http://user-service/", timeout=1.0, transport=httpx.MockTransport(handler)
    )


class TestUserServiceClient:
    async def test_register_posts_camel_case_payload(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json=PROFILE)

        profile = await _client(handler).register(
            IdentityAssertion(external_id="kc-1", email="ada@example.com", given_name="Ada")
        )

        assert profile.id == PROFILE["internalId"]
        assert profile.external_id == "kc-1"
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/api/users/register"
        assert json.loads(request.content) == {
            "externalId": "kc-1",
            "email": "ada@example.com",
            "givenName": "Ada",
        }

    async def test_register_conflict_raises_identity_conflict(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                409,
                json={
                    "detail": {
                        "code": "identity_conflict",
                        "message": "conflict",
                        "email": "ada@example.com",
                        "boundExternalId": "kc-A",
                        "requestedExternalId": "kc-B",
                    },
                    "request_id": "abc",
                },
            )

        with pytest.raises(IdentityConflict) as exc_info:
            await _client(handler).register(
                IdentityAssertion(external_id="kc-B", email="ada@example.com")
            )

        assert exc_info.value.bound_external_id == "kc-A"
        assert exc_info.value.requested_external_id == "kc-B"

    async def test_register_server_error_raises_status_error(self):
        client = _client(lambda request: httpx.Response(500, json={"detail": "boom"}))

        with pytest.raises(httpx.HTTPStatusError):
            await client.register(IdentityAssertion(external_id="kc-1"))

    async def test_ensure_exists_quotes_the_external_id(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=PROFILE)

        await _client(handler).ensure_exists("auth0|abc/def")

        assert seen[0].method == "POST"
        assert seen[0].url.raw_path == b"/api/users/auth0%7Cabc%2Fdef/ensure-exists"

    async def test_ensure_exists_malformed_body(self):
        client = _client(lambda request: httpx.Response(200, json={"unexpected": True}))

        with pytest.raises(ValidationError):
            await client.ensure_exists("kc-1")

    async def test_ensure_exists_not_found(self):
        client = _client(lambda request: httpx.Response(404, json={"detail": "nope"}))

        with pytest.raises(httpx.HTTPStatusError):
            await client.ensure_exists("kc-1")

    async def test_exists(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/users/kc-1/validate"
            return httpx.Response(200, json=True)

        assert await _client(handler).exists("kc-1") is True

    async def test_exists_rejects_non_boolean(self):
        client = _client(lambda request: httpx.Response(200, json={"exists": True}))

        with pytest.raises(ValueError):
            await client.exists("kc-1")

    async def test_timeouts_propagate(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(httpx.TimeoutException):
            await _client(handler).ensure_exists("kc-1")
