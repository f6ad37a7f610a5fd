"""Application fixtures: the three services wired to in-memory collaborators."""

from collections.abc import Callable

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import Engine

from src.fitness.api.http.app_data import ApplicationDependencies
from src.fitness.core.clients import UserServiceClient
from src.fitness.core.models.identity import IdentityAssertion, NoAssertion
from src.fitness.core.services import CredentialHasher, DbSessionService


class StubClaimExtractor:
    """Treats ``Bearer <external-id>`` as an already verified assertion.

    ``subjects`` maps a bearer value to the subject it stands for, for
    subjects that cannot travel in an ASCII Authorization header.
    """

    def __init__(self) -> None:
        self.calls: list[str | None] = []
        self.subjects: dict[str, str] = {}

    async def extract(self, authorization: str | None) -> IdentityAssertion | NoAssertion:
        self.calls.append(authorization)
        if not authorization or not authorization.startswith("Bearer "):
            return NoAssertion("no bearer credential")
        token = authorization.removeprefix("Bearer ").strip()
        external_id = self.subjects.get(token, token)
        return IdentityAssertion(
            external_id=external_id, email=f"{external_id}@example.com"
        )


@pytest.fixture
def user_app(engine: Engine) -> FastAPI:
    from src.fitness.api.http.app import create_app

    return create_app(
        ApplicationDependencies(
            database_service=DbSessionService(engine=engine),
            credential_hasher=CredentialHasher(),
        )
    )


@pytest.fixture
def user_client(user_app: FastAPI) -> TestClient:
    return TestClient(user_app)


@pytest.fixture
def user_service_client(user_app: FastAPI) -> UserServiceClient:
    """Remote client talking to the in-process user-record service."""
    return UserServiceClient(
        "http://user-service",
        timeout=2.0,
        transport=httpx.ASGITransport(app=user_app),
    )


@pytest.fixture
def activity_app_factory(
    engine: Engine,
) -> Callable[[UserServiceClient], FastAPI]:
    from src.fitness.api.http.activity_app import create_app

    def _make(client: UserServiceClient) -> FastAPI:
        return create_app(
            ApplicationDependencies(
                database_service=DbSessionService(engine=engine),
                user_service_client=client,
            )
        )

    return _make


@pytest.fixture
def activity_client(
    activity_app_factory: Callable[[UserServiceClient], FastAPI],
    user_service_client: UserServiceClient,
) -> TestClient:
    return TestClient(activity_app_factory(user_service_client))


@pytest.fixture
def stub_extractor() -> StubClaimExtractor:
    return StubClaimExtractor()


@pytest.fixture
def upstream_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def upstream_transport(upstream_requests: list[httpx.Request]) -> httpx.MockTransport:
    """Upstream services that echo what the gateway forwarded."""

    def handler(request: httpx.Request) -> httpx.Response:
        upstream_requests.append(request)
        return httpx.Response(
            200,
            json={
                "host": request.url.host,
                "path": request.url.path,
                "query": request.url.query.decode(),
                "user": request.headers.get("x-user-id"),
            },
            headers={"Connection": "keep-alive", "X-Upstream": request.url.host},
        )

    return httpx.MockTransport(handler)


@pytest.fixture
def gateway_factory(
    stub_extractor: StubClaimExtractor,
    upstream_transport: httpx.MockTransport,
) -> Callable[..., TestClient]:
    """Build a gateway around a given user-service client.

    The extractor is stubbed: token verification is covered by the claim
    extractor tests, and here only the sync-then-forward sequence matters.
    """
    from src.fitness.api.http.gateway_app import create_app

    def _make(client, transport: httpx.AsyncBaseTransport | None = None) -> TestClient:
        proxy_client = httpx.AsyncClient(transport=transport or upstream_transport)
        app = create_app(
            ApplicationDependencies(
                claim_extractor=stub_extractor,
                user_service_client=client,
                proxy_client=proxy_client,
            )
        )
        return TestClient(app)

    return _make
