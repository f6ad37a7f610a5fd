"""HTTP client for the user-record service."""

from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger

from src.fitness.core.errors import IdentityConflict
from src.fitness.core.models.identity import IdentityAssertion
from src.fitness.entities.core.user import UserProfile


class UserServiceClient:
    """Calls the provisioning endpoints of the user-record service.

    Failures surface as the underlying httpx / pydantic exceptions, except a
    409 from registration, which is raised as ``IdentityConflict``. Callers
    decide whether a failure is fatal.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def register(
        self, assertion: IdentityAssertion, credential: str | None = None
    ) -> UserProfile:
        payload: dict[str, Any] = {
            "externalId": assertion.external_id,
            "email": assertion.email,
            "givenName": assertion.given_name,
            "familyName": assertion.family_name,
        }
        if credential:
            payload["credential"] = credential
        payload = {k: v for k, v in payload.items() if v is not None}

        async with self._client() as client:
            response = await client.post("/api/users/register", json=payload)

        if response.status_code == 409:
            detail = _error_detail(response)
            raise IdentityConflict(
                email=detail.get("email", assertion.email),
                bound_external_id=detail.get("boundExternalId"),
                requested_external_id=detail.get(
                    "requestedExternalId", assertion.external_id
                ),
            )
        response.raise_for_status()
        return UserProfile.model_validate(response.json())

    async def ensure_exists(self, external_id: str) -> UserProfile:
        async with self._client() as client:
            response = await client.post(
                f"/api/users/{quote(external_id, safe='')}/ensure-exists"
            )
        response.raise_for_status()
        return UserProfile.model_validate(response.json())

    async def exists(self, external_id: str) -> bool:
        async with self._client() as client:
            response = await client.get(
                f"/api/users/{quote(external_id, safe='')}/validate"
            )
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, bool):
            raise ValueError(f"Expected a boolean existence flag, got {body!r}")
        return body

    async def ping(self) -> bool:
        """True when the user-record service answers its liveness probe."""
        async with self._client() as client:
            response = await client.get("/health")
        return response.is_success


def _error_detail(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        logger.debug("Conflict response carried no JSON body")
        return {}
    detail = body.get("detail") if isinstance(body, dict) else None
    return detail if isinstance(detail, dict) else {}
