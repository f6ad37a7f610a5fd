"""Gateway-side identity sync: provision best-effort, then stamp the trusted header."""

import asyncio
from collections.abc import Callable

import httpx
from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.fitness.core.clients import UserServiceClient
from src.fitness.core.errors import IdentityConflict
from src.fitness.core.models.identity import NoAssertion
from src.fitness.core.services.identity.claim_extractor import ClaimExtractor


class IdentitySyncMiddleware(BaseHTTPMiddleware):
    """Registers the caller with the user-record service before forwarding.

    Provisioning never gates the request. Whatever the registration call does
    (succeeds, conflicts, errors or times out), a request that carried a
    verifiable token is forwarded with ``header_name`` set to the asserted
    external id, replacing any value the client supplied. Requests without an
    assertion are forwarded untouched.

    The collaborators are resolved through factories on every request because
    they are created in the application lifespan, after the middleware stack
    is built.
    """

    def __init__(
        self,
        app: ASGIApp,
        extractor_factory: Callable[[], ClaimExtractor],
        client_factory: Callable[[], UserServiceClient],
        header_name: str = "X-User-ID",
        timeout: float = 2.0,
    ) -> None:
        super().__init__(app)
        self._extractor_factory = extractor_factory
        self._client_factory = client_factory
        self._header_name = header_name
        self._header_key = header_name.lower().encode("latin-1")
        self._timeout = timeout

    async def dispatch(self, request: Request, call_next):
        assertion = await self._extractor_factory().extract(
            request.headers.get("authorization")
        )
        if isinstance(assertion, NoAssertion):
            logger.debug(f"No identity assertion on request: {assertion.reason}")
            return await call_next(request)

        await self._provision(assertion)
        self._stamp_header(request, assertion.external_id)
        return await call_next(request)

    async def _provision(self, assertion) -> None:
        external_id = assertion.external_id
        try:
            profile = await asyncio.wait_for(
                self._client_factory().register(assertion), timeout=self._timeout
            )
        except (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning(
                f"Provisioning {external_id} timed out after {self._timeout}s; forwarding anyway"
            )
        except IdentityConflict as exc:
            logger.warning(
                f"Provisioning {external_id} conflicted: email {exc.email} is bound to "
                f"{exc.bound_external_id}; forwarding anyway"
            )
        except Exception as exc:
            logger.error(
                f"Provisioning {external_id} failed: {type(exc).__name__}: {exc}; forwarding anyway"
            )
        else:
            logger.debug(f"Provisioned {external_id} as record {profile.id}")

    def _stamp_header(self, request: Request, external_id: str) -> None:
        headers = [
            (key, value)
            for key, value in request.scope["headers"]
            if key.lower() != self._header_key
        ]
        # Verified subjects may be any unicode string; header bytes carry UTF-8
        headers.append((self._header_key, external_id.encode("utf-8")))
        request.scope["headers"] = headers
        # Starlette caches parsed headers on the request object
        request.__dict__.pop("_headers", None)
