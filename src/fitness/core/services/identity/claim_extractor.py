"""Bearer credential to identity assertion."""

from fastapi import HTTPException
from loguru import logger

from src.fitness.core.models.identity import IdentityAssertion, NoAssertion
from src.fitness.core.services.jwt.jwt_verify import JwtVerificationService

BEARER_PREFIX = "bearer "


class ClaimExtractor:
    """Turns an Authorization header value into an ``IdentityAssertion``.

    Never raises for a bad credential: an absent, malformed, unverifiable or
    subject-less token is reported as ``NoAssertion``. Only the token verifier
    is consulted; no storage or user-service call is made here.
    """

    def __init__(self, verifier: JwtVerificationService) -> None:
        self._verifier = verifier

    async def extract(self, authorization: str | None) -> IdentityAssertion | NoAssertion:
        if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
            return NoAssertion("no bearer credential")

        token = authorization[len(BEARER_PREFIX):].strip()
        if not token:
            return NoAssertion("empty bearer credential")

        try:
            claims = await self._verifier.verify_jwt(token)
        except HTTPException as exc:
            if exc.status_code >= 500:
                logger.warning(f"Token could not be verified: {exc.detail}")
            else:
                logger.debug(f"Rejected bearer credential: {exc.detail}")
            return NoAssertion(str(exc.detail))

        if not claims.subject or not claims.subject.strip():
            logger.debug("Bearer credential carries no subject")
            return NoAssertion("missing subject")

        assertion = IdentityAssertion(
            external_id=claims.subject,
            email=claims.email,
            given_name=claims.given_name,
            family_name=claims.family_name,
        )
        logger.debug(
            f"Extracted identity assertion for {assertion.external_id} (email={assertion.email})"
        )
        return assertion
