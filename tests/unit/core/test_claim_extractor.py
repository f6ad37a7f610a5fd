"""Tests for bearer credential extraction."""

import pytest

from src.fitness.core.models.identity import IdentityAssertion, NoAssertion
from src.fitness.core.services import ClaimExtractor, JwtGeneratorService
from src.fitness.runtime.config.config_data import AppConfig, ConfigData
from src.fitness.runtime.context import with_context
from tests.utils import sign_token


@pytest.fixture
def provider_token(signing_key: bytes, issuer: str, audience: str, kid_for_jwt: str):
    def _make(subject: str | None = "kc-1", **claims) -> str:
        return sign_token(
            signing_key,
            issuer=issuer,
            subject=subject,
            audience=audience,
            kid=kid_for_jwt,
            **claims,
        )

    return _make


class TestClaimExtractor:
    """Verified tokens become assertions; everything else is NoAssertion."""

    async def test_valid_provider_token(self, claim_extractor: ClaimExtractor, provider_token):
        token = provider_token(
            email="Ada@Example.com", given_name="Ada", family_name="Lovelace"
        )

        assertion = await claim_extractor.extract(f"Bearer {token}")

        assert assertion == IdentityAssertion(
            external_id="kc-1",
            email="ada@example.com",
            given_name="Ada",
            family_name="Lovelace",
        )

    async def test_profile_claims_are_optional(
        self, claim_extractor: ClaimExtractor, provider_token
    ):
        assertion = await claim_extractor.extract(f"Bearer {provider_token()}")

        assert isinstance(assertion, IdentityAssertion)
        assert assertion.external_id == "kc-1"
        assert assertion.email is None

    async def test_scheme_is_case_insensitive(
        self, claim_extractor: ClaimExtractor, provider_token
    ):
        assertion = await claim_extractor.extract(f"bearer {provider_token()}")

        assert isinstance(assertion, IdentityAssertion)

    @pytest.mark.parametrize(
        "header",
        [None, "", "Basic dXNlcjpwYXNz", "Bearer ", "Bearer not-a-jwt", "Bearer a.b.c"],
    )
    async def test_missing_or_malformed_credentials(
        self, claim_extractor: ClaimExtractor, header: str | None
    ):
        assert isinstance(await claim_extractor.extract(header), NoAssertion)

    async def test_wrong_signature(self, claim_extractor: ClaimExtractor, issuer, audience, kid_for_jwt):
        token = sign_token(
            b"some-other-key", issuer=issuer, subject="kc-1", audience=audience, kid=kid_for_jwt
        )

        assert isinstance(await claim_extractor.extract(f"Bearer {token}"), NoAssertion)

    async def test_expired_token(self, claim_extractor: ClaimExtractor, provider_token):
        token = provider_token(exp=1_000_000, iat=999_000)

        assert isinstance(await claim_extractor.extract(f"Bearer {token}"), NoAssertion)

    async def test_unknown_issuer(self, claim_extractor: ClaimExtractor, signing_key: bytes):
        token = sign_token(signing_key, issuer="https://elsewhere.test", subject="kc-1")

        assert isinstance(await claim_extractor.extract(f"Bearer {token}"), NoAssertion)

    async def test_wrong_audience(self, claim_extractor: ClaimExtractor, signing_key, issuer, kid_for_jwt):
        token = sign_token(
            signing_key, issuer=issuer, subject="kc-1", audience="someone-else", kid=kid_for_jwt
        )

        assert isinstance(await claim_extractor.extract(f"Bearer {token}"), NoAssertion)

    async def test_missing_subject(self, claim_extractor: ClaimExtractor, provider_token):
        token = provider_token(subject=None)

        assert isinstance(await claim_extractor.extract(f"Bearer {token}"), NoAssertion)

    async def test_blank_subject(self, claim_extractor: ClaimExtractor, provider_token):
        token = provider_token(subject="   ")

        assert isinstance(await claim_extractor.extract(f"Bearer {token}"), NoAssertion)

    async def test_development_token_with_shared_secret(
        self,
        claim_extractor: ClaimExtractor,
        jwt_generate_service: JwtGeneratorService,
    ):
        token = jwt_generate_service.generate_jwt(
            "dev-user", claims={"email": "dev@example.com"}
        )

        assertion = await claim_extractor.extract(f"Bearer {token}")

        assert assertion == IdentityAssertion(external_id="dev-user", email="dev@example.com")

    async def test_development_tokens_rejected_in_production(
        self,
        claim_extractor: ClaimExtractor,
        jwt_generate_service: JwtGeneratorService,
    ):
        token = jwt_generate_service.generate_jwt("dev-user")

        with with_context(ConfigData(app=AppConfig(environment="production"))):
            assertion = await claim_extractor.extract(f"Bearer {token}")

        assert isinstance(assertion, NoAssertion)
