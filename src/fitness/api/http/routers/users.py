"""User-record service endpoints: registration, ensure-exists and existence check."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from loguru import logger
from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from src.fitness.api.http.deps import get_provisioning_coordinator
from src.fitness.core.models.identity import Created, IdentityAssertion
from src.fitness.core.services import ProvisioningCoordinator
from src.fitness.entities.core.user import UserProfile

router = APIRouter(prefix="/api/users", tags=["users"])


class RegisterRequest(BaseModel):
    """Registration payload.

    Self-registration (no ``externalId``) needs an email and a credential;
    token-backed registration may carry only the external id.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr | None = None
    credential: str | None = Field(default=None, min_length=6)
    external_id: str | None = Field(default=None, alias="externalId")
    given_name: str | None = Field(default=None, alias="givenName")
    family_name: str | None = Field(default=None, alias="familyName")

    @model_validator(mode="after")
    def _require_local_credentials(self) -> "RegisterRequest":
        if not (self.external_id and self.external_id.strip()):
            if not self.email:
                raise ValueError("email is required when externalId is absent")
            if not self.credential:
                raise ValueError("credential is required when externalId is absent")
        return self

    def to_assertion(self) -> IdentityAssertion:
        return IdentityAssertion(
            external_id=self.external_id,
            email=self.email,
            given_name=self.given_name,
            family_name=self.family_name,
        )


def _require_external_id(external_id: str) -> str:
    external_id = external_id.strip()
    if not external_id:
        raise HTTPException(
            status_code=422,
            detail={"code": "invalid_external_id", "message": "External id must not be blank"},
        )
    return external_id


@router.post("/register", response_model=UserProfile)
def register(
    payload: RegisterRequest,
    response: Response,
    coordinator: ProvisioningCoordinator = Depends(get_provisioning_coordinator),
) -> UserProfile:
    """Register or reconcile a user; 201 when a new record was created."""
    profile, outcome = coordinator.register_outcome(
        payload.to_assertion(), payload.credential
    )
    if isinstance(outcome, Created):
        response.status_code = status.HTTP_201_CREATED
    logger.info(f"Registered {profile.id} ({type(outcome).__name__})")
    return profile


@router.post("/{external_id:path}/ensure-exists", response_model=UserProfile)
def ensure_exists(
    external_id: str,
    coordinator: ProvisioningCoordinator = Depends(get_provisioning_coordinator),
) -> UserProfile:
    """Return the profile for an external id, provisioning a placeholder if needed."""
    return coordinator.ensure_exists(_require_external_id(external_id))


@router.get("/{external_id:path}/validate", response_model=bool)
def validate_user(
    external_id: str,
    coordinator: ProvisioningCoordinator = Depends(get_provisioning_coordinator),
) -> bool:
    """Legacy existence check. Prefer ensure-exists."""
    return coordinator.exists(_require_external_id(external_id))
