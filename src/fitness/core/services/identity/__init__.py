from .claim_extractor import ClaimExtractor
from .credentials import CredentialHasher
from .provisioning import ProvisioningCoordinator, placeholder_email
from .reconciliation import IdentityReconciliationEngine
from .validation import UserValidationService

__all__ = [
    "ClaimExtractor",
    "CredentialHasher",
    "IdentityReconciliationEngine",
    "ProvisioningCoordinator",
    "UserValidationService",
    "placeholder_email",
]
