from .claims import TokenClaims
from .identity import (
    Conflict,
    Created,
    Existing,
    IdentityAssertion,
    NoAssertion,
    ReconcileOutcome,
    Updated,
)

__all__ = [
    "Conflict",
    "Created",
    "Existing",
    "IdentityAssertion",
    "NoAssertion",
    "ReconcileOutcome",
    "TokenClaims",
    "Updated",
]
