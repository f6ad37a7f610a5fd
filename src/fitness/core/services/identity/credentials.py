"""Credential hashing."""

from passlib.context import CryptContext


class CredentialHasher:
    """Hashes and checks local credentials.

    pbkdf2_sha256 is pure Python inside passlib, so no native backend is needed.
    """

    def __init__(self, schemes: list[str] | None = None) -> None:
        self._context = CryptContext(schemes=schemes or ["pbkdf2_sha256"], deprecated="auto")

    def hash(self, credential: str) -> str:
        return self._context.hash(credential)

    def verify(self, credential: str, credential_hash: str) -> bool:
        try:
            return self._context.verify(credential, credential_hash)
        except ValueError:
            # unrecognised or malformed hash
            return False
