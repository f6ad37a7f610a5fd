"""User record entity module.

- UserRecord: canonical domain entity
- UserProfile: public projection returned over the network
- UserTable: database persistence model
- UserRepository: record store client
"""

from .entity import Role, UserProfile, UserRecord
from .repository import UserRepository
from .table import UserTable

__all__ = ["Role", "UserProfile", "UserRecord", "UserRepository", "UserTable"]
