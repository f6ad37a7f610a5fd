from .user_service import UserServiceClient

__all__ = ["UserServiceClient"]
