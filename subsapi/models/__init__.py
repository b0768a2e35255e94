from .base import Base
from .user import User
from .subscription import Subscription

__all__ = ["Base", "User", "Subscription"]
