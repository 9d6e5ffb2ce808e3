from .person import Person, PhotoInfo
from .user import Identity, User

__all__ = [
    "Identity",
    "Person",
    "PhotoInfo",
    "User",
]
