from .persons import PersonRepository, PersonStore
from .users import UserRepository, UserStore

__all__ = ["PersonRepository", "PersonStore", "UserRepository", "UserStore"]
