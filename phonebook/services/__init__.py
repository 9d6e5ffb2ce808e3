from .persons import PersonService, PhotoUpload, validate_person_fields
from .saga import Saga

__all__ = ["PersonService", "PhotoUpload", "Saga", "validate_person_fields"]
