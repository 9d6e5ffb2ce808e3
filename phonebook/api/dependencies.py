from __future__ import annotations

from fastapi import HTTPException, Request, status

from phonebook.core.config import Settings
from phonebook.core.database import DatabaseManager
from phonebook.repositories import PersonRepository, UserRepository
from phonebook.services import PersonService
from phonebook.storage.object_store import ObjectStorageClient


def build_person_service(database: DatabaseManager, config: Settings) -> PersonService:
    """Wire the service to MongoDB collections and the configured object store."""

    return PersonService(
        persons=PersonRepository(database.collection(config.PERSONS_COLLECTION)),
        users=UserRepository(database.collection(config.USERS_COLLECTION)),
        object_store=ObjectStorageClient(config),
        enforce_ownership=config.ENFORCE_PERSON_OWNERSHIP,
        compensate=config.COMPENSATE_PARTIAL_WRITES,
        photo_content_type=config.PHOTO_CONTENT_TYPE,
    )


async def get_person_service(request: Request) -> PersonService:
    service = getattr(request.app.state, "person_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Person store is unavailable. Ensure MongoDB is configured.",
        )
    return service
