"""MongoDB-backed persistence for User aggregates."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from motor.motor_asyncio import AsyncIOMotorCollection

from phonebook.models import User
from phonebook.repositories.base import stringify_id, to_object_id

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    async def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    async def save(self, user: User) -> None:
        ...

    async def add_person(self, user_id: str, person_id: str) -> None:
        ...

    async def remove_person(self, user_id: str, person_id: str) -> None:
        ...


class UserRepository:
    """Read users and maintain their owned-person references."""

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self._collection = collection

    async def find_by_id(self, user_id: str) -> Optional[User]:
        object_id = to_object_id(user_id)
        if object_id is None:
            return None
        document = await self._collection.find_one({"_id": object_id})
        return User.model_validate(stringify_id(document)) if document else None

    async def save(self, user: User) -> None:
        object_id = to_object_id(user.id)
        fields = user.model_dump(exclude={"id"})
        fields["persons"] = [to_object_id(person_id) or person_id for person_id in user.persons]
        await self._collection.replace_one({"_id": object_id}, fields, upsert=True)

    # $addToSet / $pull keep concurrent edits of one owned-set from clobbering each other.
    async def add_person(self, user_id: str, person_id: str) -> None:
        result = await self._collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$addToSet": {"persons": to_object_id(person_id)}},
        )
        if result.matched_count == 0:
            logger.warning("No user %s to link person %s to", user_id, person_id)

    async def remove_person(self, user_id: str, person_id: str) -> None:
        await self._collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$pull": {"persons": to_object_id(person_id)}},
        )


__all__ = ["UserRepository", "UserStore"]
