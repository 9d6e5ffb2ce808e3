"""MongoDB-backed persistence for Person records."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument

from phonebook.models import Person
from phonebook.repositories.base import stringify_id, to_object_id

logger = logging.getLogger(__name__)


class PersonStore(Protocol):
    async def find_by_owner(self, user_id: str) -> List[Person]:
        ...

    async def find_by_id(self, person_id: str) -> Optional[Person]:
        ...

    async def insert(self, fields: Dict[str, Any]) -> Person:
        ...

    async def update_by_id(self, person_id: str, fields: Dict[str, Any]) -> Optional[Person]:
        ...

    async def delete_by_id(self, person_id: str) -> Optional[Person]:
        ...

    async def restore(self, person: Person) -> None:
        ...


class PersonRepository:
    """Persist Person documents in a MongoDB collection."""

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self._collection = collection

    async def find_by_owner(self, user_id: str) -> List[Person]:
        owner = to_object_id(user_id)
        if owner is None:
            return []
        results: List[Person] = []
        async for document in self._collection.find({"user": owner}):
            results.append(self._decode(document))
        return results

    async def find_by_id(self, person_id: str) -> Optional[Person]:
        object_id = to_object_id(person_id)
        if object_id is None:
            return None
        document = await self._collection.find_one({"_id": object_id})
        return self._decode(document) if document else None

    async def insert(self, fields: Dict[str, Any]) -> Person:
        document = self._encode(fields)
        result = await self._collection.insert_one(document)
        document["_id"] = result.inserted_id
        logger.debug("Inserted person %s", result.inserted_id)
        return self._decode(document)

    async def update_by_id(self, person_id: str, fields: Dict[str, Any]) -> Optional[Person]:
        object_id = to_object_id(person_id)
        if object_id is None:
            return None
        document = await self._collection.find_one_and_update(
            {"_id": object_id},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return self._decode(document) if document else None

    async def delete_by_id(self, person_id: str) -> Optional[Person]:
        object_id = to_object_id(person_id)
        if object_id is None:
            return None
        document = await self._collection.find_one_and_delete({"_id": object_id})
        return self._decode(document) if document else None

    async def restore(self, person: Person) -> None:
        """Re-insert a previously deleted person under its original identifier."""

        document = self._encode(person.model_dump(by_alias=True, exclude={"id"}))
        document["_id"] = to_object_id(person.id)
        await self._collection.insert_one(document)

    @staticmethod
    def _encode(fields: Dict[str, Any]) -> Dict[str, Any]:
        document = dict(fields)
        if "user" in document:
            document["user"] = to_object_id(document["user"]) or document["user"]
        return document

    @staticmethod
    def _decode(document: Dict[str, Any]) -> Person:
        return Person.model_validate(stringify_id(document))


__all__ = ["PersonRepository", "PersonStore"]
