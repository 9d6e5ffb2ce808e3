from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId

from phonebook.core.exceptions import ObjectStorageError
from phonebook.models import Identity, Person, User
from phonebook.services import PersonService, PhotoUpload
from phonebook.storage.object_store import StoredObject

TEST_BUCKET = "phonebook-test.appspot.com"
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-jpeg-body\xff\xd9"


class StubPersonStore:
    def __init__(self) -> None:
        self.records: Dict[str, Person] = {}
        self.fail_on: set[str] = set()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise RuntimeError(f"person store {operation} failed")

    async def find_by_owner(self, user_id: str) -> List[Person]:
        self._maybe_fail("find_by_owner")
        return [person for person in self.records.values() if person.user == user_id]

    async def find_by_id(self, person_id: str) -> Optional[Person]:
        self._maybe_fail("find_by_id")
        return self.records.get(person_id)

    async def insert(self, fields: Dict[str, Any]) -> Person:
        self._maybe_fail("insert")
        person = Person.model_validate({"id": str(ObjectId()), **fields})
        self.records[person.id] = person
        return person

    async def update_by_id(self, person_id: str, fields: Dict[str, Any]) -> Optional[Person]:
        self._maybe_fail("update_by_id")
        current = self.records.get(person_id)
        if current is None:
            return None
        updated = current.model_copy(update=fields)
        self.records[person_id] = updated
        return updated

    async def delete_by_id(self, person_id: str) -> Optional[Person]:
        self._maybe_fail("delete_by_id")
        return self.records.pop(person_id, None)

    async def restore(self, person: Person) -> None:
        self._maybe_fail("restore")
        self.records[person.id] = person


class StubUserStore:
    def __init__(self) -> None:
        self.users: Dict[str, User] = {}
        self.fail_on: set[str] = set()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise RuntimeError(f"user store {operation} failed")

    async def find_by_id(self, user_id: str) -> Optional[User]:
        self._maybe_fail("find_by_id")
        return self.users.get(user_id)

    async def save(self, user: User) -> None:
        self._maybe_fail("save")
        self.users[user.id] = user

    async def add_person(self, user_id: str, person_id: str) -> None:
        self._maybe_fail("add_person")
        user = self.users[user_id]
        if person_id not in user.persons:
            user.persons.append(person_id)

    async def remove_person(self, user_id: str, person_id: str) -> None:
        self._maybe_fail("remove_person")
        user = self.users[user_id]
        user.persons = [existing for existing in user.persons if existing != person_id]


class StubObjectStore:
    def __init__(self) -> None:
        self.objects: Dict[str, tuple[bytes, str]] = {}
        self.fail_on: set[str] = set()

    async def upload(self, key: str, content: bytes, content_type: str) -> StoredObject:
        if "upload" in self.fail_on:
            raise ObjectStorageError("upload failed")
        self.objects[key] = (content, content_type)
        return StoredObject(bucket=TEST_BUCKET, full_path=key)

    async def delete(self, key: str) -> None:
        if "delete" in self.fail_on:
            raise ObjectStorageError("delete failed")
        if key not in self.objects:
            raise ObjectStorageError(f"object {key} does not exist")
        del self.objects[key]


@pytest.fixture
def person_store() -> StubPersonStore:
    return StubPersonStore()


@pytest.fixture
def user_store() -> StubUserStore:
    return StubUserStore()


@pytest.fixture
def object_store() -> StubObjectStore:
    return StubObjectStore()


@pytest.fixture
def owner(user_store: StubUserStore) -> User:
    user = User(id=str(ObjectId()), username="ada", name="Ada Lovelace")
    user_store.users[user.id] = user
    return user


@pytest.fixture
def other_user(user_store: StubUserStore) -> User:
    user = User(id=str(ObjectId()), username="grace", name="Grace Hopper")
    user_store.users[user.id] = user
    return user


@pytest.fixture
def identity(owner: User) -> Identity:
    return Identity(id=owner.id, username=owner.username)


@pytest.fixture
def photo() -> PhotoUpload:
    return PhotoUpload(filename="portrait.jpg", content=JPEG_BYTES)


@pytest.fixture
def person_service(person_store, user_store, object_store) -> PersonService:
    return PersonService(person_store, user_store, object_store)
