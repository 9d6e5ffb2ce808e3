"""Person lifecycle orchestration across users, persons, and photo storage."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from phonebook.core.exceptions import NotFoundError, UnauthorizedError, ValidationError
from phonebook.core.security import INVALID_TOKEN_MESSAGE
from phonebook.models import Identity, Person, User
from phonebook.repositories import PersonStore, UserStore
from phonebook.services.saga import Saga
from phonebook.storage.object_store import ObjectStore, generate_unique_image_filename, public_url
from phonebook.utils.audit import audit_log
from phonebook.utils.monitoring import observe_photo_upload

logger = logging.getLogger(__name__)

PERSON_NOT_FOUND = "Person not found"
USER_NOT_FOUND = "User not found"
CONTENT_MISSING = "Content is missing"
FIELDS_REQUIRED = "Name and number are required"
FIELDS_NOT_STRINGS = "Name and number must be strings"
IMAGE_REQUIRED = "Image file is required"

_ABSENT = object()


@dataclass
class PhotoUpload:
    """Binary image payload received with a create request."""

    filename: Optional[str]
    content: bytes


def validate_person_fields(body: Mapping[str, Any]) -> dict:
    """Return `{name, number}` or raise with the first rule the body breaks."""

    name = body.get("name", _ABSENT)
    number = body.get("number", _ABSENT)

    if name is _ABSENT or number is _ABSENT:
        raise ValidationError(CONTENT_MISSING, code="content_missing")
    if name == "" or number == "":
        raise ValidationError(FIELDS_REQUIRED, code="fields_required")
    if not isinstance(name, str) or not isinstance(number, str):
        raise ValidationError(FIELDS_NOT_STRINGS, code="fields_not_strings")
    return {"name": name, "number": number}


class PersonService:
    """Keeps User owned-sets, Person documents, and stored photos consistent."""

    def __init__(
        self,
        persons: PersonStore,
        users: UserStore,
        object_store: ObjectStore,
        *,
        enforce_ownership: bool = False,
        compensate: bool = True,
        photo_content_type: str = "image/jpeg",
    ) -> None:
        self.persons = persons
        self.users = users
        self.object_store = object_store
        self.enforce_ownership = enforce_ownership
        self.compensate = compensate
        self.photo_content_type = photo_content_type

    async def list_persons(self, identity: Identity) -> List[Person]:
        return await self.persons.find_by_owner(identity.id)

    async def get_person(self, person_id: str, identity: Optional[Identity] = None) -> Person:
        person = await self.persons.find_by_id(person_id)
        if person is None:
            raise NotFoundError(PERSON_NOT_FOUND)
        self._check_ownership(person, identity)
        return person

    @audit_log
    async def create_person(
        self,
        identity: Identity,
        *,
        name: Any = _ABSENT,
        number: Any = _ABSENT,
        photo: Optional[PhotoUpload] = None,
    ) -> Person:
        fields = validate_person_fields(self._present(name=name, number=number))
        user = await self._load_user(identity)
        if photo is None or not photo.content:
            raise ValidationError(IMAGE_REQUIRED, code="image_required")

        observe_photo_upload(len(photo.content))
        key = generate_unique_image_filename(photo.filename)
        async with Saga("create_person", compensate=self.compensate) as saga:
            stored = await saga.step(
                "upload_photo",
                self.object_store.upload(key, photo.content, self.photo_content_type),
                undo=lambda uploaded: self.object_store.delete(uploaded.full_path),
            )
            person = await saga.step(
                "insert_person",
                self.persons.insert(
                    {
                        **fields,
                        "user": user.id,
                        "photoInfo": {"url": public_url(stored), "filename": stored.full_path},
                    }
                ),
                undo=lambda inserted: self.persons.delete_by_id(inserted.id),
            )
            await saga.step("link_user", self.users.add_person(user.id, person.id))

        logger.info("Created person %s for user %s", person.id, user.id)
        return person

    async def update_person(
        self,
        person_id: str,
        body: Mapping[str, Any],
        identity: Optional[Identity] = None,
    ) -> Person:
        fields = validate_person_fields(body)
        if self.enforce_ownership:
            await self.get_person(person_id, identity)

        person = await self.persons.update_by_id(person_id, fields)
        if person is None:
            raise NotFoundError(PERSON_NOT_FOUND)
        return person

    @audit_log
    async def delete_person(self, identity: Identity, *, person_id: str) -> None:
        # The owned-set edited is the caller's, not necessarily the stored owner's.
        user = await self._load_user(identity)
        if self.enforce_ownership:
            await self.get_person(person_id, identity)

        person = await self.persons.delete_by_id(person_id)
        if person is None:
            raise NotFoundError(PERSON_NOT_FOUND)

        # Object removal is irreversible and must stay the last step.
        async with Saga("delete_person", compensate=self.compensate) as saga:
            saga.record("delete_person", lambda: self.persons.restore(person))
            await saga.step(
                "unlink_user",
                self.users.remove_person(user.id, person.id),
                undo=lambda _: self.users.add_person(user.id, person.id),
            )
            if person.photo_info is not None:
                await saga.step("delete_photo", self.object_store.delete(person.photo_info.filename))

        logger.info("Deleted person %s for user %s", person_id, user.id)

    async def _load_user(self, identity: Optional[Identity]) -> User:
        if identity is None or not identity.id:
            raise UnauthorizedError(INVALID_TOKEN_MESSAGE)
        user = await self.users.find_by_id(identity.id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    def _check_ownership(self, person: Person, identity: Optional[Identity]) -> None:
        if not self.enforce_ownership:
            return
        if identity is None:
            raise UnauthorizedError(INVALID_TOKEN_MESSAGE)
        if person.user != identity.id:
            raise NotFoundError(PERSON_NOT_FOUND)

    @staticmethod
    def _present(**values: Any) -> dict:
        return {key: value for key, value in values.items() if value is not _ABSENT and value is not None}


__all__ = [
    "PersonService",
    "PhotoUpload",
    "validate_person_fields",
]
