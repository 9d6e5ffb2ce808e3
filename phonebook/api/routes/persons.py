"""Person management endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Request, Response, status
from starlette.datastructures import UploadFile

from phonebook.api.dependencies import get_person_service
from phonebook.api.security import optional_identity, require_identity
from phonebook.models import Identity, Person
from phonebook.services import PersonService, PhotoUpload

router = APIRouter(prefix="/persons", tags=["persons"])


@router.get("", response_model=List[Person])
async def list_persons(
    identity: Identity = Depends(require_identity),
    service: PersonService = Depends(get_person_service),
) -> List[Person]:
    """List the persons owned by the authenticated user."""

    return await service.list_persons(identity)


@router.get("/{person_id}", response_model=Person)
async def get_person(
    person_id: str,
    identity: Optional[Identity] = Depends(optional_identity),
    service: PersonService = Depends(get_person_service),
) -> Person:
    return await service.get_person(person_id, identity)


@router.post("", response_model=Person, status_code=status.HTTP_201_CREATED)
async def create_person(
    request: Request,
    identity: Identity = Depends(require_identity),
    service: PersonService = Depends(get_person_service),
) -> Person:
    """Create a person from a multipart form carrying `name`, `number` and `image`."""

    # Read the raw form so empty strings stay distinguishable from absent fields.
    async with request.form() as form:
        name = form.get("name")
        number = form.get("number")
        upload = form.get("image")
        photo = None
        if isinstance(upload, UploadFile):
            photo = PhotoUpload(filename=upload.filename, content=await upload.read())

    return await service.create_person(identity, name=name, number=number, photo=photo)


@router.put("/{person_id}", response_model=Person)
async def update_person(
    person_id: str,
    body: Optional[Dict[str, Any]] = Body(None),
    identity: Optional[Identity] = Depends(optional_identity),
    service: PersonService = Depends(get_person_service),
) -> Person:
    return await service.update_person(person_id, body or {}, identity)


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_person(
    person_id: str,
    identity: Identity = Depends(require_identity),
    service: PersonService = Depends(get_person_service),
) -> Response:
    await service.delete_person(identity, person_id=person_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
