"""Person data model definitions."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PhotoInfo(BaseModel):
    url: str = Field(..., description="Public locator of the stored photo")
    filename: str = Field(..., description="Storage key used to delete the photo")


class Person(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Unique person identifier")
    name: str = Field(..., min_length=1)
    number: str = Field(..., min_length=1)
    user: str = Field(..., description="Identifier of the owning user")
    photo_info: Optional[PhotoInfo] = Field(None, alias="photoInfo")
