from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    id: str
    username: Optional[str] = None
    name: Optional[str] = None
    persons: List[str] = Field(default_factory=list, description="Identifiers of owned persons")


class Identity(BaseModel):
    """Caller identity decoded from a bearer token."""

    id: str
    username: Optional[str] = None
