"""Class and text API schemas."""

from typing import Any, Optional
from pydantic import BaseModel


class ClassRequest(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None

    class Config:
        extra = "ignore"


class TextRequest(BaseModel):
    value: Optional[str] = None
    classes: Optional[list[Any]] = None
    metadata: Optional[dict] = None

    class Config:
        extra = "ignore"

    def class_ids(self) -> list[str]:
        """Classes may be given as ids or as {"id": ...} objects."""
        ids = []
        for item in self.classes or []:
            if isinstance(item, dict):
                item = item.get("id")
            if item:
                ids.append(str(item))
        return ids
