"""Content API schemas."""

from pydantic import BaseModel


class ImportStatusResponse(BaseModel):
    status: str
    success: int
    error: int

    class Config:
        from_attributes = True
