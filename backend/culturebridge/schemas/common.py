"""Response envelope shared by all endpoints."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Success envelope: {success: true, data, warnings}."""

    success: bool = True
    data: T
    warnings: list[str] = Field(default_factory=list)
