from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(ApiModel, Generic[T]):
    success: bool = True
    data: T
    message: str | None = None


class PageEnvelope(ApiModel, Generic[T]):
    success: bool = True
    data: list[T]
    page: int
    limit: int
    total: int
    has_more: bool


class ErrorEnvelope(ApiModel):
    success: bool = False
    error: str
    details: list[dict[str, Any]] | None = None
