"""Shared pydantic base: snake_case in Python, camelCase on the wire and in the store."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class SuccessResponse(BaseModel):
    success: bool = True
    message: str | None = None


class HealthResponse(BaseModel):
    status: str
    store: bool
