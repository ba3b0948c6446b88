"""Pydantic schemas for catalog products."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from storefront.schemas.base import CamelModel


class ProductCreate(CamelModel):
    name: str
    description: str = ""
    price: float = Field(ge=0)
    category: str = ""
    stock: int = Field(default=0, ge=0)
    image_url: str | None = None


class ProductUpdate(CamelModel):
    name: str | None = None
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    category: str | None = None
    stock: int | None = Field(default=None, ge=0)
    image_url: str | None = None

    @field_validator("name", "description", "price", "category", "stock")
    @classmethod
    def _not_null(cls, v):
        # imageUrl may be cleared; the rest are required on the stored product
        if v is None:
            raise ValueError("must not be null")
        return v


class ProductRead(CamelModel):
    id: str
    name: str
    description: str = ""
    price: float
    category: str = ""
    stock: int = 0
    image_url: str | None = None
    created_by: str
    created_at: str
    updated_at: str | None = None


class ProductResponse(BaseModel):
    product: ProductRead


class ProductSavedResponse(BaseModel):
    success: bool = True
    product: ProductRead


class ProductListResponse(BaseModel):
    products: list[ProductRead]
