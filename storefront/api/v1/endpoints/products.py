"""
Catalog endpoints.

- GET operations are public.
- POST / PUT require the member or owner role.
- DELETE requires the owner role.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.api.v1.deps import (get_catalog_service, guarded_body,
                                    require_catalog_editor, require_owner)
from storefront.schemas.base import SuccessResponse
from storefront.schemas.product import (ProductCreate, ProductListResponse,
                                        ProductResponse, ProductSavedResponse,
                                        ProductUpdate)
from storefront.services.catalog import CatalogService

router = APIRouter(prefix="/products", tags=["products"])

create_body = guarded_body(ProductCreate, require_catalog_editor)
update_body = guarded_body(ProductUpdate, require_catalog_editor)


def _json_body(model) -> dict:
    # Bodies are parsed inside a dependency, so document them by hand
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema()}},
        }
    }


@router.get("", response_model=ProductListResponse)
async def list_products(
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductListResponse:
    return ProductListResponse(products=await catalog.list())


@router.post("", response_model=ProductSavedResponse, openapi_extra=_json_body(ProductCreate))
async def create_product(
    user: dict = Depends(require_catalog_editor),
    body: ProductCreate = Depends(create_body),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductSavedResponse:
    return ProductSavedResponse(product=await catalog.create(body, created_by=user["id"]))


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductResponse:
    return ProductResponse(product=await catalog.get(product_id))


@router.put("/{product_id}", response_model=ProductSavedResponse, openapi_extra=_json_body(ProductUpdate))
async def update_product(
    product_id: str,
    body: ProductUpdate = Depends(update_body),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductSavedResponse:
    """Merge the given fields into the product."""
    return ProductSavedResponse(product=await catalog.update(product_id, body))


@router.delete("/{product_id}", response_model=SuccessResponse)
async def delete_product(
    product_id: str,
    _owner: dict = Depends(require_owner),
    catalog: CatalogService = Depends(get_catalog_service),
) -> SuccessResponse:
    """Delete the product record and drop it from the index."""
    await catalog.delete(product_id)
    return SuccessResponse(message="Product deleted")
