"""Public liveness check."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from storefront.api.v1.deps import get_store
from storefront.db.kv import KeyValueStore
from storefront.schemas.base import HealthResponse

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health(store: KeyValueStore = Depends(get_store)) -> HealthResponse:
    result = HealthResponse(status="ok", store=False)
    try:
        result.store = await store.ping()
    except Exception as e:
        logger.error("Health check store failure: %s", e)
        result.status = "degraded"
    return result
