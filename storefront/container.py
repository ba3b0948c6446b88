"""
Backend wiring: builds the store, identity provider and object storage
from settings. ``main.lifespan`` puts the results on ``app.state``; request
handlers reach them only through the dependencies in ``api.v1.deps``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from storefront.core.config import Settings
from storefront.db.kv import (InMemoryKeyValueStore, KeyValueStore,
                              RedisKeyValueStore, SqlKeyValueStore)
from storefront.services.identity import IdentityProvider, LocalIdentityProvider
from storefront.services.storage import LocalObjectStorage, ObjectStorage

logger = logging.getLogger(__name__)


@dataclass
class Backends:
    store: KeyValueStore
    identity: IdentityProvider
    storage: ObjectStorage


def build_key_value_store(settings: Settings) -> KeyValueStore:
    if settings.KV_BACKEND == "redis":
        logger.info("Key-value backend: redis (%s)", settings.REDIS_URL)
        return RedisKeyValueStore(settings.REDIS_URL)
    if settings.KV_BACKEND == "memory":
        logger.warning("Key-value backend: in-memory, data is lost on restart")
        return InMemoryKeyValueStore()
    logger.info("Key-value backend: sql")
    return SqlKeyValueStore(settings.DATABASE_URL)


def build_backends(settings: Settings) -> Backends:
    store = build_key_value_store(settings)
    return Backends(
        store=store,
        identity=LocalIdentityProvider(store),
        storage=LocalObjectStorage(
            settings.STORAGE_ROOT, url_prefix=f"{settings.API_V1_PREFIX}/storage"
        ),
    )
