"""
Read-through / write-invalidate cache logic for a single entity type.

The primary store is the source of truth. Cache entries are disposable
copies: every read falls back to the store when an entry is missing,
expired, unreadable or the cache itself is down, and every cache write is
best-effort once the store write has succeeded.
"""
import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from backend.models.base_nosql_model import BaseNoSqlModel
from shared.modules.cache.cache_key_generator import CacheKeyGenerator
from shared.modules.cache.cache_store import CacheStore, CacheUnavailableError
from shared.modules.catalog.errors import InternalError, NotFoundError
from shared.modules.catalog.validation import require_id

LISTING_TTL_SECONDS = 3600
ENTITY_TTL_SECONDS = 3600

ListingMutation = Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]


class EntityRepository:
    """
    Cache-first access to one entity type.

    Keys: ``<type>s`` for the full listing, ``<type>:<id>`` per entity.
    """

    def __init__(
        self,
        model: BaseNoSqlModel,
        cache: CacheStore,
        listing_ttl: int = LISTING_TTL_SECONDS,
        entity_ttl: int = ENTITY_TTL_SECONDS,
    ):
        self.model = model
        self.cache = cache
        self.listing_ttl = listing_ttl
        self.entity_ttl = entity_ttl
        self.entity_type = model.entity_type
        self.listing_key = CacheKeyGenerator.listing(self.entity_type)
        self.logger = logging.getLogger(f"{self.__class__.__name__}.{self.entity_type}")

    @property
    def label(self) -> str:
        return self.entity_type.capitalize()

    def entity_key(self, entity_id: str) -> str:
        return CacheKeyGenerator.entity(self.entity_type, entity_id)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_all(self) -> List[Any]:
        """
        Return every entity, from the cached listing when present, otherwise
        from the store (and cache the result for ``listing_ttl`` seconds).
        """
        cached = self._load(self.listing_key, lambda docs: [self.model._from_doc(d) for d in docs])
        if cached is not None:
            self.logger.debug(f"Cache hit for '{self.listing_key}'")
            return cached

        docs = self.model.find_all()
        if docs is None:
            raise InternalError("Internal Server Error")

        entities = [self.model._from_doc(doc) for doc in docs]
        self._store(self.listing_key, [e.to_doc() for e in entities], self.listing_ttl)
        return entities

    def get_by_id(self, entity_id: str) -> Any:
        """
        Return one entity, from its cache entry when present, otherwise from
        the store. Raises NotFoundError when the store has no such document.
        """
        trimmed_id = require_id(entity_id, f"{self.label} ID")
        key = self.entity_key(trimmed_id)

        cached = self._load(key, self.model._from_doc)
        if cached is not None:
            self.logger.debug(f"Cache hit for '{key}'")
            return cached

        doc = self.model.find_by_id(trimmed_id)
        if not doc:
            raise NotFoundError(f"{self.label} Not Found")

        entity = self.model._from_doc(doc)
        self.upsert_single(entity)
        return entity

    # -------------------------------------------------------------------------
    # Post-commit cache maintenance
    # -------------------------------------------------------------------------

    def upsert_single(self, entity: Any) -> None:
        """Mirror a freshly written entity into its per-id entry."""
        self._store(self.entity_key(entity.id), entity.to_doc(), self.entity_ttl)

    def evict_single(self, entity_id: str) -> None:
        """Drop a per-id entry so the next read repopulates it from the store."""
        key = self.entity_key(entity_id)
        try:
            self.cache.delete(key)
        except CacheUnavailableError as e:
            self.logger.warning(f"Could not evict '{key}', it may serve stale data until it expires: {e}")

    def invalidate_listing(self, mutation: ListingMutation) -> None:
        """
        Apply ``mutation`` to the cached listing and re-set it with a fresh TTL.

        The listing is only deleted when the refresh itself fails, otherwise a
        delete would send every concurrent reader to the store at once. When
        nothing is cached there is nothing to patch, the next get_all loads the
        whole listing from the store.
        """
        try:
            if not self.cache.exists(self.listing_key):
                return
            raw = self.cache.get(self.listing_key)
            if raw is None:
                return
            docs = json.loads(raw)
            self.cache.set(self.listing_key, json.dumps(mutation(docs)), self.listing_ttl)
        except CacheUnavailableError as e:
            self.logger.warning(f"Could not refresh '{self.listing_key}' after a write, discarding it: {e}")
            self._discard(self.listing_key)
        except (ValueError, TypeError, KeyError) as e:
            self.logger.warning(f"Cached '{self.listing_key}' is unreadable, discarding it: {e}")
            self._discard(self.listing_key)

    def listing_append(self, entity: Any) -> None:
        doc = entity.to_doc()
        self.invalidate_listing(lambda docs: [d for d in docs if d["_id"] != entity.id] + [doc])

    def listing_replace(self, entity: Any) -> None:
        doc = entity.to_doc()
        self.invalidate_listing(lambda docs: [doc if d["_id"] == entity.id else d for d in docs])

    def listing_remove(self, entity_ids: Iterable[str]) -> None:
        removed = set(entity_ids)
        self.invalidate_listing(lambda docs: [d for d in docs if d["_id"] not in removed])

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _load(self, key: str, decode: Callable[[Any], Any]) -> Optional[Any]:
        """
        Read and decode a cache entry. A missing entry, a cache failure and an
        undecodable payload all read as a miss; the undecodable payload is
        also deleted so the caller's store read replaces it.
        """
        try:
            raw = self.cache.get(key)
        except CacheUnavailableError:
            return None
        if raw is None:
            self.logger.debug(f"Cache miss for '{key}'")
            return None
        try:
            return decode(json.loads(raw))
        except (ValueError, TypeError, KeyError, PydanticValidationError) as e:
            self.logger.warning(f"Cached '{key}' is unreadable, repairing from the store: {e}")
            self._discard(key)
            return None

    def _store(self, key: str, payload: Any, ttl_seconds: int) -> None:
        """
        Best-effort write. When the write fails, any previous entry under
        ``key`` is dropped so readers fall back to the store instead of
        serving it until it expires.
        """
        try:
            self.cache.set(key, json.dumps(payload), ttl_seconds)
        except CacheUnavailableError as e:
            self.logger.warning(f"Could not cache '{key}', discarding the old entry: {e}")
            self._discard(key)

    def _discard(self, key: str) -> None:
        try:
            self.cache.delete(key)
        except CacheUnavailableError as e:
            self.logger.warning(f"Could not discard '{key}': {e}")
