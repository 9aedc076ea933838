"""
Derived listings: books by genre, books by price range, authors by name.

Each view is cached under its normalized query key for ``view_ttl`` seconds
and is never invalidated on write; results may lag the store by up to one
TTL on top of the staleness of the listing they were computed from.
"""
import json
import logging
from typing import Any, Callable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from backend.modules.catalog.services.entity_repository import EntityRepository
from shared.modules.cache.cache_key_generator import CacheKeyGenerator
from shared.modules.cache.cache_store import CacheStore, CacheUnavailableError
from shared.modules.catalog.models.author import Author
from shared.modules.catalog.models.book import Book
from shared.modules.catalog.validation import normalize_term, validate_price_range

VIEW_TTL_SECONDS = 3600


class DerivedViewService:

    def __init__(
        self,
        author_repository: EntityRepository,
        book_repository: EntityRepository,
        cache: CacheStore,
        view_ttl: int = VIEW_TTL_SECONDS,
    ):
        self.author_repository = author_repository
        self.book_repository = book_repository
        self.cache = cache
        self.view_ttl = view_ttl
        self.logger = logging.getLogger(self.__class__.__name__)

    def books_by_genre(self, genre: str) -> List[Book]:
        lower_genre = normalize_term(genre, "Genre")
        return self._cached_view(
            CacheKeyGenerator.genre(lower_genre),
            lambda: [b for b in self.book_repository.get_all() if b.has_genre(lower_genre)],
            Book.from_doc,
        )

    def books_by_price_range(self, min_price: float, max_price: float) -> List[Book]:
        """Books priced within [min_price, max_price], both ends inclusive."""
        min_price, max_price = validate_price_range(min_price, max_price)
        return self._cached_view(
            CacheKeyGenerator.price_range(min_price, max_price),
            lambda: [b for b in self.book_repository.get_all() if min_price <= b.price <= max_price],
            Book.from_doc,
        )

    def search_authors_by_name(self, search_term: str) -> List[Author]:
        """Authors whose first or last name contains the term, case-insensitively."""
        term = normalize_term(search_term, "SearchTerm")
        return self._cached_view(
            CacheKeyGenerator.search(term),
            lambda: [
                a for a in self.author_repository.get_all()
                if term in a.first_name.lower() or term in a.last_name.lower()
            ],
            Author.from_doc,
        )

    def _cached_view(self, key: str, compute: Callable[[], List[Any]], from_doc: Callable) -> List[Any]:
        cached = self._read(key, from_doc)
        if cached is not None:
            return cached

        results = compute()
        try:
            self.cache.set(key, json.dumps([r.to_doc() for r in results]), self.view_ttl)
        except CacheUnavailableError as e:
            self.logger.warning(f"Could not cache view '{key}': {e}")
        return results

    def _read(self, key: str, from_doc: Callable) -> Optional[List[Any]]:
        try:
            raw = self.cache.get(key)
        except CacheUnavailableError:
            return None
        if raw is None:
            return None
        try:
            return [from_doc(doc) for doc in json.loads(raw)]
        except (ValueError, TypeError, KeyError, PydanticValidationError) as e:
            self.logger.warning(f"Cached view '{key}' is unreadable, recomputing: {e}")
            return None
