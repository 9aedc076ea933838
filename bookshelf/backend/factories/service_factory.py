"""
Service Factory for creating catalog service instances with proper dependencies.
"""
from typing import Optional

from flask import current_app

from backend.database.context import DatabaseContext
from backend.modules.catalog.models.author_model import AuthorModel
from backend.modules.catalog.models.book_model import BookModel
from backend.modules.catalog.services.author_service import AuthorService
from backend.modules.catalog.services.book_service import BookService
from backend.modules.catalog.services.derived_view_service import DerivedViewService
from backend.modules.catalog.services.entity_repository import EntityRepository
from backend.modules.catalog.services.relationship_coordinator import RelationshipCoordinator
from shared.modules.cache.cache_store import CacheStore


class CatalogServices:
    """
    One consistent set of catalog services sharing the same models,
    repositories and cache store.
    """

    def __init__(
        self,
        author_model: AuthorModel,
        book_model: BookModel,
        cache: CacheStore,
        listing_ttl: int = 3600,
        entity_ttl: int = 3600,
        view_ttl: int = 3600,
    ):
        self.author_model = author_model
        self.book_model = book_model
        self.author_repository = EntityRepository(self.author_model, cache, listing_ttl, entity_ttl)
        self.book_repository = EntityRepository(self.book_model, cache, listing_ttl, entity_ttl)
        self.coordinator = RelationshipCoordinator(
            self.author_model, self.book_model, self.author_repository, self.book_repository
        )
        self.authors = AuthorService(self.author_model, self.book_model, self.author_repository, self.coordinator)
        self.books = BookService(
            self.author_model, self.book_model, self.author_repository, self.book_repository, self.coordinator
        )
        self.views = DerivedViewService(self.author_repository, self.book_repository, cache, view_ttl)


class ServiceFactory:
    """
    Factory for creating service instances with injected dependencies.
    Resolves the database and cache from the Flask context unless given.
    """

    @staticmethod
    def create_catalog_services(mongo_db=None, cache: Optional[CacheStore] = None) -> CatalogServices:
        """
        Args:
            mongo_db: MongoDB database. Defaults to the app's PyMongo database.
            cache: Cache store. Defaults to the one opened by create_app.
        """
        config = current_app.config
        if mongo_db is None:
            mongo_db = DatabaseContext.get_mongo_db()
        return CatalogServices(
            AuthorModel(mongo_db),
            BookModel(mongo_db),
            cache if cache is not None else DatabaseContext.get_cache_store(),
            listing_ttl=config["CACHE_LISTING_TTL"],
            entity_ttl=config["CACHE_ENTITY_TTL"],
            view_ttl=config["CACHE_VIEW_TTL"],
        )

    @staticmethod
    def create_author_service() -> AuthorService:
        return ServiceFactory.create_catalog_services().authors

    @staticmethod
    def create_book_service() -> BookService:
        return ServiceFactory.create_catalog_services().books

    @staticmethod
    def create_derived_view_service() -> DerivedViewService:
        return ServiceFactory.create_catalog_services().views
