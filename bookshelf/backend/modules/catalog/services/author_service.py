import logging
from typing import Any, Dict, List, Optional, Tuple

from backend.modules.catalog.models.author_model import AuthorModel
from backend.modules.catalog.models.book_model import BookModel
from backend.modules.catalog.services.entity_repository import EntityRepository
from backend.modules.catalog.services.relationship_coordinator import RelationshipCoordinator
from shared.modules.catalog.errors import InternalError, NotFoundError
from shared.modules.catalog.models.author import Author
from shared.modules.catalog.models.book import Book
from shared.modules.catalog.validation import (
    ensure_published_after_birth,
    require_id,
    require_uuid,
    validate_author_changes,
    validate_limit,
    validate_new_author,
)


class AuthorService:
    """
    Author queries and mutations.
    Validation first, then the primary store, then the cache.
    """

    def __init__(
        self,
        author_model: AuthorModel,
        book_model: BookModel,
        author_repository: EntityRepository,
        coordinator: RelationshipCoordinator,
    ):
        self.author_model = author_model
        self.book_model = book_model
        self.author_repository = author_repository
        self.coordinator = coordinator
        self.logger = logging.getLogger(self.__class__.__name__)

    def get_authors(self) -> List[Author]:
        return self.author_repository.get_all()

    def get_author(self, author_id: str) -> Author:
        return self.author_repository.get_by_id(author_id)

    def get_author_books(self, author_id: str, limit: Optional[int] = None) -> List[Book]:
        """Books written by the author, read straight from the store."""
        limit = validate_limit(limit)
        trimmed_id = require_id(author_id, "Author ID")
        return [Book.from_doc(doc) for doc in self.book_model.find_by_author(trimmed_id, limit=limit)]

    def add_author(self, data: Dict[str, Any]) -> Author:
        author = Author(**validate_new_author(data))

        if not self.author_model.insert(author.to_doc()):
            raise InternalError("Could not add author")
        self.logger.info(f"Added author {author.id}")

        self.author_repository.upsert_single(author)
        self.author_repository.listing_append(author)
        return author

    def edit_author(self, author_id: str, data: Dict[str, Any]) -> Author:
        """
        Apply a partial update. An edit that leaves the stored document
        unchanged is a no-op and returns the author as stored.
        """
        trimmed_id = require_uuid(author_id, "author ID")
        changes = validate_author_changes(data)

        if not self.author_model.find_by_id(trimmed_id):
            raise NotFoundError("Author not found")

        if "date_of_birth" in changes:
            # Existing books must still be published on or after the new birth date
            for doc in self.book_model.find_by_author(trimmed_id):
                ensure_published_after_birth(doc["publicationDate"], changes["date_of_birth"])

        modified = self.author_model.update_fields(trimmed_id, changes)

        doc = self.author_model.find_by_id(trimmed_id)
        if not doc:
            raise NotFoundError("Author not found")
        author = Author.from_doc(doc)

        if modified:
            self.logger.info(f"Edited author {trimmed_id}: {sorted(changes)}")
            self.author_repository.upsert_single(author)
            self.author_repository.listing_replace(author)
        return author

    def remove_author(self, author_id: str) -> Tuple[Author, List[Book]]:
        """
        Delete an author and every book they wrote.
        Returns the removed author and the removed books.
        """
        trimmed_id = require_uuid(author_id, "author ID")

        doc = self.author_model.find_by_id(trimmed_id)
        if not doc:
            raise NotFoundError("Author not found")
        author = Author.from_doc(doc)

        books = self.coordinator.on_author_removed(trimmed_id)

        if self.author_model.delete_by_id(trimmed_id) == 0:
            raise InternalError("Failed to remove author")
        self.logger.info(f"Removed author {trimmed_id} and {len(books)} books")

        self.author_repository.evict_single(trimmed_id)
        self.author_repository.listing_remove([trimmed_id])
        return author, books
