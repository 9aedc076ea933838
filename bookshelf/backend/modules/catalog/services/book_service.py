import logging
from typing import Any, Dict, List

from backend.modules.catalog.models.author_model import AuthorModel
from backend.modules.catalog.models.book_model import BookModel
from backend.modules.catalog.services.entity_repository import EntityRepository
from backend.modules.catalog.services.relationship_coordinator import RelationshipCoordinator
from shared.modules.catalog.errors import InternalError, NotFoundError
from shared.modules.catalog.models.author import Author
from shared.modules.catalog.models.book import Book
from shared.modules.catalog.validation import (
    ensure_published_after_birth,
    require_uuid,
    validate_book_changes,
    validate_new_book,
)


class BookService:
    """
    Book queries and mutations. Relationship upkeep on the author side is
    delegated to the RelationshipCoordinator.
    """

    def __init__(
        self,
        author_model: AuthorModel,
        book_model: BookModel,
        author_repository: EntityRepository,
        book_repository: EntityRepository,
        coordinator: RelationshipCoordinator,
    ):
        self.author_model = author_model
        self.book_model = book_model
        self.author_repository = author_repository
        self.book_repository = book_repository
        self.coordinator = coordinator
        self.logger = logging.getLogger(self.__class__.__name__)

    def get_books(self) -> List[Book]:
        return self.book_repository.get_all()

    def get_book(self, book_id: str) -> Book:
        return self.book_repository.get_by_id(book_id)

    def get_book_author(self, book_id: str) -> Author:
        book = self.get_book(book_id)
        return self.author_repository.get_by_id(book.author_id)

    def add_book(self, data: Dict[str, Any]) -> Book:
        fields = validate_new_book(data)

        # Birth date is read from the store, a cached author may be stale
        author_doc = self.author_model.find_by_id(fields["authorId"])
        if not author_doc:
            raise NotFoundError("Author not found")
        ensure_published_after_birth(fields["publicationDate"], author_doc["date_of_birth"])

        book = Book(**fields)
        if not self.book_model.insert(book.to_doc()):
            raise InternalError("Failed to add book")
        self.logger.info(f"Added book {book.id} for author {book.author_id}")

        self.coordinator.on_book_added(book)

        self.book_repository.upsert_single(book)
        self.book_repository.listing_append(book)
        return book

    def edit_book(self, book_id: str, data: Dict[str, Any]) -> Book:
        """
        Apply a partial update, moving the book to another author when
        ``authorId`` changes. Repeating the same edit is a no-op.
        """
        trimmed_id = require_uuid(book_id, "book ID")
        changes = validate_book_changes(data)

        existing = self.book_model.find_by_id(trimmed_id)
        if not existing:
            raise NotFoundError("Book not found")
        current = Book.from_doc(existing)
        target_author_id = changes.get("authorId", current.author_id)

        if "authorId" in changes or "publicationDate" in changes:
            author_doc = self.author_model.find_by_id(target_author_id)
            if not author_doc:
                raise NotFoundError("Author not found")
            ensure_published_after_birth(
                changes.get("publicationDate", current.publication_date),
                author_doc["date_of_birth"],
            )

        modified = self.book_model.update_fields(trimmed_id, changes)

        doc = self.book_model.find_by_id(trimmed_id)
        if not doc:
            raise NotFoundError("Book not found")
        book = Book.from_doc(doc)

        if not modified:
            return book
        self.logger.info(f"Edited book {trimmed_id}: {sorted(changes)}")

        if book.author_id != current.author_id:
            self.coordinator.on_book_reparented(trimmed_id, current.author_id, book.author_id)

        self.book_repository.upsert_single(book)
        self.book_repository.listing_replace(book)
        return book

    def remove_book(self, book_id: str) -> Book:
        trimmed_id = require_uuid(book_id, "book ID")

        doc = self.book_model.find_by_id(trimmed_id)
        if not doc:
            raise NotFoundError("Book not found")
        book = Book.from_doc(doc)

        if self.book_model.delete_by_id(trimmed_id) == 0:
            raise InternalError("Failed to delete book")
        self.logger.info(f"Removed book {trimmed_id}")

        self.coordinator.on_book_removed(book)

        self.book_repository.evict_single(trimmed_id)
        self.book_repository.listing_remove([trimmed_id])
        return book
