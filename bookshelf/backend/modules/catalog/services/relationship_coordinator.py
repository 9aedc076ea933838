"""
Keeps Author.books / Author.numOfBooks in step with Book.authorId.

Every method changes the primary store first, using single-document update
operators so the counter and the list move together, and only then touches
the cache. Nothing here is transactional across documents: when the author
side fails after the book write committed, the gap is logged and reported.
"""
import logging
from typing import Any, Dict, List

from backend.modules.catalog.models.author_model import AuthorModel
from backend.modules.catalog.models.book_model import BookModel
from backend.modules.catalog.services.entity_repository import EntityRepository
from shared.modules.catalog.errors import InternalError
from shared.modules.catalog.models.author import Author
from shared.modules.catalog.models.book import Book

COUNTER_FIELD = "numOfBooks"
LIST_FIELD = "books"


def _attach(doc: Dict[str, Any], book_id: str) -> Dict[str, Any]:
    books = doc.get(LIST_FIELD, [])
    if book_id not in books:
        doc[LIST_FIELD] = books + [book_id]
        doc[COUNTER_FIELD] = doc.get(COUNTER_FIELD, 0) + 1
    return doc


def _detach(doc: Dict[str, Any], book_id: str) -> Dict[str, Any]:
    books = doc.get(LIST_FIELD, [])
    if book_id in books:
        doc[LIST_FIELD] = [b for b in books if b != book_id]
        doc[COUNTER_FIELD] = max(doc.get(COUNTER_FIELD, 0) - 1, 0)
    return doc


class RelationshipCoordinator:
    """
    Maintains the denormalized Author side of the Author <-> Book relationship
    across MongoDB and the cache.
    """

    def __init__(
        self,
        author_model: AuthorModel,
        book_model: BookModel,
        author_repository: EntityRepository,
        book_repository: EntityRepository,
    ):
        self.author_model = author_model
        self.book_model = book_model
        self.author_repository = author_repository
        self.book_repository = book_repository
        self.logger = logging.getLogger(self.__class__.__name__)

    def on_book_added(self, book: Book) -> Author:
        """
        Count a freshly inserted book against its author.
        Returns the author as stored after the update.
        """
        doc = self.author_model.increment_and_push(book.author_id, COUNTER_FIELD, LIST_FIELD, book.id)
        if not doc:
            self.logger.error(
                f"Book {book.id} was stored but author {book.author_id} could not be updated; "
                f"{COUNTER_FIELD} is out of step until repaired"
            )
            raise InternalError("Could not update the author of the new book")

        author = Author.from_doc(doc)
        # The full updated author is at hand, so patch rather than evict
        self.author_repository.upsert_single(author)
        self.author_repository.listing_replace(author)
        return author

    def on_book_reparented(self, book_id: str, old_author_id: str, new_author_id: str) -> None:
        """
        Move a book from one author to another. Safe to repeat: the book id is
        only added where absent and only removed where present.
        """
        if old_author_id == new_author_id:
            return

        if not self.author_model.pull_and_decrement(old_author_id, COUNTER_FIELD, LIST_FIELD, book_id):
            self.logger.warning(f"Author {old_author_id} did not list book {book_id}; nothing to detach")
        if not self.author_model.add_to_set_and_increment(new_author_id, COUNTER_FIELD, LIST_FIELD, book_id):
            self.logger.warning(f"Author {new_author_id} already lists book {book_id} or no longer exists")

        # Only a partial update happened in the store, so the per-id entries
        # are dropped and reloaded on next read
        self.author_repository.evict_single(old_author_id)
        self.author_repository.evict_single(new_author_id)

        def move(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
            for doc in docs:
                if doc["_id"] == old_author_id:
                    _detach(doc, book_id)
                elif doc["_id"] == new_author_id:
                    _attach(doc, book_id)
            return docs

        self.author_repository.invalidate_listing(move)

    def on_book_removed(self, book: Book) -> None:
        """Uncount a deleted book from its author."""
        if not self.author_model.pull_and_decrement(book.author_id, COUNTER_FIELD, LIST_FIELD, book.id):
            self.logger.warning(f"Author {book.author_id} did not list removed book {book.id}")

        def detach(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
            return [_detach(doc, book.id) if doc["_id"] == book.author_id else doc for doc in docs]

        self.author_repository.invalidate_listing(detach)
        self.author_repository.evict_single(book.author_id)

    def on_author_removed(self, author_id: str) -> List[Book]:
        """
        Delete every book written by ``author_id``. Must run before the author
        document itself is deleted. Returns the books that were removed.
        """
        books = [Book.from_doc(doc) for doc in self.book_model.find_by_author(author_id)]
        deleted = self.book_model.delete_by_author(author_id)
        if deleted != len(books):
            self.logger.warning(
                f"Expected to delete {len(books)} books of author {author_id}, deleted {deleted}"
            )

        self.book_repository.invalidate_listing(
            lambda docs: [doc for doc in docs if doc.get("authorId") != author_id]
        )
        for book in books:
            self.book_repository.evict_single(book.id)
        return books
