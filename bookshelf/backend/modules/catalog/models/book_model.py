from typing import Dict, Any, List, Optional

from pymongo.collection import Collection
from shared.modules.catalog.models.book import Book
from backend.models.base_nosql_model import BaseNoSqlModel


class BookModel(BaseNoSqlModel):
    """
    MongoDB persistence wrapper for Book documents.
    """
    entity_type = "book"

    @property
    def collection(self) -> Collection:
        """Get the books collection from the database."""
        return self.db.books

    @classmethod
    def _from_doc(cls, doc: Dict[str, Any]) -> Book:
        return Book.from_doc(doc)

    def find_by_author(self, author_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return self.find_where({"authorId": author_id}, limit=limit)

    def delete_by_author(self, author_id: str) -> int:
        return self.delete_where({"authorId": author_id})
