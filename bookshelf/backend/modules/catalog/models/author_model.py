from typing import Dict, Any

from pymongo.collection import Collection
from shared.modules.catalog.models.author import Author
from backend.models.base_nosql_model import BaseNoSqlModel


class AuthorModel(BaseNoSqlModel):
    """
    MongoDB persistence wrapper for Author documents.
    Inherits the primary-store operations from BaseNoSqlModel.
    """
    entity_type = "author"

    @property
    def collection(self) -> Collection:
        """Get the authors collection from the database."""
        return self.db.authors

    @classmethod
    def _from_doc(cls, doc: Dict[str, Any]) -> Author:
        return Author.from_doc(doc)
