"""
Base model class for MongoDB operations.
Provides the primary-store operations every catalog entity needs, against a
database handed in explicitly or taken from the Flask context.
"""
from typing import Optional, Any, Dict, List

from pymongo import ReturnDocument
from pymongo.collection import Collection

from backend.database.context import DatabaseContext


class BaseNoSqlModel:
    """
    Base class for MongoDB models.

    All methods work on raw documents (dicts keyed by stored field names).
    Relationship counters are only ever changed through single-document
    update operators, so concurrent writers cannot make a counter and its
    list diverge.
    """

    def __init__(self, db=None):
        """Use ``db`` when given, otherwise resolve it from the Flask context."""
        self._db = db

    @property
    def db(self):
        if self._db is not None:
            return self._db
        return DatabaseContext.get_mongo_db()

    @property
    def collection(self) -> Collection:
        """
        Get the MongoDB collection for this model.
        Override in subclasses to specify collection name.
        """
        raise NotImplementedError("Subclasses must implement collection property")

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def find_all(self) -> Optional[List[Dict[str, Any]]]:
        return list(self.collection.find({}))

    def find_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"_id": doc_id})

    def find_where(self, query: Dict[str, Any], limit: Optional[int] = None) -> List[Dict[str, Any]]:
        cursor = self.collection.find(query)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def insert(self, doc: Dict[str, Any]) -> bool:
        """Insert a document; True only when the server acknowledged it."""
        result = self.collection.insert_one(doc)
        return bool(result.acknowledged and result.inserted_id)

    def update_fields(self, doc_id: str, fields: Dict[str, Any]) -> int:
        """$set the given fields. Returns the modified count."""
        result = self.collection.update_one({"_id": doc_id}, {"$set": fields})
        return result.modified_count

    def increment_and_push(self, doc_id: str, counter_field: str, list_field: str, value: Any) -> Optional[Dict[str, Any]]:
        """
        Increment ``counter_field`` and append ``value`` to ``list_field`` in
        one atomic update. Returns the document after the update, or None.
        """
        return self.collection.find_one_and_update(
            {"_id": doc_id},
            {"$inc": {counter_field: 1}, "$push": {list_field: value}},
            return_document=ReturnDocument.AFTER,
        )

    def add_to_set_and_increment(self, doc_id: str, counter_field: str, list_field: str, value: Any) -> int:
        """
        Add ``value`` to ``list_field`` and increment the counter, only when the
        value is not already present. Repeating the call is a no-op.
        """
        result = self.collection.update_one(
            {"_id": doc_id, list_field: {"$ne": value}},
            {"$addToSet": {list_field: value}, "$inc": {counter_field: 1}},
        )
        return result.modified_count

    def pull_and_decrement(self, doc_id: str, counter_field: str, list_field: str, value: Any) -> int:
        """
        Remove ``value`` from ``list_field`` and decrement the counter, only
        when the value is present, so the counter never drifts below the list.
        """
        result = self.collection.update_one(
            {"_id": doc_id, list_field: value},
            {"$pull": {list_field: value}, "$inc": {counter_field: -1}},
        )
        return result.modified_count

    def delete_by_id(self, doc_id: str) -> int:
        return self.collection.delete_one({"_id": doc_id}).deleted_count

    def delete_where(self, query: Dict[str, Any]) -> int:
        return self.collection.delete_many(query).deleted_count

    @classmethod
    def _from_doc(cls, doc: Dict[str, Any]) -> Any:
        """
        Convert MongoDB document to model instance.
        Override in subclasses to provide proper model instantiation.
        """
        raise NotImplementedError("Subclasses must implement _from_doc method")
