from typing import List, Dict, Any
import uuid
from pydantic import BaseModel, ConfigDict, Field


class Author(BaseModel):
    """
    An Author document.
    Shared between the store models, the cache layer and the controllers.

    ``num_of_books`` and ``books`` are a denormalized copy of the reverse
    Book.authorId relationship; only the RelationshipCoordinator writes them.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    first_name: str
    last_name: str
    date_of_birth: str
    hometown_city: str = Field(alias="hometownCity")
    hometown_state: str = Field(alias="hometownState")
    num_of_books: int = Field(default=0, ge=0, alias="numOfBooks")
    books: List[str] = Field(default_factory=list)

    def to_doc(self) -> Dict[str, Any]:
        """Document form, keyed by the stored field names."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "Author":
        doc = dict(doc)
        doc["_id"] = str(doc["_id"])
        return cls.model_validate(doc)
