from typing import List, Dict, Any
import uuid
from pydantic import BaseModel, ConfigDict, Field


class Book(BaseModel):
    """
    A Book document. ``author_id`` must reference an existing Author.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    title: str
    genres: List[str] = Field(default_factory=list)
    publication_date: str = Field(alias="publicationDate")
    publisher: str
    summary: str
    isbn: str
    language: str
    page_count: int = Field(alias="pageCount")
    price: float
    format: List[str] = Field(default_factory=list)
    author_id: str = Field(alias="authorId")

    def to_doc(self) -> Dict[str, Any]:
        """Document form, keyed by the stored field names."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "Book":
        doc = dict(doc)
        doc["_id"] = str(doc["_id"])
        return cls.model_validate(doc)

    def has_genre(self, genre: str) -> bool:
        """Case-insensitive genre membership; ``genre`` is expected lower-cased."""
        return genre in (g.lower().strip() for g in self.genres)
