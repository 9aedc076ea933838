"""
Input validation for catalog operations.

Every function either returns the cleaned (trimmed / normalized) value or
raises ValidationError. Services call these before touching either store.
"""
import math
import re
import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from shared.modules.catalog.errors import ValidationError

US_STATES = frozenset([
    "AL", "AK", "AS", "AZ", "AR", "CA", "CO", "CT", "DE", "DC", "FL",
    "GA", "GU", "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA",
    "ME", "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV",
    "NH", "NJ", "NM", "NY", "NC", "ND", "MP", "OH", "OK", "OR",
    "PA", "PR", "RI", "SC", "SD", "TN", "TX", "UT", "VT", "VA",
    "VI", "WA", "WV", "WI", "WY",
])

NAME_PATTERN = re.compile(r"^[A-Za-z\s]*[A-Za-z][A-Za-z\s]*$")

ISBN13_PATTERN = re.compile(
    r"^(?:ISBN(?:-13)?:?\ )?"
    r"(?=[0-9]{13}$|(?=(?:[0-9]+[-\ ]){4})[-\ 0-9]{17}$)"
    r"97[89][-\ ]?[0-9]{1,5}[-\ ]?[0-9]+[-\ ]?[0-9]+[-\ ]?[0-9]$"
)

# (shape, strptime format). strptime alone would accept "2020-1-1", so the
# shape check keeps ISO dates zero-padded while M/D/YYYY stays lenient.
_ISO_DATE = (re.compile(r"^\d{4}-\d{2}-\d{2}$"), "%Y-%m-%d")
_US_DATE = (re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$"), "%m/%d/%Y")

BIRTH_DATE_FORMATS = (_ISO_DATE, _US_DATE)
PUBLICATION_DATE_FORMATS = (_US_DATE,)

AUTHOR_TEXT_FIELDS = ("first_name", "last_name", "date_of_birth", "hometownCity", "hometownState")
BOOK_TEXT_FIELDS = ("title", "publisher", "summary", "language")


def _parse_date(value: str, formats) -> Optional[date]:
    for shape, fmt in formats:
        if shape.match(value):
            try:
                return datetime.strptime(value, fmt).date()
            except ValueError:
                return None
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_finite_number(value: Any) -> bool:
    if not _is_number(value):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints too large for a float
        return False


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------

def require_id(value: Any, label: str = "ID") -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} cannot be empty or contain only spaces")
    return value.strip()


def require_uuid(value: Any, label: str = "ID") -> str:
    trimmed = require_id(value, label)
    try:
        uuid.UUID(trimmed)
    except ValueError:
        raise ValidationError(f"Invalid {label}")
    return trimmed


def require_text(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} cannot be empty or contain only spaces")
    return value.strip()


def validate_name(value: Any, label: str) -> str:
    trimmed = require_text(value, label)
    if not NAME_PATTERN.match(trimmed):
        raise ValidationError(f"Invalid {label}: only letters and spaces are allowed")
    return trimmed


def validate_state(value: Any) -> str:
    state = require_text(value, "hometownState").upper()
    if state not in US_STATES:
        raise ValidationError("Invalid state abbreviation")
    return state


def parse_birth_date(value: str) -> Optional[date]:
    return _parse_date(value.strip(), BIRTH_DATE_FORMATS)


def parse_publication_date(value: str) -> Optional[date]:
    return _parse_date(value.strip(), PUBLICATION_DATE_FORMATS)


def validate_birth_date(value: Any) -> str:
    trimmed = require_text(value, "date_of_birth")
    if parse_birth_date(trimmed) is None:
        raise ValidationError("Invalid date_of_birth")
    return trimmed


def validate_publication_date(value: Any) -> str:
    trimmed = require_text(value, "publicationDate")
    if parse_publication_date(trimmed) is None:
        raise ValidationError("Invalid publication date")
    return trimmed


def validate_isbn(value: Any) -> str:
    trimmed = require_text(value, "isbn")
    if not ISBN13_PATTERN.match(trimmed):
        raise ValidationError("Invalid ISBN-13 format")
    return trimmed


def validate_page_count(value: Any) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ValidationError("Invalid pageCount")
    return value


def validate_price(value: Any) -> float:
    if not _is_finite_number(value) or value <= 0:
        raise ValidationError("Invalid price")
    return float(value)


def validate_string_list(values: Any, label: str) -> List[str]:
    if not isinstance(values, list) or not values:
        raise ValidationError(f"{label} must be a non-empty list")
    if not all(isinstance(v, str) and v.strip() for v in values):
        raise ValidationError(f"{label} should not contain empty strings")
    return [v.strip() for v in values]


def validate_limit(limit: Any) -> Optional[int]:
    if limit is None:
        return None
    if not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0:
        raise ValidationError("Limit should be greater than 0")
    return limit


def validate_price_range(min_price: Any, max_price: Any) -> Tuple[float, float]:
    if not _is_finite_number(min_price) or not _is_finite_number(max_price):
        raise ValidationError("Invalid price range")
    if min_price < 0 or max_price <= min_price:
        raise ValidationError("Invalid price range")
    return min_price, max_price


def normalize_term(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} cannot be empty")
    return value.strip().lower()


def ensure_published_after_birth(publication_date: str, date_of_birth: str) -> None:
    """Raise unless the book was published on or after the author's birth date."""
    published = parse_publication_date(publication_date)
    born = parse_birth_date(date_of_birth)
    if published is None or born is None:
        raise ValidationError("Invalid date format")
    if published < born:
        raise ValidationError("Publication date cannot be before the author's date of birth")


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

def require_payload(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def validate_new_author(data: Dict[str, Any]) -> Dict[str, Any]:
    """Clean an add-author payload; every field is required."""
    require_payload(data)
    for field in AUTHOR_TEXT_FIELDS:
        require_text(data.get(field), field)
    return {
        "first_name": validate_name(data["first_name"], "first_name"),
        "last_name": validate_name(data["last_name"], "last_name"),
        "date_of_birth": validate_birth_date(data["date_of_birth"]),
        "hometownCity": require_text(data["hometownCity"], "hometownCity"),
        "hometownState": validate_state(data["hometownState"]),
    }


def validate_author_changes(data: Dict[str, Any]) -> Dict[str, Any]:
    """Clean an edit-author payload; only provided fields are checked."""
    require_payload(data)
    changes = {}
    if data.get("first_name") is not None:
        changes["first_name"] = validate_name(data["first_name"], "first_name")
    if data.get("last_name") is not None:
        changes["last_name"] = validate_name(data["last_name"], "last_name")
    if data.get("date_of_birth") is not None:
        changes["date_of_birth"] = validate_birth_date(data["date_of_birth"])
    if data.get("hometownCity") is not None:
        changes["hometownCity"] = require_text(data["hometownCity"], "hometownCity")
    if data.get("hometownState") is not None:
        changes["hometownState"] = validate_state(data["hometownState"])
    if not changes:
        raise ValidationError("No fields provided to update")
    return changes


_BOOK_FIELD_VALIDATORS = {
    "title": lambda v: require_text(v, "title"),
    "genres": lambda v: validate_string_list(v, "genres"),
    "publicationDate": validate_publication_date,
    "publisher": lambda v: require_text(v, "publisher"),
    "summary": lambda v: require_text(v, "summary"),
    "isbn": validate_isbn,
    "language": lambda v: require_text(v, "language"),
    "pageCount": validate_page_count,
    "price": validate_price,
    "format": lambda v: validate_string_list(v, "format"),
    "authorId": lambda v: require_uuid(v, "author ID"),
}


def validate_new_book(data: Dict[str, Any]) -> Dict[str, Any]:
    """Clean an add-book payload; every field is required."""
    require_payload(data)
    return {field: check(data.get(field)) for field, check in _BOOK_FIELD_VALIDATORS.items()}


def validate_book_changes(data: Dict[str, Any]) -> Dict[str, Any]:
    """Clean an edit-book payload; only provided fields are checked."""
    require_payload(data)
    changes = {
        field: check(data[field])
        for field, check in _BOOK_FIELD_VALIDATORS.items()
        if data.get(field) is not None
    }
    if not changes:
        raise ValidationError("No fields provided to update")
    return changes
