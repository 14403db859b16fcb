# doc_catalog/core/models.py

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class SortField(str, Enum):
    """The document attributes the derived view can be ordered by."""
    NAME = "name"
    CREATED_AT = "createdAt"
    MODIFIED_AT = "modifiedAt"
    SIZE = "size"
    TYPE = "type"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Category:
    """
    A static classification descriptor. `color` and `icon` are presentation
    hints only; the core never interprets them.
    """
    id: str
    name: str
    color: str
    icon: str


@dataclass
class DocumentDraft:
    """Everything a caller supplies when adding a document."""
    name: str
    type: str
    size: int
    category: str
    tags: List[str] = field(default_factory=list)
    description: Optional[str] = None
    url: Optional[str] = None
    is_favorite: bool = False


@dataclass
class Document:
    """A metadata record describing one catalogued document."""
    id: str
    name: str
    type: str
    size: int
    created_at: datetime
    modified_at: datetime
    category: str
    tags: List[str] = field(default_factory=list)
    description: Optional[str] = None
    url: Optional[str] = None
    is_favorite: bool = False

    @classmethod
    def from_draft(cls, draft: DocumentDraft, doc_id: str, now: datetime) -> "Document":
        data = asdict(draft)
        # Copy the tag list so the caller's draft cannot alias the stored record.
        data["tags"] = list(draft.tags)
        return cls(id=doc_id, created_at=now, modified_at=now, **data)


# Python attribute name -> persisted field name.
FIELD_NAMES: Dict[str, str] = {
    "id": "id",
    "name": "name",
    "type": "type",
    "size": "size",
    "created_at": "createdAt",
    "modified_at": "modifiedAt",
    "tags": "tags",
    "category": "category",
    "description": "description",
    "url": "url",
    "is_favorite": "isFavorite",
}

# Fields a patch may never touch.
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


@dataclass
class ViewState:
    """The ephemeral parameters of the derived view. Never persisted."""
    search_term: str = ""
    selected_category: Optional[str] = None
    sort_field: SortField = SortField.MODIFIED_AT
    sort_order: SortOrder = SortOrder.DESC

