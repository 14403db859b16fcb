# doc_catalog/core/categories.py

import logging
from typing import List, Optional

from .models import Category

logger = logging.getLogger(__name__)

# Used for anything that no more specific rule claims.
FALLBACK_CATEGORY_ID = "document"

# --- The Fixed Category Registry ---
# Six entries, defined once at process start and never edited at runtime.
DEFAULT_CATEGORIES: List[Category] = [
    Category(id="pdf", name="PDF", color="destructive", icon="FileText"),
    Category(id="image", name="Images", color="success", icon="Image"),
    Category(id="document", name="Documents", color="primary", icon="File"),
    Category(id="spreadsheet", name="Spreadsheets", color="warning", icon="Table"),
    Category(id="presentation", name="Presentations", color="secondary", icon="Presentation"),
    Category(id="archive", name="Archives", color="muted", icon="Archive"),
]

# Ordered MIME-type fragments. The first rule whose fragment appears in the
# MIME type wins, so 'pdf' must be checked before the broader office rules.
MIME_RULES: List[tuple] = [
    (("pdf",), "pdf"),
    (("image",), "image"),
    (("presentation", "powerpoint"), "presentation"),
    (("spreadsheet", "excel"), "spreadsheet"),
    (("zip", "rar"), "archive"),
]


def category_ids(categories: List[Category] = DEFAULT_CATEGORIES) -> List[str]:
    return [category.id for category in categories]


def find_category(category_id: Optional[str], categories: List[Category] = DEFAULT_CATEGORIES) -> Optional[Category]:
    """
    Looks up a category by id.

    Documents may carry a category id that is not registered; those simply
    resolve to None and match no filter or badge.
    """
    for category in categories:
        if category.id == category_id:
            return category
    return None


def infer_category(mime_type: Optional[str]) -> str:
    """
    Maps a MIME type to one of the registered category ids.

    Args:
        mime_type: The MIME type reported for an uploaded file, or None if
                   it could not be determined.

    Returns:
        The id of the matching category, FALLBACK_CATEGORY_ID otherwise.
    """
    if not mime_type:
        return FALLBACK_CATEGORY_ID

    lowered = mime_type.lower()
    for fragments, category_id in MIME_RULES:
        if any(fragment in lowered for fragment in fragments):
            logger.debug(f"MIME type '{mime_type}' classified as '{category_id}'.")
            return category_id
    return FALLBACK_CATEGORY_ID
