# doc_catalog/core/view.py

from typing import Any, Callable, Iterable, List

from .models import Document, SortField, SortOrder, ViewState


def matches_search(document: Document, search_term: str) -> bool:
    """Case-insensitive substring match against the name, any tag, or the description."""
    if not search_term:
        return True
    needle = search_term.lower()
    if needle in document.name.lower():
        return True
    if any(needle in tag.lower() for tag in document.tags):
        return True
    return bool(document.description) and needle in document.description.lower()


def matches_category(document: Document, selected_category: str | None) -> bool:
    return not selected_category or document.category == selected_category


def sort_key_for(sort_field: SortField) -> Callable[[Document], Any]:
    """Returns the key function used to order documents by the given field."""
    if sort_field == SortField.CREATED_AT:
        return lambda doc: doc.created_at.timestamp()
    if sort_field == SortField.MODIFIED_AT:
        return lambda doc: doc.modified_at.timestamp()
    if sort_field == SortField.SIZE:
        return lambda doc: doc.size
    if sort_field == SortField.TYPE:
        return lambda doc: doc.type.lower()
    return lambda doc: doc.name.lower()


def derive_view(documents: Iterable[Document], view: ViewState) -> List[Document]:
    """
    Computes the filtered and sorted view of a document collection.

    This is a pure function: it never mutates its inputs and is recomputed on
    every read, so it always reflects the latest collection and view state.

    Args:
        documents: The canonical collection, in insertion order.
        view: The current search term, category filter and sort parameters.

    Returns:
        A new list containing the visible documents in display order.
    """
    visible = [
        doc for doc in documents
        if matches_category(doc, view.selected_category) and matches_search(doc, view.search_term)
    ]
    # sorted() is stable and reverse=True keeps equal elements in their
    # original order, so ties never flip when the direction changes.
    return sorted(
        visible,
        key=sort_key_for(SortField(view.sort_field)),
        reverse=SortOrder(view.sort_order) == SortOrder.DESC,
    )
