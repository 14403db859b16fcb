# doc_catalog/core/document_store.py

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .categories import DEFAULT_CATEGORIES
from .models import (
    Category,
    Document,
    DocumentDraft,
    FIELD_NAMES,
    IMMUTABLE_FIELDS,
    SortField,
    SortOrder,
    ViewState,
)
from .view import derive_view

logger = logging.getLogger(__name__)

Listener = Callable[["DocumentStore"], None]
MutationHook = Callable[[List[Document]], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStore:
    """
    The single source of truth for the document collection and the current
    view parameters.

    The store is an explicitly constructed container: consumers receive it by
    reference and there is no module-level instance. Two kinds of observers
    can be registered:

    1. Listeners: called after ANY state change (mutation or view setter).
       They should re-read `derived_view()`.
    2. Mutation hooks: called with the canonical collection after every
       mutation of it. This is where persistence plugs in.

    Operations on unknown ids are silent no-ops. A failing hook or listener
    is logged and never rolls back the in-memory change.
    """

    def __init__(
            self,
            categories: Optional[List[Category]] = None,
            view_state: Optional[ViewState] = None,
            clock: Callable[[], datetime] = utc_now,
    ):
        self._categories: List[Category] = list(categories if categories is not None else DEFAULT_CATEGORIES)
        self._documents: List[Document] = []
        self._retired_ids: set = set()
        self._view: ViewState = view_state if view_state is not None else ViewState()
        self._clock = clock
        self._listeners: List[Listener] = []
        self._mutation_hooks: List[MutationHook] = []

    # --- Initialization & Observers ---

    def init(self, documents: List[Document]):
        """Replaces the canonical collection, e.g. with loaded or seed data."""
        self._documents = list(documents)
        logger.info(f"Document store initialized with {len(self._documents)} documents.")
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers a change listener and returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def add_mutation_hook(self, hook: MutationHook):
        self._mutation_hooks.append(hook)

    # --- Read Accessors ---

    @property
    def documents(self) -> List[Document]:
        return list(self._documents)

    @property
    def categories(self) -> List[Category]:
        return list(self._categories)

    @property
    def view_state(self) -> ViewState:
        return replace(self._view)

    def get(self, doc_id: str) -> Optional[Document]:
        index = self._index_of(doc_id)
        return self._documents[index] if index is not None else None

    def derived_view(self) -> List[Document]:
        return derive_view(self._documents, self._view)

    def counts(self) -> Tuple[int, int]:
        """Returns (visible in the derived view, total in the collection)."""
        return len(self.derived_view()), len(self._documents)

    # --- Mutations ---

    def add(self, draft: DocumentDraft) -> Document:
        """
        Creates a document from the draft and appends it to the collection.

        Both timestamps are set to the same instant and a fresh, collision
        checked id is assigned.
        """
        now = self._clock()
        document = Document.from_draft(draft, doc_id=self._next_id(now), now=now)
        self._documents.append(document)
        logger.info(f"Added document '{document.name}' with id {document.id}.")
        self._after_mutation()
        return document

    def update(self, doc_id: str, patch: Mapping[str, Any]):
        """
        Merges `patch` onto the document with the given id.

        Patch keys are the Document attribute names. `modified_at` is always
        refreshed, whatever the patch says, and the record keeps its position.
        """
        index = self._index_of(doc_id)
        if index is None:
            logger.debug(f"Update ignored: no document with id {doc_id}.")
            return

        current = self._documents[index]
        changes: Dict[str, Any] = {}
        for key, value in patch.items():
            if key in IMMUTABLE_FIELDS:
                logger.warning(f"Ignoring attempt to change immutable field '{key}' of document {doc_id}.")
            elif key not in FIELD_NAMES:
                logger.warning(f"Ignoring unknown field '{key}' in update of document {doc_id}.")
            else:
                # Lists are copied so the caller cannot alias the stored record.
                changes[key] = list(value) if isinstance(value, list) else value
        # A clock running backwards must not break created_at <= modified_at.
        changes["modified_at"] = max(self._clock(), current.created_at)

        self._documents[index] = replace(current, **changes)
        logger.info(f"Updated document {doc_id}: {sorted(k for k in changes if k != 'modified_at')}.")
        self._after_mutation()

    def remove(self, doc_id: str):
        index = self._index_of(doc_id)
        if index is None:
            logger.debug(f"Remove ignored: no document with id {doc_id}.")
            return
        removed = self._documents.pop(index)
        self._retired_ids.add(removed.id)
        logger.info(f"Removed document '{removed.name}' ({doc_id}).")
        self._after_mutation()

    def toggle_favorite(self, doc_id: str):
        current = self.get(doc_id)
        if current is None:
            logger.debug(f"Toggle favorite ignored: no document with id {doc_id}.")
            return
        self.update(doc_id, {"is_favorite": not current.is_favorite})

    # --- View State Setters (never persisted) ---

    def set_search_term(self, term: str):
        self._view.search_term = term
        self._notify()

    def set_selected_category(self, category_id: Optional[str]):
        self._view.selected_category = category_id
        self._notify()

    def set_sort_field(self, sort_field: SortField | str):
        self._view.sort_field = SortField(sort_field)
        self._notify()

    def set_sort_order(self, sort_order: SortOrder | str):
        self._view.sort_order = SortOrder(sort_order)
        self._notify()

    # --- Internals ---

    def _index_of(self, doc_id: str) -> Optional[int]:
        for index, document in enumerate(self._documents):
            if document.id == doc_id:
                return index
        return None

    def _next_id(self, now: datetime) -> str:
        """
        Derives an id from the creation time in milliseconds, bumping it
        until it is unused, including by removed documents. Two additions in
        the same millisecond therefore still get distinct ids.
        """
        existing = {document.id for document in self._documents} | self._retired_ids
        candidate = int(now.timestamp() * 1000)
        while str(candidate) in existing:
            candidate += 1
        return str(candidate)

    def _after_mutation(self):
        snapshot = list(self._documents)
        for hook in list(self._mutation_hooks):
            try:
                hook(snapshot)
            except Exception as e:
                logger.error(f"Post-mutation hook failed; in-memory state is kept: {e}", exc_info=True)
        self._notify()

    def _notify(self):
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Store listener failed: {e}", exc_info=True)
