# tests/test_core.py

import pytest
from datetime import datetime, timedelta, timezone

from doc_catalog.core.categories import DEFAULT_CATEGORIES, find_category, infer_category
from doc_catalog.core.document_store import DocumentStore
from doc_catalog.core.models import Document, DocumentDraft, SortField, SortOrder, ViewState
from doc_catalog.core.view import derive_view


class TickingClock:
    """A fake clock that moves forward by one second on every reading."""

    def __init__(self, start=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        now = self.current
        self.current += timedelta(seconds=1)
        return now


class FrozenClock:
    """A fake clock that never moves, like two calls within one tick."""

    def __init__(self, moment=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)):
        self.moment = moment

    def __call__(self):
        return self.moment


def make_draft(name="Report", size=100, category="pdf", tags=None, description=None):
    return DocumentDraft(name=name, type=category, size=size, category=category,
                         tags=list(tags or []), description=description)


@pytest.fixture
def store():
    return DocumentStore(clock=TickingClock())


# --- Mutations ---

def test_add_assigns_id_and_equal_timestamps(store):
    """A new document gets a fresh id and created_at == modified_at."""
    draft = make_draft(name="Budget 2024", size=2048, category="spreadsheet",
                       tags=["budget", "finance"], description="Forecast")

    document = store.add(draft)

    assert store.documents == [document]
    assert document.id
    assert document.created_at == document.modified_at
    assert document.name == "Budget 2024"
    assert document.size == 2048
    assert document.category == "spreadsheet"
    assert document.tags == ["budget", "finance"]
    assert document.description == "Forecast"
    assert document.is_favorite is False


def test_add_appends_to_the_end(store):
    """Documents keep insertion order in the canonical collection."""
    first = store.add(make_draft(name="First"))
    second = store.add(make_draft(name="Second"))

    assert [doc.id for doc in store.documents] == [first.id, second.id]


def test_update_does_not_alias_patch_lists(store):
    """A tag list passed to update is copied, like the tags of a draft."""
    document = store.add(make_draft(tags=["a"]))
    new_tags = ["b"]
    store.update(document.id, {"tags": new_tags})
    new_tags.append("c")

    assert store.get(document.id).tags == ["b"]


def test_add_does_not_alias_the_draft_tags(store):
    """Changing the caller's tag list later does not alter the stored record."""
    draft = make_draft(tags=["a"])
    document = store.add(draft)
    draft.tags.append("b")

    assert store.get(document.id).tags == ["a"]


def test_ids_unique_within_one_clock_tick():
    """Two additions at the same instant must not collide."""
    store = DocumentStore(clock=FrozenClock())

    ids = [store.add(make_draft(name=f"Doc {i}")).id for i in range(5)]

    assert len(set(ids)) == 5


def test_ids_stay_unique_across_add_update_remove():
    """Ids remain unique and removed ids are not handed out again."""
    store = DocumentStore(clock=FrozenClock())
    a = store.add(make_draft(name="A"))
    b = store.add(make_draft(name="B"))
    store.update(a.id, {"name": "A2"})
    store.remove(b.id)
    c = store.add(make_draft(name="C"))

    ids = [doc.id for doc in store.documents]
    assert len(ids) == len(set(ids))
    assert c.id != b.id


def test_update_merges_patch_and_refreshes_modified_at(store):
    """Unpatched fields are kept; modified_at moves forward; position is unchanged."""
    first = store.add(make_draft(name="First", tags=["x"], description="keep me"))
    store.add(make_draft(name="Second"))

    store.update(first.id, {"name": "Renamed"})

    updated = store.documents[0]
    assert updated.id == first.id
    assert updated.name == "Renamed"
    assert updated.tags == ["x"]
    assert updated.description == "keep me"
    assert updated.created_at == first.created_at
    assert updated.modified_at > first.modified_at


def test_update_ignores_patched_timestamps_and_id(store):
    """id and created_at are immutable; modified_at is always set by the store."""
    document = store.add(make_draft())
    long_ago = datetime(2000, 1, 1, tzinfo=timezone.utc)

    store.update(document.id, {"id": "hijacked", "created_at": long_ago, "modified_at": long_ago})

    updated = store.get(document.id)
    assert updated is not None
    assert store.get("hijacked") is None
    assert updated.created_at == document.created_at
    assert updated.modified_at > document.modified_at


def test_update_unknown_id_is_a_noop(store):
    """Updating a missing id changes nothing and does not persist."""
    store.add(make_draft())
    saved = []
    store.add_mutation_hook(saved.append)
    before = store.documents

    store.update("missing", {"name": "Ghost"})

    assert store.documents == before
    assert saved == []


def test_toggle_favorite_twice_restores_flag(store):
    """Toggling twice restores the flag while modified_at advances both times."""
    document = store.add(make_draft())

    store.toggle_favorite(document.id)
    once = store.get(document.id)
    store.toggle_favorite(document.id)
    twice = store.get(document.id)

    assert once.is_favorite is True
    assert twice.is_favorite is False
    assert document.modified_at < once.modified_at < twice.modified_at


def test_toggle_favorite_unknown_id_is_a_noop(store):
    store.add(make_draft())
    before = store.documents

    store.toggle_favorite("missing")

    assert store.documents == before


def test_remove_twice_is_harmless(store):
    """The second remove of the same id is a silent no-op."""
    keep = store.add(make_draft(name="Keep"))
    gone = store.add(make_draft(name="Gone"))

    store.remove(gone.id)
    store.remove(gone.id)

    assert store.documents == [keep]


def test_created_at_never_after_modified_at_with_backward_clock():
    """A clock that jumps back cannot break created_at <= modified_at."""
    readings = iter([
        datetime(2024, 3, 1, tzinfo=timezone.utc),
        datetime(2023, 1, 1, tzinfo=timezone.utc),
    ])
    store = DocumentStore(clock=lambda: next(readings))
    document = store.add(make_draft())

    store.update(document.id, {"size": 5})

    updated = store.get(document.id)
    assert updated.created_at <= updated.modified_at


# --- Observers ---

def test_mutation_hook_receives_collection_after_each_mutation(store):
    """Hooks run after add, update, toggle and remove, but not after view changes."""
    snapshots = []
    store.add_mutation_hook(lambda docs: snapshots.append([doc.id for doc in docs]))

    document = store.add(make_draft())
    store.update(document.id, {"name": "x"})
    store.toggle_favorite(document.id)
    store.set_search_term("x")
    store.set_sort_order(SortOrder.ASC)
    store.remove(document.id)

    assert snapshots == [[document.id], [document.id], [document.id], []]


def test_failing_hook_does_not_roll_back(store):
    """A persistence failure keeps the in-memory mutation."""
    def broken(_documents):
        raise OSError("disk full")

    store.add_mutation_hook(broken)
    document = store.add(make_draft(name="Survivor"))

    assert store.get(document.id).name == "Survivor"


def test_listeners_are_notified_and_can_unsubscribe(store):
    calls = []
    unsubscribe = store.subscribe(lambda s: calls.append(len(s.derived_view())))

    store.add(make_draft())
    store.set_search_term("nothing matches this")
    unsubscribe()
    store.set_search_term("")

    assert calls == [1, 0]


def test_store_instances_are_isolated():
    """Each store owns its own collection and view state."""
    one, two = DocumentStore(), DocumentStore()
    one.add(make_draft())
    one.set_search_term("report")

    assert two.documents == []
    assert two.view_state.search_term == ""


# --- Derived View: Filtering ---

@pytest.fixture
def budget_store(store):
    store.add(make_draft(name="Budget 2024", category="spreadsheet"))
    store.add(make_draft(name="Report", category="pdf", tags=["budget"]))
    return store


@pytest.mark.parametrize("term", ["budget", "BUDGET", "BuDgEt"])
def test_search_matches_name_or_tags_case_insensitively(budget_store, term):
    budget_store.set_search_term(term)

    names = sorted(doc.name for doc in budget_store.derived_view())

    assert names == ["Budget 2024", "Report"]


def test_category_filter_alone(budget_store):
    budget_store.set_selected_category("pdf")

    assert [doc.name for doc in budget_store.derived_view()] == ["Report"]


def test_search_matches_description(store):
    store.add(make_draft(name="Scan", description="Signed Contract"))
    store.add(make_draft(name="Other"))
    store.set_search_term("contract")

    assert [doc.name for doc in store.derived_view()] == ["Scan"]


def test_search_and_category_must_both_match(budget_store):
    budget_store.set_search_term("budget")
    budget_store.set_selected_category("spreadsheet")

    assert [doc.name for doc in budget_store.derived_view()] == ["Budget 2024"]


def test_clearing_category_filter_shows_everything(budget_store):
    budget_store.set_selected_category("pdf")
    budget_store.set_selected_category(None)

    assert len(budget_store.derived_view()) == 2
    assert budget_store.counts() == (2, 2)


def test_unknown_category_is_tolerated(store):
    """A document with an unregistered category never matches a filter but is still listed."""
    store.add(make_draft(name="Odd", category="video"))

    assert len(store.derived_view()) == 1
    store.set_selected_category("pdf")
    assert store.derived_view() == []
    assert find_category("video") is None


def test_view_reflects_latest_mutation(budget_store):
    """The view is recomputed on every read."""
    budget_store.set_search_term("renamed")
    assert budget_store.derived_view() == []

    target = budget_store.documents[0]
    budget_store.update(target.id, {"name": "Renamed budget"})

    assert [doc.id for doc in budget_store.derived_view()] == [target.id]


# --- Derived View: Sorting ---

def test_sort_by_size_both_directions(store):
    for size in (300, 100, 200):
        store.add(make_draft(name="Same", size=size))
    store.set_sort_field(SortField.SIZE)

    store.set_sort_order(SortOrder.ASC)
    assert [doc.size for doc in store.derived_view()] == [100, 200, 300]

    store.set_sort_order(SortOrder.DESC)
    assert [doc.size for doc in store.derived_view()] == [300, 200, 100]


def test_sort_by_name_is_case_insensitive(store):
    for name in ("beta", "Alpha", "gamma"):
        store.add(make_draft(name=name))
    store.set_sort_field("name")
    store.set_sort_order("asc")

    assert [doc.name for doc in store.derived_view()] == ["Alpha", "beta", "gamma"]


def test_default_sort_is_modified_at_descending(store):
    """The most recently modified document comes first by default."""
    old = store.add(make_draft(name="Old"))
    new = store.add(make_draft(name="New"))
    store.update(old.id, {"size": 1})

    assert [doc.id for doc in store.derived_view()] == [old.id, new.id]


@pytest.mark.parametrize("order", [SortOrder.ASC, SortOrder.DESC])
def test_ties_keep_insertion_order_in_both_directions(order):
    """Documents equal under the sort key keep A-before-B whatever the direction."""
    store = DocumentStore(clock=FrozenClock())
    a = store.add(make_draft(name="Same"))
    b = store.add(make_draft(name="Same"))
    store.set_sort_field(SortField.MODIFIED_AT)
    store.set_sort_order(order)

    assert [doc.id for doc in store.derived_view()] == [a.id, b.id]


def test_sort_by_type_is_independent_from_category():
    """type and category stay separate fields; sorting by type uses type."""
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    documents = [
        Document(id="1", name="x", type="zeta", size=1, created_at=now, modified_at=now, category="archive"),
        Document(id="2", name="y", type="Alpha", size=1, created_at=now, modified_at=now, category="pdf"),
    ]

    view = derive_view(documents, ViewState(sort_field=SortField.TYPE, sort_order=SortOrder.ASC))

    assert [doc.id for doc in view] == ["2", "1"]


def test_derive_view_does_not_mutate_input():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    documents = [
        Document(id=str(i), name=n, type="pdf", size=1, created_at=now, modified_at=now, category="pdf")
        for i, n in enumerate(["b", "a"])
    ]

    derive_view(documents, ViewState(sort_field=SortField.NAME, sort_order=SortOrder.ASC))

    assert [doc.name for doc in documents] == ["b", "a"]


# --- Category Registry ---

def test_registry_has_six_fixed_categories():
    assert [c.id for c in DEFAULT_CATEGORIES] == [
        "pdf", "image", "document", "spreadsheet", "presentation", "archive"
    ]


@pytest.mark.parametrize("mime_type, expected", [
    ("application/pdf", "pdf"),
    ("image/png", "image"),
    ("application/vnd.openxmlformats-officedocument.presentationml.presentation", "presentation"),
    ("application/vnd.ms-powerpoint", "presentation"),
    ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "spreadsheet"),
    ("application/vnd.ms-excel", "spreadsheet"),
    ("application/zip", "archive"),
    ("application/x-rar-compressed", "archive"),
    ("text/plain", "document"),
    (None, "document"),
])
def test_infer_category_from_mime_type(mime_type, expected):
    assert infer_category(mime_type) == expected
