"""
Tests for the database-backed contact store.
"""

import pytest

from cardsnap.schemas.contact import ContactRecord
from cardsnap.services.contact_store_service import ContactStoreService


@pytest.fixture
def store(db_session):
    return ContactStoreService(db_session)


@pytest.fixture
def populated(store):
    jane = store.save_contact(ContactRecord(name="Jane Doe", phone="+14155552671",
                                            email="jane@acme.com", company="Acme Inc",
                                            event_tag="WebSummit"))
    robert = store.save_contact(ContactRecord(name="Robert Lee", phone="5551234567",
                                              email="robert@firm.com", company="Firm LLC",
                                              event_tag="CES"))
    mary = store.save_contact(ContactRecord(name="Mary Ann Smith", company="Blue River Bakery"),
                              image_ref="cards/mary.jpg")
    return jane, robert, mary


class TestCrud:

    def test_save_and_get(self, store):
        saved = store.save_contact(ContactRecord(name="Jane Doe", email="jane@acme.com"))
        assert saved.id is not None
        assert saved.created_at is not None

        fetched = store.get_contact(saved.id)
        assert fetched.name == "Jane Doe"
        assert fetched.email == "jane@acme.com"
        assert fetched.phone == ""
        assert fetched.image_ref is None

    def test_get_missing(self, store):
        assert store.get_contact(999) is None

    def test_list_newest_first(self, store, populated):
        jane, robert, mary = populated
        assert [c.id for c in store.list_contacts()] == [mary.id, robert.id, jane.id]

    def test_update(self, store, populated):
        jane, _, _ = populated
        updated = store.update_contact(jane.id, {"company": "Acme Holdings", "phone": None, "id": 42})
        assert updated.id == jane.id
        assert updated.company == "Acme Holdings"
        assert updated.phone == "+14155552671"

    def test_update_missing(self, store):
        assert store.update_contact(999, {"name": "Nobody"}) is None

    def test_delete(self, store, populated):
        jane, _, _ = populated
        assert store.delete_contact(jane.id) is True
        assert store.get_contact(jane.id) is None
        assert store.delete_contact(jane.id) is False

    def test_clear(self, store, populated):
        assert store.clear_contacts() == 3
        assert store.list_contacts() == []


class TestSearch:

    def test_blank_query_returns_everything(self, store, populated):
        assert len(store.search_contacts("")) == 3
        assert len(store.search_contacts("   ")) == 3
        assert len(store.search_contacts(None)) == 3

    @pytest.mark.parametrize("query, expected", [
        ("jane", ["Jane Doe"]),
        ("FIRM", ["Robert Lee"]),
        ("bakery", ["Mary Ann Smith"]),
        ("555", ["Jane Doe", "Robert Lee"]),
        ("%", []),
        ("nobody", []),
    ])
    def test_substring_search(self, store, populated, query, expected):
        names = sorted(c.name for c in store.search_contacts(query))
        assert names == sorted(expected)


class TestEventTags:

    def test_filter_by_event(self, store, populated):
        assert [c.name for c in store.filter_by_event("CES")] == ["Robert Lee"]
        assert store.filter_by_event("Unknown") == []
        assert len(store.filter_by_event("")) == 3

    def test_event_tags_sorted_and_distinct(self, store, populated):
        store.save_contact(ContactRecord(name="Extra Person", event_tag="CES"))
        assert store.get_event_tags() == ["CES", "WebSummit"]
