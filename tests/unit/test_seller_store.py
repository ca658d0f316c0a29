"""
Unit tests for the SQL and in-memory credential stores
"""
import pytest

from shoplabel.database import InMemorySellerStore
from shoplabel.utils.exceptions import DuplicateEmailError


@pytest.fixture(params=["sql", "memory"])
def any_store(request, sql_store):
    if request.param == "sql":
        return sql_store
    return InMemorySellerStore()


class TestSellerStore:
    """Behaviour shared by every store implementation"""

    def test_create_and_find(self, any_store):
        created = any_store.create("a@example.com", "hash")

        assert created.id is not None
        assert created.automation_enabled is False
        assert any_store.find_by_email("a@example.com").id == created.id
        assert any_store.find_by_id(created.id).email == "a@example.com"

    def test_find_missing(self, any_store):
        assert any_store.find_by_email("nobody@example.com") is None
        assert any_store.find_by_id(12345) is None

    def test_ids_are_distinct(self, any_store):
        first = any_store.create("a@example.com", "hash")
        second = any_store.create("b@example.com", "hash")

        assert first.id != second.id

    def test_duplicate_email_rejected_without_mutation(self, any_store):
        original = any_store.create("a@example.com", "original-hash")

        with pytest.raises(DuplicateEmailError):
            any_store.create("a@example.com", "other-hash")

        stored = any_store.find_by_email("a@example.com")
        assert stored.id == original.id
        assert stored.password_hash == "original-hash"

    def test_update_is_visible_on_next_read(self, any_store):
        seller = any_store.create("a@example.com", "hash")

        any_store.update(seller.id, packlink_api_key="pl-key", automation_enabled=True)

        reread = any_store.find_by_email("a@example.com")
        assert reread.packlink_api_key == "pl-key"
        assert reread.automation_enabled is True
        assert reread.packlink_connected is True
        assert reread.tiktok_connected is False

    def test_update_can_clear_a_field(self, any_store):
        seller = any_store.create("a@example.com", "hash")
        any_store.update(seller.id, packlink_api_key="pl-key")

        any_store.update(seller.id, packlink_api_key=None)

        assert any_store.find_by_id(seller.id).packlink_api_key is None

    def test_update_unknown_seller(self, any_store):
        assert any_store.update(999, automation_enabled=True) is None

    @pytest.mark.parametrize("field", ["email", "password_hash", "id", "not_a_column"])
    def test_update_rejects_immutable_fields(self, any_store, field):
        seller = any_store.create("a@example.com", "hash")

        with pytest.raises(ValueError):
            any_store.update(seller.id, **{field: "x"})


class TestInMemorySellerStore:

    def test_len_counts_sellers(self):
        store = InMemorySellerStore()
        store.create("a@example.com", "hash")
        store.create("b@example.com", "hash")

        assert len(store) == 2
