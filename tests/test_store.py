"""Tests for the in-memory transaction store."""

import pytest

from src.ledger import DuplicateTransactionError, TransactionStore


class TestTransactionStore:
    """Tests for TransactionStore."""

    def test_starts_empty(self):
        """Test a fresh store."""
        store = TransactionStore()
        assert len(store) == 0
        assert store.all() == []

    def test_add_and_get(self, tx):
        """Test that added records can be looked up by id."""
        store = TransactionStore()
        store.add(tx("a"))
        assert "a" in store
        assert store.get("a").id == "a"
        assert store.get("missing") is None

    def test_add_keeps_insertion_order(self, tx):
        """Test that all() follows insertion order."""
        store = TransactionStore()
        for tid in ("c", "a", "b"):
            store.add(tx(tid))
        assert [r.id for r in store.all()] == ["c", "a", "b"]

    def test_add_duplicate_id_raises(self, tx):
        """Test that ids stay unique."""
        store = TransactionStore()
        store.add(tx("a"))
        with pytest.raises(DuplicateTransactionError):
            store.add(tx("a", "99"))
        assert len(store) == 1

    def test_remove(self, tx):
        """Test removal by id."""
        store = TransactionStore()
        store.add(tx("a"))
        store.add(tx("b"))
        assert store.remove("a") is True
        assert [r.id for r in store.all()] == ["b"]

    def test_remove_missing_is_noop(self, tx):
        """Test that removing an unknown id changes nothing."""
        store = TransactionStore()
        store.add(tx("a"))
        assert store.remove("zzz") is False
        assert len(store) == 1

    def test_replace_all(self, tx):
        """Test wholesale replacement."""
        store = TransactionStore()
        store.add(tx("old"))
        store.replace_all([tx("x"), tx("y")])
        assert [r.id for r in store.all()] == ["x", "y"]

    def test_replace_all_drops_duplicate_ids(self, tx):
        """Test that the first occurrence of a repeated id wins."""
        store = TransactionStore()
        store.replace_all([tx("x", "1"), tx("x", "2"), tx("y")])
        assert [r.id for r in store.all()] == ["x", "y"]
        assert str(store.get("x").amount) == "1"

    def test_clear(self, tx):
        """Test clearing the store."""
        store = TransactionStore()
        store.replace_all([tx("a"), tx("b")])
        store.clear()
        assert len(store) == 0

    def test_all_returns_a_copy(self, tx):
        """Test that changing the snapshot does not change the store."""
        store = TransactionStore()
        store.add(tx("a"))
        snapshot = store.all()
        snapshot.append(tx("b"))
        snapshot.clear()
        assert [r.id for r in store.all()] == ["a"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
