# [TESTER] v1

from __future__ import annotations

import pytest

from pairswap.state.store import DictStore, JournaledStore


def test_dict_store_get_default_insert_remove() -> None:
    s: DictStore[str, int] = DictStore()
    assert s.get("a", 0) == 0
    s.insert("a", 5)
    assert s.get("a", 0) == 5
    s.remove("a")
    s.remove("missing")
    assert s.get("a", 0) == 0
    assert len(s) == 0


def test_dict_store_items_tolerates_mutation() -> None:
    s: DictStore[str, int] = DictStore()
    for k in "abc":
        s.insert(k, 1)
    for k, _ in s.items():
        s.remove(k)
    assert len(s) == 0


def test_journal_rollback_restores_prior_values() -> None:
    inner: DictStore[str, int] = DictStore()
    inner.insert("kept", 1)
    inner.insert("removed", 2)
    j = JournaledStore(inner)

    j.begin()
    j.insert("kept", 10)
    j.insert("kept", 11)
    j.remove("removed")
    j.insert("new", 3)
    j.rollback()

    assert dict(inner.items()) == {"kept": 1, "removed": 2}


def test_journal_commit_keeps_writes() -> None:
    j: JournaledStore[str, int] = JournaledStore(DictStore())
    j.begin()
    j.insert("a", 1)
    j.commit()
    # Rolling back with no open journal is a no-op.
    j.rollback()
    assert j.get("a", 0) == 1


def test_journal_rejects_nested_begin() -> None:
    j: JournaledStore[str, int] = JournaledStore(DictStore())
    j.begin()
    with pytest.raises(RuntimeError, match="already open"):
        j.begin()


def test_writes_outside_journal_are_not_recorded() -> None:
    j: JournaledStore[str, int] = JournaledStore(DictStore())
    j.insert("a", 1)
    j.begin()
    j.rollback()
    assert j.get("a", 0) == 1
