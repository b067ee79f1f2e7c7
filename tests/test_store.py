import threading

from rssterm.store import EntryStore


def _is_newest_first(entries):
    return all(a.published_at >= b.published_at for a, b in zip(entries, entries[1:]))


def test_merge_keeps_entries_newest_first(make_entry):
    store = EntryStore()
    store.merge([make_entry("b", minutes_ago=20), make_entry("d", minutes_ago=40)])
    assert _is_newest_first(store.snapshot())

    store.merge([make_entry("a", minutes_ago=10), make_entry("c", minutes_ago=30)])
    snapshot = store.snapshot()

    assert [entry.title for entry in snapshot] == ["a", "b", "c", "d"]
    assert len(store) == 4


def test_snapshot_is_not_affected_by_later_merges(make_entry):
    store = EntryStore()
    store.merge([make_entry("first", minutes_ago=5)])
    before = store.snapshot()

    store.merge([make_entry("second", minutes_ago=1)])

    assert [entry.title for entry in before] == ["first"]
    assert [entry.title for entry in store.snapshot()] == ["second", "first"]


def test_concurrent_merges_keep_every_entry_sorted(make_entry):
    store = EntryStore()
    batches = [
        [make_entry(f"{worker}-{index}", minutes_ago=worker * 7 + index) for index in range(20)]
        for worker in range(6)
    ]
    threads = [threading.Thread(target=store.merge, args=(batch,)) for batch in batches]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    snapshot = store.snapshot()
    assert len(snapshot) == 120
    assert _is_newest_first(snapshot)


def test_find(make_entry):
    store = EntryStore()
    older = make_entry("older", minutes_ago=10)
    newer = make_entry("newer", minutes_ago=1)
    store.merge([older, newer])

    assert store.find(older.id) == older
    assert store.find(12345) is None
