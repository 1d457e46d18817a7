from __future__ import annotations

import pytest

from brc_navigator.errors import SearchError
from brc_navigator.semantic_search.search_client import SearchClient, SearchConfig
from brc_navigator.storage.local_storage import LocalStorage
from brc_navigator.store.data_store import FAVORITES_KEY, DataStore, ViewMode, compose_query
from conftest import EVENT_HEADERS, EVENT_ROWS, FakeAnthropic, search_payload


def _cells(rows):
    return [list(r.cells) for r in rows]


def _store_answering(storage, text, on_call=None) -> DataStore:
    fake = FakeAnthropic(text=text, on_call=on_call)
    store = DataStore(storage, SearchClient(SearchConfig(api_key="k"), client=fake))
    store.set_data(EVENT_HEADERS, EVENT_ROWS)
    return store


class ExplodingClient:
    def search(self, query, spreadsheet_csv):
        raise RuntimeError("socket closed")


def test_set_data_shows_all_rows(loaded_store):
    assert loaded_store.view_mode == ViewMode.ALL
    assert _cells(loaded_store.filtered_rows) == EVENT_ROWS
    assert loaded_store.uid_column_index == 2
    assert loaded_store.loading is False


def test_favorites_view_shows_only_favorites(loaded_store):
    loaded_store.add_favorite("u1")
    loaded_store.set_view_mode(ViewMode.FAVORITES)
    assert _cells(loaded_store.filtered_rows) == [["Yoga", "yoga", "u1"]]


def test_favorites_keep_sheet_order(store):
    store.set_data(["Title", "UID"], [["A", "a"], ["B", "b"], ["C", "c"]])
    store.add_favorite("c")
    store.add_favorite("a")
    store.set_view_mode("favorites")
    assert _cells(store.filtered_rows) == [["A", "a"], ["C", "c"]]


def test_removing_a_favorite_in_favorites_view_removes_only_that_row(store):
    store.set_data(["Title", "UID"], [["A", "a"], ["B", "b"], ["C", "c"]])
    for uid in ("a", "b", "c"):
        store.add_favorite(uid)
    store.set_view_mode(ViewMode.FAVORITES)

    store.remove_favorite("b")

    assert _cells(store.filtered_rows) == [["A", "a"], ["C", "c"]]


def test_positional_favorites_without_uid_column(store):
    store.set_data(["Title"], [["Same"], ["Same"]])
    second = store.rows[1]
    store.add_favorite(store.identity_of(second))
    store.set_view_mode(ViewMode.FAVORITES)
    assert store.filtered_rows == [second]
    assert not store.is_favorite(store.rows[0])


def test_favorites_are_persisted(storage_path, loaded_store):
    loaded_store.add_favorite("u2")
    reopened = DataStore(LocalStorage(storage_path))
    assert reopened.favorite_ids == {"u2"}


def test_toggle_favorite(loaded_store):
    assert loaded_store.toggle_favorite("u1") is True
    assert loaded_store.toggle_favorite("u1") is False
    assert loaded_store.favorite_ids == set()


def test_corrupt_favorites_are_ignored(storage):
    storage.set_item(FAVORITES_KEY, "{broken")
    assert DataStore(storage).favorite_ids == set()
    storage.set_item(FAVORITES_KEY, '{"u1": true}')
    assert DataStore(storage).favorite_ids == set()


def test_favorites_toggle_round_trip_from_all(loaded_store):
    before = loaded_store.filtered_rows
    loaded_store.toggle_favorites_view()
    assert loaded_store.view_mode == ViewMode.FAVORITES
    loaded_store.toggle_favorites_view()
    assert loaded_store.view_mode == ViewMode.ALL
    assert loaded_store.filtered_rows == before


def test_favorites_toggle_round_trip_from_search(storage):
    store = _store_answering(storage, search_payload(
        {"rowIndex": 1, "cells": {"Title": "Fire Show"}, "matchReason": "fire"},
    ))
    store.run_search_query("fire")
    before = store.filtered_rows

    store.toggle_favorites_view()
    assert store.last_non_favorite_view_mode == ViewMode.SEARCH
    store.toggle_favorites_view()

    assert store.view_mode == ViewMode.SEARCH
    assert store.filtered_rows == before


def test_favorites_is_never_remembered_as_previous_view(loaded_store):
    loaded_store.set_view_mode(ViewMode.SEARCH)
    loaded_store.set_view_mode(ViewMode.FAVORITES)
    loaded_store.set_view_mode(ViewMode.FAVORITES)
    loaded_store.set_view_mode(ViewMode.ALL)
    assert loaded_store.last_non_favorite_view_mode == ViewMode.SEARCH
    loaded_store.toggle_favorites_view()
    loaded_store.toggle_favorites_view()
    assert loaded_store.view_mode == ViewMode.ALL


def test_search_success_switches_to_search_view(storage):
    seen_loading = []
    store = _store_answering(
        storage,
        search_payload({"rowIndex": 1, "cells": {"Title": "Fire Show"}, "matchReason": "It is a fire show"}),
        on_call=lambda kwargs: seen_loading.append(store.loading),
    )

    matches = store.run_search_query("fire")

    assert seen_loading == [True]
    assert store.loading is False
    assert store.view_mode == ViewMode.SEARCH
    assert _cells(store.filtered_rows) == [["Fire Show", "perf", "u2"]]
    assert matches[0].match_reason == "It is a fire show"
    assert store.match_reasons() == {"u2": "It is a fire show"}
    assert store.search_explanation == "Matched on type and title"


def test_search_sends_row_indexed_csv(storage):
    store = _store_answering(storage, search_payload())
    store.run_search_query("yoga")
    prompt = store.search_client.client.messages.calls[0]["messages"][0]["content"]
    assert "row_index,Title,Type,UID" in prompt
    assert "0,Yoga,yoga,u1" in prompt


def test_empty_search_result_is_not_an_error(storage):
    store = _store_answering(storage, search_payload())
    assert store.run_search_query("llamas") == []
    assert store.view_mode == ViewMode.SEARCH
    assert store.filtered_rows == []
    assert store.loading is False


def test_malformed_upstream_body_keeps_previous_view(storage):
    seen_loading = []
    store = _store_answering(storage, "this is not json", on_call=lambda kwargs: seen_loading.append(store.loading))
    store.add_favorite("u1")
    store.set_view_mode(ViewMode.FAVORITES)

    with pytest.raises(SearchError):
        store.run_search_query("yoga")

    assert seen_loading == [True]
    assert store.view_mode == ViewMode.FAVORITES
    assert _cells(store.filtered_rows) == [["Yoga", "yoga", "u1"]]
    assert store.loading is False
    assert store.last_error


def test_unexpected_client_failure_becomes_search_error(storage):
    store = DataStore(storage, ExplodingClient())
    store.set_data(EVENT_HEADERS, EVENT_ROWS)
    with pytest.raises(SearchError, match="socket closed"):
        store.run_search_query("yoga")
    assert store.view_mode == ViewMode.ALL
    assert store.loading is False


def test_blank_query_is_rejected_without_calling_the_client(storage):
    store = _store_answering(storage, search_payload())
    with pytest.raises(SearchError):
        store.run_search_query("   ")
    assert store.search_client.client.messages.calls == []
    assert store.loading is False


def test_results_without_row_index_are_matched_by_cells(storage):
    store = _store_answering(storage, search_payload(
        {"cells": {"title": "Yoga", "UID": "u1"}, "matchReason": "yoga"},
        {"rowIndex": 99, "cells": {"Title": "Ghost Camp", "Type": "othr"}, "matchReason": "hallucinated"},
    ))
    store.run_search_query("yoga")

    rows = store.filtered_rows
    assert rows[0] == store.rows[0]
    assert rows[1].position == -1
    assert rows[1].cells == ("Ghost Camp", "othr", "")
    assert store.can_favorite(rows[0])
    assert not store.can_favorite(rows[1])


def test_set_data_discards_search_results(storage):
    store = _store_answering(storage, search_payload(
        {"rowIndex": 0, "cells": {"Title": "Yoga"}, "matchReason": "yoga"},
    ))
    store.run_search_query("yoga")
    store.set_data(["Name"], [["x"]])
    assert store.view_mode == ViewMode.ALL
    assert store.search_results == []
    assert store.search_explanation == ""
    store.set_view_mode(ViewMode.SEARCH)
    assert store.filtered_rows == []


def test_clear_empties_the_store(loaded_store):
    loaded_store.clear()
    assert loaded_store.headers == ()
    assert loaded_store.filtered_rows == []


def test_about_me_is_persisted(storage_path, store):
    store.set_about_me("I like tea ceremonies")
    assert DataStore(LocalStorage(storage_path)).about_me == "I like tea ceremonies"


def test_compose_query():
    assert compose_query("tea", "") == "tea"
    assert compose_query("tea", "  ") == "tea"
    assert compose_query("tea", "early riser") == "About me: early riser. Looking for: tea"
