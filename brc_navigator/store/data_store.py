# data_store.py - loaded sheet, favorites, view mode and search state for one session

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set

from brc_navigator.data_ingestion.spreadsheet import Row, Spreadsheet
from brc_navigator.errors import SearchError
from brc_navigator.semantic_search.search_client import SearchClient, SearchResultItem
from brc_navigator.storage.local_storage import LocalStorage

logger = logging.getLogger(__name__)

FAVORITES_KEY = "brcNavigatorFavorites"
ABOUT_ME_KEY = "brcNavigatorAboutMe"


class ViewMode(str, Enum):
    ALL = "all"
    SEARCH = "search"
    FAVORITES = "favorites"


@dataclass(frozen=True)
class SearchMatch:
    row: Row
    match_reason: str = ""


def compose_query(query: str, about_me: str = "") -> str:
    """Prefix the query with the user's profile when one is saved."""
    about_me = (about_me or "").strip()
    if about_me:
        return f"About me: {about_me}. Looking for: {query}"
    return query


class DataStore:
    """
    Owns the loaded spreadsheet, the favorite set and which rows are on screen.

    View functions read from the store and call its methods to change it;
    they keep no copies of the rows.
    """

    def __init__(self, storage: LocalStorage, search_client: Optional[SearchClient] = None):
        self.storage = storage
        self.search_client = search_client
        self.spreadsheet = Spreadsheet()
        self.favorite_ids: Set[str] = self._load_favorites()
        self.view_mode = ViewMode.ALL
        self.last_non_favorite_view_mode = ViewMode.ALL
        self.loading = False
        self.search_results: List[SearchMatch] = []
        self.search_explanation = ""
        self.last_error: Optional[str] = None

    # --- spreadsheet ---

    @property
    def headers(self) -> Sequence[str]:
        return self.spreadsheet.headers

    @property
    def rows(self) -> List[Row]:
        return self.spreadsheet.rows

    @property
    def uid_column_index(self) -> int:
        return self.spreadsheet.uid_column_index

    def load_spreadsheet(self, spreadsheet: Spreadsheet) -> None:
        self.spreadsheet = spreadsheet
        self.view_mode = ViewMode.ALL
        self.last_non_favorite_view_mode = ViewMode.ALL
        self.search_results = []
        self.search_explanation = ""
        self.last_error = None
        self.loading = False
        logger.info(f"Loaded {len(spreadsheet.rows)} rows with headers {list(spreadsheet.headers)}")

    def set_data(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        self.load_spreadsheet(Spreadsheet.from_values(headers, rows))

    def clear(self) -> None:
        self.set_data([], [])

    @property
    def filtered_rows(self) -> List[Row]:
        if self.view_mode == ViewMode.FAVORITES:
            return [row for row in self.rows if self.identity_of(row) in self.favorite_ids]
        if self.view_mode == ViewMode.SEARCH:
            return [match.row for match in self.search_results]
        return list(self.rows)

    def match_reasons(self) -> Dict[str, str]:
        """Row identity -> match reason for the current search results."""
        return {self.identity_of(m.row): m.match_reason for m in self.search_results}

    # --- favorites ---

    def identity_of(self, row: Row) -> str:
        return self.spreadsheet.identity_of(row)

    def is_favorite(self, row: Row) -> bool:
        return self.identity_of(row) in self.favorite_ids

    @staticmethod
    def can_favorite(row: Row) -> bool:
        # search results that matched no loaded row never show up in the favorites view
        return row.position >= 0

    def _load_favorites(self) -> Set[str]:
        raw = self.storage.get_item(FAVORITES_KEY)
        if not raw:
            return set()
        try:
            ids = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable favorites: {e}")
            return set()
        if not isinstance(ids, list):
            logger.warning("Ignoring favorites: expected a list")
            return set()
        return {str(i) for i in ids}

    def _save_favorites(self) -> None:
        self.storage.set_item(FAVORITES_KEY, json.dumps(sorted(self.favorite_ids)))

    def add_favorite(self, row_id: str) -> None:
        if row_id in self.favorite_ids:
            return
        self.favorite_ids.add(row_id)
        self._save_favorites()

    def remove_favorite(self, row_id: str) -> None:
        if row_id not in self.favorite_ids:
            return
        self.favorite_ids.discard(row_id)
        self._save_favorites()

    def toggle_favorite(self, row_id: str) -> bool:
        """Flip favorite status; returns True if the row is now a favorite."""
        if row_id in self.favorite_ids:
            self.remove_favorite(row_id)
            return False
        self.add_favorite(row_id)
        return True

    # --- about me ---

    @property
    def about_me(self) -> str:
        return self.storage.get_item(ABOUT_ME_KEY) or ""

    def set_about_me(self, text: str) -> None:
        if text != self.about_me:
            self.storage.set_item(ABOUT_ME_KEY, text)

    # --- view mode ---

    def set_view_mode(self, mode) -> None:
        mode = ViewMode(mode)
        if self.view_mode in (ViewMode.ALL, ViewMode.SEARCH) and mode != self.view_mode:
            self.last_non_favorite_view_mode = self.view_mode
        self.view_mode = mode

    def toggle_favorites_view(self) -> None:
        if self.view_mode == ViewMode.FAVORITES:
            self.set_view_mode(self.last_non_favorite_view_mode)
        else:
            self.set_view_mode(ViewMode.FAVORITES)

    # --- search ---

    def _resolve_result(self, snapshot: Spreadsheet, item: SearchResultItem) -> Row:
        row = snapshot.row_at(item.row_index)
        if row is not None:
            return row

        wanted = {k.strip().lower(): v for k, v in item.cells.items()}
        shared = [(i, wanted[h.lower()]) for i, h in enumerate(snapshot.headers) if h.lower() in wanted]
        if shared:
            for candidate in snapshot.rows:
                if all(candidate[i] == value for i, value in shared):
                    return candidate

        logger.warning(f"Search result {item.row_index!r} does not match a loaded row")
        cells = [wanted.get(h.lower(), "") for h in snapshot.headers]
        return Row(position=-1, cells=tuple(cells))

    def run_search_query(self, query_text: str, snapshot: Optional[Spreadsheet] = None) -> List[SearchMatch]:
        """
        Ask the search client for rows matching query_text and show them.

        On failure the current view is left untouched and SearchError is
        raised to the caller. loading is cleared on every path.
        """
        if not query_text or not query_text.strip():
            raise SearchError("Enter a search query")
        if self.search_client is None:
            raise SearchError("Search is not configured")

        snapshot = snapshot if snapshot is not None else self.spreadsheet
        self.loading = True
        try:
            response = self.search_client.search(query_text, snapshot.to_csv())
            matches = [SearchMatch(self._resolve_result(snapshot, item), item.match_reason)
                       for item in response.results]
            self.search_results = matches
            self.search_explanation = response.explanation
            self.last_error = None
            self.set_view_mode(ViewMode.SEARCH)
            logger.info(f"🎯 {len(matches)} search result(s) for '{query_text}'")
            return matches
        except SearchError as e:
            self.last_error = str(e)
            raise
        except Exception as e:
            logger.error(f"Search failed: {e}")
            self.last_error = f"Search failed: {e}"
            raise SearchError(self.last_error) from e
        finally:
            self.loading = False
