# view_state.py

from brc_navigator.store.data_store import DataStore, ViewMode

VIEW_TITLES = {
    ViewMode.FAVORITES: "My Favorites",
    ViewMode.SEARCH: "Search Results",
    ViewMode.ALL: "All Events",
}


def view_title(view_mode: ViewMode) -> str:
    return VIEW_TITLES[ViewMode(view_mode)]


def favorites_button_label(view_mode: ViewMode) -> str:
    return "Show All" if ViewMode(view_mode) == ViewMode.FAVORITES else "My Favorites"


def empty_message(store: DataStore) -> str:
    """Placeholder text when there is nothing to draw, or "" when there is."""
    if not store.headers:
        return "Load data using the options above."
    if store.loading:
        return "finding results..."
    if not store.filtered_rows:
        if store.view_mode == ViewMode.FAVORITES:
            return "No favorites yet. Tap the heart on a row to save it."
        return "No results found for your query."
    return ""
