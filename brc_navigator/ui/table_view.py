# table_view.py - sortable, resizable table of the store's visible rows

import math
import logging
from dataclasses import dataclass, field
from typing import Collection, Dict, List, Optional, Sequence, Set

import pandas as pd
import streamlit as st

from brc_navigator.data_ingestion.spreadsheet import Row
from brc_navigator.store.data_store import DataStore, ViewMode
from brc_navigator.ui.viewport import Viewport, is_compact

logger = logging.getLogger(__name__)

FAVORITE_COLUMN = "favorite"
REASON_COLUMN = "match_reason"
SORT_STATE_KEY = "table_sort_state"
SIZING_STATE_KEY = "table_column_sizing"
EDITOR_VERSION_KEY = "table_editor_version"


# --- sorting ---

@dataclass(frozen=True)
class SortState:
    column: Optional[int] = None
    direction: Optional[str] = None  # "asc" or "desc"

    @property
    def is_sorted(self) -> bool:
        return self.column is not None and self.direction is not None


def next_sort_state(state: SortState, column: int) -> SortState:
    """Clicking a column cycles it unsorted -> asc -> desc -> unsorted."""
    if state.column != column or state.direction is None:
        return SortState(column, "asc")
    if state.direction == "asc":
        return SortState(column, "desc")
    return SortState()


def _as_number(value: str) -> Optional[float]:
    try:
        number = float(value.replace(",", ""))
    except ValueError:
        return None
    return None if math.isnan(number) else number


def sort_rows(rows: Sequence[Row], state: SortState) -> List[Row]:
    """
    Stable sort on one column.

    Columns whose non-empty values are all numbers sort numerically, the
    rest case-insensitively. Empty cells always go last.
    """
    if not state.is_sorted:
        return list(rows)

    col = state.column
    filled = [r for r in rows if r[col].strip()]
    empty = [r for r in rows if not r[col].strip()]
    numeric = bool(filled) and all(_as_number(r[col]) is not None for r in filled)

    if numeric:
        key = lambda r: _as_number(r[col])
    else:
        key = lambda r: r[col].strip().lower()

    return sorted(filled, key=key, reverse=state.direction == "desc") + empty


# --- column sizing ---

def calculate_initial_size(header: str, total_columns: int, viewport: Viewport) -> int:
    """Starting width in pixels for a data column."""
    if is_compact(viewport):
        actions_width = 40
        available = viewport.width() - actions_width - 20
        base = math.floor(available / max(total_columns, 1))
        if header == "Description":
            return min(base * 2, 150)
        return max(40, min(100, base))

    estimated = len(header) * 8 + 40
    dynamic_base = max(120, estimated * 0.6)
    size = max(50, max(dynamic_base, estimated * 0.8))
    if header == "Description":
        size *= 3
    return int(min(500, size))


def actions_column_size(viewport: Viewport) -> int:
    return 40 if is_compact(viewport) else 60


def column_size_bounds(viewport: Viewport):
    return (30, 100) if is_compact(viewport) else (50, 500)


@dataclass
class ColumnSizing:
    """User width overrides keyed by column index, clamped to the layout's bounds."""
    overrides: Dict[int, int] = field(default_factory=dict)

    def set_width(self, column: int, width: int, viewport: Viewport) -> int:
        low, high = column_size_bounds(viewport)
        clamped = max(low, min(high, int(width)))
        self.overrides[column] = clamped
        return clamped

    def width_of(self, column: int, header: str, total_columns: int, viewport: Viewport) -> int:
        low, high = column_size_bounds(viewport)
        width = self.overrides.get(column)
        if width is None:
            width = calculate_initial_size(header, total_columns, viewport)
        return max(low, min(high, width))

    def reset(self) -> None:
        self.overrides.clear()


# --- frame building ---

def column_key(index: int) -> str:
    # headers can repeat or be blank, so grid columns are keyed by position
    return f"c{index}"


def build_table_frame(store: DataStore, sort_state: SortState) -> pd.DataFrame:
    """Visible rows as a DataFrame indexed by row identity."""
    rows = sort_rows(store.filtered_rows, sort_state)
    reasons = store.match_reasons() if store.view_mode == ViewMode.SEARCH else {}

    records = []
    for row in rows:
        record = {FAVORITE_COLUMN: store.is_favorite(row)}
        for i in range(len(store.headers)):
            record[column_key(i)] = row[i]
        if reasons:
            record[REASON_COLUMN] = reasons.get(store.identity_of(row), "")
        records.append(record)

    columns = [FAVORITE_COLUMN] + [column_key(i) for i in range(len(store.headers))]
    if reasons:
        columns.append(REASON_COLUMN)
    index = pd.Index([store.identity_of(r) for r in rows], name="row_id")
    return pd.DataFrame(records, columns=columns, index=index)


def locked_row_ids(store: DataStore) -> Set[str]:
    """Identities of visible rows whose favorite checkbox is ignored."""
    return {store.identity_of(r) for r in store.filtered_rows if not store.can_favorite(r)}


def favorite_changes(before: pd.DataFrame, after: pd.DataFrame,
                     locked: Collection[str] = ()) -> Dict[str, bool]:
    """Row identity -> new favorite flag, for rows whose checkbox was flipped."""
    changes = {}
    # the editor keeps row count and order, so rows line up by position
    for row_id, was_favorite, now_favorite in zip(before.index, before[FAVORITE_COLUMN], after[FAVORITE_COLUMN]):
        if row_id in locked:
            continue
        if bool(now_favorite) != bool(was_favorite):
            changes[row_id] = bool(now_favorite)
    return changes


def apply_favorite_changes(store: DataStore, changes: Dict[str, bool]) -> None:
    for row_id, favorite in changes.items():
        if favorite:
            store.add_favorite(row_id)
        else:
            store.remove_favorite(row_id)


# --- streamlit rendering ---

def _sort_state() -> SortState:
    return st.session_state.get(SORT_STATE_KEY, SortState())


def _column_sizing() -> ColumnSizing:
    if SIZING_STATE_KEY not in st.session_state:
        st.session_state[SIZING_STATE_KEY] = ColumnSizing()
    return st.session_state[SIZING_STATE_KEY]


def render_sort_controls(store: DataStore) -> SortState:
    state = _sort_state()
    if state.column is not None and state.column >= len(store.headers):
        state = SortState()

    labels = [h or f"Column {i + 1}" for i, h in enumerate(store.headers)]
    col1, col2 = st.columns([3, 1])
    with col1:
        chosen = st.selectbox(
            "Sort by",
            options=list(range(len(labels))),
            format_func=lambda i: labels[i],
            index=state.column if state.column is not None else 0,
            key="table_sort_column",
        )
    with col2:
        arrow = {"asc": "⬆️", "desc": "⬇️"}.get(state.direction if state.column == chosen else None, "↕️")
        if st.button(f"{arrow} Sort", key="table_sort_toggle", use_container_width=True):
            state = next_sort_state(state, chosen)
            st.session_state[SORT_STATE_KEY] = state
            st.rerun()
    return state


def render_column_width_controls(store: DataStore, viewport: Viewport) -> None:
    sizing = _column_sizing()
    low, high = column_size_bounds(viewport)
    total = len(store.headers)
    with st.expander("↔️ Column widths", expanded=False):
        for i, header in enumerate(store.headers):
            current = sizing.width_of(i, header, total, viewport)
            width = st.slider(header or f"Column {i + 1}", low, high, current, key=f"table_width_{i}")
            if width != current:
                sizing.set_width(i, width, viewport)
        if st.button("Reset widths", key="table_width_reset"):
            sizing.reset()
            for i in range(total):
                st.session_state.pop(f"table_width_{i}", None)
            st.rerun()


def render_table(store: DataStore, viewport: Viewport) -> None:
    sort_state = render_sort_controls(store)
    render_column_width_controls(store, viewport)
    sizing = _column_sizing()

    frame = build_table_frame(store, sort_state)
    total = len(store.headers)
    column_config = {
        FAVORITE_COLUMN: st.column_config.CheckboxColumn(
            "❤️", help="Add or remove a favorite", width=actions_column_size(viewport)
        ),
    }
    for i, header in enumerate(store.headers):
        column_config[column_key(i)] = st.column_config.TextColumn(
            header or f"Column {i + 1}",
            width=sizing.width_of(i, header, total, viewport),
        )
    if REASON_COLUMN in frame.columns:
        column_config[REASON_COLUMN] = st.column_config.TextColumn("🎯 Why it matches", width="large")

    version = st.session_state.get(EDITOR_VERSION_KEY, 0)
    edited = st.data_editor(
        frame,
        hide_index=True,
        use_container_width=True,
        disabled=[c for c in frame.columns if c != FAVORITE_COLUMN],
        column_config=column_config,
        key=f"table_editor_{version}",
        height=min(600, 38 + 35 * max(len(frame), 1)),
    )

    locked = locked_row_ids(store)
    if locked:
        st.caption("🚫 Rows not found in the loaded sheet can't be saved as favorites.")

    changes = favorite_changes(frame, edited, locked)
    if changes:
        logger.info(f"Favorite changes from table: {changes}")
        apply_favorite_changes(store, changes)
        st.session_state[EDITOR_VERSION_KEY] = version + 1
        st.rerun()
