# card_view.py - one card per visible row, for compact screens

from dataclasses import dataclass
from typing import List, Sequence

import streamlit as st

from brc_navigator.data_ingestion.spreadsheet import Row
from brc_navigator.store.data_store import DataStore, ViewMode

TYPE_EMOJIS = {
    "prty": "🎉",
    "tea": "🫖",
    "work": "🛠️",
    "art": "🎨",
    "arts": "🎨",
    "adlt": "🔞",
    "food": "🍕",
    "kid": "🚸",
    "yoga": "🧘",
    "game": "🎲",
    "care": "💅",
    "cere": "🕯️",
    "repr": "🔧",
    "live": "🎸",
    "lgbt": "🌈",
    "fire": "🔥",
    "para": "👣",
    "perf": "🎭",
    "sust": "💧",
    "ride": "🚲",
    "othr": "❓",
}

HIDDEN_HEADERS = {"title", "uid"}


@dataclass(frozen=True)
class CardField:
    label: str
    value: str
    display: str
    is_url: bool


def card_title(headers: Sequence[str], row: Row) -> str:
    return row.get("title", headers) or "Event"


def card_fields(headers: Sequence[str], row: Row) -> List[CardField]:
    """Fields shown in a card body: no title/uid, no blank or "-" values."""
    fields = []
    for i, header in enumerate(headers):
        if header.lower() in HIDDEN_HEADERS:
            continue
        value = row[i]
        if not value.strip() or value.strip() == "-":
            continue

        display = value
        if header.lower() == "type":
            emoji = TYPE_EMOJIS.get(value.strip().lower())
            if emoji:
                display = f"{value} {emoji}"

        fields.append(CardField(
            label=header,
            value=value,
            display=display,
            is_url=value.startswith(("http://", "https://")),
        ))
    return fields


def _field_markdown(field: CardField) -> str:
    if field.is_url:
        return f"**{field.label}:** [{field.display}]({field.value})"
    return f"**{field.label}:** {field.display}"


def render_cards(store: DataStore) -> None:
    reasons = store.match_reasons() if store.view_mode == ViewMode.SEARCH else {}

    for position, row in enumerate(store.filtered_rows):
        row_id = store.identity_of(row)
        favorite = row_id in store.favorite_ids

        with st.container(border=True):
            col1, col2 = st.columns([6, 1])
            with col1:
                st.markdown(f"#### {card_title(store.headers, row)}")
            with col2:
                if store.can_favorite(row):
                    st.button(
                        "❤️" if favorite else "🤍",
                        key=f"card_favorite_{position}_{row_id}",
                        help="Remove favorite" if favorite else "Add favorite",
                        on_click=store.toggle_favorite,
                        args=(row_id,),
                    )
                else:
                    st.caption("🚫 not in sheet")
            for field in card_fields(store.headers, row):
                st.markdown(_field_markdown(field))
            if reasons.get(row_id):
                st.caption(f"🎯 {reasons[row_id]}")
