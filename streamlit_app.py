import logging

import streamlit as st

from brc_navigator.errors import NavigatorError, SearchError, UnsupportedFileType
from brc_navigator.semantic_search.search_client import SearchClient, SearchConfig
from brc_navigator.settings import load_settings
from brc_navigator.storage.local_storage import LocalStorage
from brc_navigator.store.data_store import DataStore, ViewMode
from brc_navigator.ui.actions import precache_default, submit
from brc_navigator.ui.card_view import render_cards
from brc_navigator.ui.error_boundary import error_boundary
from brc_navigator.ui.resources import render_resources
from brc_navigator.ui.table_view import render_table
from brc_navigator.ui.view_state import empty_message, favorites_button_label, view_title
from brc_navigator.ui.viewport import is_compact, viewport_for
from brc_navigator.version import log_version_info

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def get_store() -> DataStore:
    """One DataStore per browser session, created on the first run."""
    if "store" not in st.session_state:
        log_version_info()
        settings = load_settings()
        storage = LocalStorage(settings.storage_path)
        search_client = SearchClient(SearchConfig(
            api_key=settings.anthropic_api_key,
            model=settings.model,
            temperature=settings.temperature,
        ))
        store = DataStore(storage, search_client)
        st.session_state.store = store
        st.session_state.default_sheet_url = settings.default_sheet_url

        with st.spinner("📥 Loading the default sheet..."):
            precache_default(store, settings.default_sheet_url)
    return st.session_state.store


def render_sidebar(store: DataStore) -> bool:
    with st.sidebar:
        st.header("⚙️ Settings")

        about_me = st.text_area(
            "🙋 About me",
            value=store.about_me,
            placeholder="e.g. I love sound baths, sunrise yoga and fire art",
            help="Saved on this device and added to every search",
        )
        store.set_about_me(about_me)

        compact = st.toggle("📱 Compact layout", value=st.session_state.get("compact", False))
        st.session_state.compact = compact

        st.markdown("---")
        st.markdown(f"❤️ **{len(store.favorite_ids)}** favorite(s) saved")
    return compact


def render_query_section(store: DataStore) -> None:
    st.subheader("🔍 Find events")

    source = st.radio("📊 Data source", ["Google Sheets URL", "Upload file"], horizontal=True)
    sheet_url, upload = None, None
    if source == "Google Sheets URL":
        sheet_url = st.text_input("Sheet URL", value=st.session_state.default_sheet_url)
    else:
        upload = st.file_uploader("Spreadsheet (CSV, XLS, XLSX)", type=None)

    query = st.text_input(
        "💬 What are you looking for?",
        placeholder="e.g. 'sunrise yoga' or 'something with fire on Thursday'",
    )

    if st.button("🚀 Search", type="primary", disabled=store.loading):
        if source == "Upload file" and upload is None:
            st.error("❌ Please choose a file to upload")
            return
        try:
            with st.spinner("🔍 finding results..."):
                submit(
                    store,
                    query,
                    about_me=store.about_me,
                    sheet_url=sheet_url,
                    upload_name=upload.name if upload is not None else None,
                    upload_bytes=upload.getvalue() if upload is not None else None,
                )
        except UnsupportedFileType:
            st.error("❌ Unsupported file type. Upload a CSV, XLS or XLSX file.")
        except SearchError as e:
            logger.error(f"Search operation failed: {e}")
            st.error(f"❌ An error occurred during the search: {e}")
        except NavigatorError as e:
            st.error(f"❌ Failed to load data. Check permissions or URL. {e}")


def render_results(store: DataStore, compact: bool) -> None:
    if not store.headers:
        st.info(empty_message(store))
        return

    col1, col2 = st.columns([4, 1])
    with col1:
        st.subheader(view_title(store.view_mode))
    with col2:
        st.button(
            f"❤️ {favorites_button_label(store.view_mode)}",
            on_click=store.toggle_favorites_view,
            use_container_width=True,
        )

    if store.view_mode == ViewMode.SEARCH and store.search_explanation:
        st.caption(f"🧠 {store.search_explanation}")

    message = empty_message(store)
    if message:
        st.info(message)
        return

    viewport = viewport_for(compact)
    if is_compact(viewport):
        render_cards(store)
    else:
        render_table(store, viewport)


def main():
    st.set_page_config(page_title="BRC Navigator", page_icon="🔥", layout="wide")

    st.title("🔥 BRC Navigator")
    st.markdown(
        "Discover art installations, workshops, performances and gatherings across "
        "the playa that match your interests."
    )

    store = get_store()
    compact = render_sidebar(store)

    with error_boundary("the search form"):
        render_query_section(store)

    with error_boundary("the results"):
        render_results(store, compact)

    st.markdown("---")
    render_resources()
    st.markdown("🔧 **Built with:** Streamlit, LangGraph and Claude AI")


if __name__ == "__main__":
    main()
