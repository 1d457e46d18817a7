# actions.py - what the submit button does, kept free of Streamlit calls

import logging
from typing import List, Optional

import requests

from brc_navigator.data_ingestion.spreadsheet import Spreadsheet
from brc_navigator.data_ingestion.spreadsheet_loader import fetch_spreadsheet, load_upload
from brc_navigator.errors import FetchError, NavigatorError, ParseError, UnsupportedFileType
from brc_navigator.store.data_store import DataStore, SearchMatch, compose_query

logger = logging.getLogger(__name__)


def load_into_store(
    store: DataStore,
    sheet_url: Optional[str] = None,
    upload_name: Optional[str] = None,
    upload_bytes: Optional[bytes] = None,
    session: Optional[requests.Session] = None,
) -> Spreadsheet:
    """
    Load a sheet from an upload (when given) or a URL into the store.

    FetchError and ParseError empty the store before propagating so no stale
    rows stay on screen. UnsupportedFileType leaves the store untouched.
    """
    try:
        if upload_name is not None:
            spreadsheet = load_upload(upload_name, upload_bytes or b"")
        else:
            spreadsheet = fetch_spreadsheet(sheet_url or "", session=session)
    except UnsupportedFileType as e:
        logger.error(f"Rejected upload: {e}")
        raise
    except (FetchError, ParseError) as e:
        logger.error(f"Failed to load data: {e}")
        store.clear()
        raise

    store.load_spreadsheet(spreadsheet)
    return spreadsheet


def submit(
    store: DataStore,
    query: str,
    about_me: str = "",
    sheet_url: Optional[str] = None,
    upload_name: Optional[str] = None,
    upload_bytes: Optional[bytes] = None,
    session: Optional[requests.Session] = None,
) -> List[SearchMatch]:
    """Load the chosen source, then search it when a query was typed."""
    spreadsheet = load_into_store(store, sheet_url, upload_name, upload_bytes, session)
    if not (query or "").strip():
        return []
    return store.run_search_query(compose_query(query, about_me), spreadsheet)


def precache_default(store: DataStore, sheet_url: str, session: Optional[requests.Session] = None) -> bool:
    """Background load of the default sheet; failures are only logged."""
    try:
        load_into_store(store, sheet_url=sheet_url, session=session)
    except NavigatorError as e:
        logger.warning(f"Could not pre-load default sheet: {e}")
        return False
    return True
