# error_boundary.py

import logging
from contextlib import contextmanager

import streamlit as st

logger = logging.getLogger(__name__)


@contextmanager
def error_boundary(section: str):
    """Keep a failing page section from taking the rest of the page down."""
    try:
        yield
    except Exception as e:
        logger.exception(f"Error caught in {section}: {e}")
        st.error(f"⚠️ Something went wrong in {section}. Reload the page to try again.")
        with st.expander("🔧 Error details", expanded=False):
            st.exception(e)
