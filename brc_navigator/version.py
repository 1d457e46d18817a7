# version.py

import logging

logger = logging.getLogger(__name__)

__version__ = "0.3.0"

VERSION_INFO = {
    "version": __version__,
    "compact_breakpoint": 480,
    "description": "Streamlit navigator with favorites and LLM search",
    "features": [
        "Google Sheets URL and CSV/XLS/XLSX upload",
        "Virtualised table with sort and column widths",
        "Card list layout for compact screens",
        "Favorites persisted between sessions",
    ],
}


def log_version_info() -> None:
    logger.info(f"🔥 BRC Navigator {VERSION_INFO['version']}")
    logger.info(f"Description: {VERSION_INFO['description']}")
    logger.info(f"Compact breakpoint: {VERSION_INFO['compact_breakpoint']}px")
    logger.info(f"Features: {', '.join(VERSION_INFO['features'])}")
