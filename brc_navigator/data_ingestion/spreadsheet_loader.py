# spreadsheet_loader.py - turn a Google Sheets URL or an uploaded file into a Spreadsheet

import io
import re
import csv
import logging
from pathlib import Path
from typing import Optional, Tuple

import pandas as pd
import requests

from brc_navigator.data_ingestion.spreadsheet import Spreadsheet
from brc_navigator.errors import FetchError, ParseError, UnsupportedFileType

logger = logging.getLogger(__name__)

SHEETS_URL_PREFIX = "https://docs.google.com/spreadsheets/d/"
CSV_EXPORT_SUFFIX = "/export?format=csv"
EDIT_SUFFIX_REGEX = re.compile(r"/edit.*$")

EXCEL_ENGINES = {
    ".xlsx": "openpyxl",
    ".xls": "xlrd",
}
SUPPORTED_EXTENSIONS = (".csv",) + tuple(EXCEL_ENGINES)


def to_csv_export_url(url: str) -> str:
    """Rewrite a Google Sheets share/edit URL into its CSV export endpoint."""
    url = (url or "").strip()
    if not url.startswith(SHEETS_URL_PREFIX):
        raise FetchError("Please enter a valid Google Sheets URL.")
    if EDIT_SUFFIX_REGEX.search(url):
        return EDIT_SUFFIX_REGEX.sub(CSV_EXPORT_SUFFIX, url)
    # bare document URL, possibly with a query string or fragment
    doc_url = re.split(r"[?#]", url, maxsplit=1)[0].rstrip("/")
    if doc_url.endswith("/export"):
        return doc_url + "?format=csv"
    return doc_url + CSV_EXPORT_SUFFIX


def _records_from_frame(frame: pd.DataFrame) -> list:
    frame = frame.dropna(how="all").fillna("")
    return frame.values.tolist()


def _csv_widths(text: str) -> Tuple[int, int]:
    """(header width, widest row) over the non-blank records of the text."""
    try:
        widths = [len(record) for record in csv.reader(io.StringIO(text)) if record]
    except csv.Error as e:
        raise ParseError(f"Failed to parse data: {e}") from e
    if not widths:
        raise ParseError("No data loaded: the sheet appears to be empty or inaccessible")
    return widths[0], max(widths)


def parse_csv_text(text: str) -> Spreadsheet:
    """Parse CSV text whose first non-blank line is the header row."""
    if not text or not text.strip():
        raise ParseError("No data loaded: the sheet appears to be empty or inaccessible")
    header_width, width = _csv_widths(text)
    try:
        # read_csv sizes columns from the first line unless names are given
        frame = pd.read_csv(
            io.StringIO(text),
            header=None,
            names=range(width),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as e:
        raise ParseError(f"No data loaded: {e}") from e
    except pd.errors.ParserError as e:
        raise ParseError(f"Failed to parse data: {e}") from e
    return Spreadsheet.from_records(_records_from_frame(frame.iloc[:, :header_width]))


def parse_excel_bytes(data: bytes, extension: str) -> Spreadsheet:
    """Read the first worksheet of an XLS/XLSX workbook."""
    engine = EXCEL_ENGINES[extension]
    try:
        frame = pd.read_excel(
            io.BytesIO(data),
            sheet_name=0,
            header=None,
            dtype=str,
            engine=engine,
        )
    except Exception as e:
        # openpyxl/xlrd raise a wide range of exception types for damaged workbooks
        raise ParseError(f"Failed to process file: {e}") from e
    return Spreadsheet.from_records(_records_from_frame(frame))


def load_upload(filename: str, data: bytes) -> Spreadsheet:
    extension = Path(filename or "").suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileType(filename)

    logger.info(f"📄 Reading uploaded {extension} file: {filename} ({len(data)} bytes)")
    if extension == ".csv":
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"Failed to process file: {e}") from e
        return parse_csv_text(text)
    return parse_excel_bytes(data, extension)


def fetch_spreadsheet(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: float = 30,
) -> Spreadsheet:
    """Download a published Google Sheet as CSV and parse it."""
    csv_url = to_csv_export_url(url)
    http = session or requests
    logger.info(f"🌐 Fetching sheet: {csv_url}")

    try:
        response = http.get(csv_url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.error(f"Sheet request failed: {e}")
        raise FetchError(f"Failed to fetch sheet: {e}") from e

    if not response.ok:
        raise FetchError(f"Failed to fetch sheet: {response.status_code} {response.reason}")

    content_type = response.headers.get("Content-Type", "")
    if content_type.startswith("text/html"):
        # private sheets redirect to a sign-in page instead of the export
        raise FetchError("Failed to fetch sheet: the sheet is not shared publicly")

    spreadsheet = parse_csv_text(response.text)
    logger.info(f"✅ Loaded {len(spreadsheet.rows)} rows x {len(spreadsheet.headers)} columns")
    return spreadsheet
