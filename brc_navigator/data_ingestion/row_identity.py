# row_identity.py

import hashlib
from typing import Optional, Sequence

UID_HEADER = "uid"
CELL_SEPARATOR = "\x1f"


def find_uid_column(headers: Sequence[str]) -> int:
    """Index of the first header named "uid" (any case), or -1."""
    for i, header in enumerate(headers):
        if str(header).strip().lower() == UID_HEADER:
            return i
    return -1


def _cell(row: Sequence[Optional[str]], index: int) -> str:
    if index < 0 or index >= len(row):
        return ""
    value = row[index]
    return "" if value is None else str(value)


def identify(row: Sequence[Optional[str]], row_index: int, uid_column_index: int = -1) -> str:
    """
    Key used to remember a row as a favorite.

    A non-empty uid cell is returned as is. Otherwise the key combines the
    row position with a digest of its cells: unique within one load, but it
    changes if the source sheet is reordered or edited upstream.
    """
    if uid_column_index >= 0:
        uid = _cell(row, uid_column_index)
        if uid:
            return uid

    joined = CELL_SEPARATOR.join("" if value is None else str(value) for value in row)
    digest = hashlib.sha1(joined.encode("utf-8")).hexdigest()[:12]
    return f"row-{row_index}-{digest}"
