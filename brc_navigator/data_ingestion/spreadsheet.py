# spreadsheet.py - typed headers/rows model for a loaded sheet

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from brc_navigator.data_ingestion.row_identity import find_uid_column, identify
from brc_navigator.errors import ParseError

ROW_INDEX_COLUMN = "row_index"


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value)


@dataclass(frozen=True)
class Row:
    """One data row, aligned to the sheet headers."""
    position: int  # 0-based among data rows; -1 for rows not found in the sheet
    cells: Tuple[str, ...]

    def __getitem__(self, index: int) -> str:
        return self.cells[index] if 0 <= index < len(self.cells) else ""

    def __len__(self) -> int:
        return len(self.cells)

    def get(self, column: Union[int, str], headers: Optional[Sequence[str]] = None) -> str:
        """Cell by position, or by header name (case-insensitive) when headers are given."""
        if isinstance(column, int) and not isinstance(column, bool):
            return self[column]
        if headers is None:
            raise TypeError("headers are required to look up a cell by name")
        wanted = str(column).strip().lower()
        for i, header in enumerate(headers):
            if header.strip().lower() == wanted:
                return self[i]
        return ""

    def as_dict(self, headers: Sequence[str]) -> Dict[str, str]:
        return {header: self[i] for i, header in enumerate(headers)}


@dataclass
class Spreadsheet:
    headers: Tuple[str, ...] = ()
    rows: List[Row] = field(default_factory=list)

    @classmethod
    def from_values(cls, headers: Sequence[Any], rows: Iterable[Sequence[Any]]) -> "Spreadsheet":
        header_cells = tuple(_text(h).strip() for h in headers)
        width = len(header_cells)
        aligned = []
        for position, values in enumerate(rows):
            cells = [_text(v) for v in list(values)[:width]]
            cells.extend([""] * (width - len(cells)))
            aligned.append(Row(position=position, cells=tuple(cells)))
        return cls(headers=header_cells, rows=aligned)

    @classmethod
    def from_records(cls, records: Sequence[Sequence[Any]]) -> "Spreadsheet":
        """First record is the header row, the rest are data rows."""
        if not records or not any(_text(v).strip() for v in records[0]):
            raise ParseError("No data loaded: the sheet appears to be empty or inaccessible")
        return cls.from_values(records[0], records[1:])

    @property
    def uid_column_index(self) -> int:
        return find_uid_column(self.headers)

    def column_index(self, name: str) -> int:
        wanted = name.strip().lower()
        for i, header in enumerate(self.headers):
            if header.lower() == wanted:
                return i
        return -1

    def identity_of(self, row: Row) -> str:
        return identify(row.cells, row.position, self.uid_column_index)

    def row_at(self, position: Any) -> Optional[Row]:
        if isinstance(position, bool) or not isinstance(position, int):
            return None
        if 0 <= position < len(self.rows):
            return self.rows[position]
        return None

    def is_empty(self) -> bool:
        return not self.headers

    def to_frame(self) -> pd.DataFrame:
        columns = list(self.headers)
        return pd.DataFrame([list(r.cells) for r in self.rows], columns=columns, dtype=str)

    def to_csv(self, include_row_index: bool = True) -> str:
        """Serialise as CSV text; the optional leading column lets results point back at rows."""
        frame = self.to_frame()
        if include_row_index:
            frame.insert(0, ROW_INDEX_COLUMN, [r.position for r in self.rows], allow_duplicates=True)
        return frame.to_csv(index=False)
