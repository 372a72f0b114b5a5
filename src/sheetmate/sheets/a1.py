"""A1 notation helpers."""

import re
from dataclasses import dataclass
from typing import Optional

_CELL_RE = re.compile(r"^\$?([A-Za-z]+)\$?(\d+)$")
_COL_RE = re.compile(r"^\$?([A-Za-z]+)$")
_ROW_RE = re.compile(r"^\$?(\d+)$")


def col_letter_to_index(col: str) -> int:
    """Convert column letter(s) to 0-based index. A=0, B=1, ..., Z=25, AA=26, etc."""
    result = 0
    for char in col.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def index_to_col_letter(index: int) -> str:
    """Convert 0-based index to column letter(s)."""
    result = ""
    index += 1
    while index > 0:
        index -= 1
        result = chr(ord("A") + (index % 26)) + result
        index //= 26
    return result


def parse_cell_notation(cell: str) -> tuple[str, int]:
    """Parse A1 notation into column letters and row number."""
    match = _CELL_RE.match(cell.strip())
    if not match:
        raise ValueError(f"Invalid cell notation: {cell}")
    return match.group(1).upper(), int(match.group(2))


def split_sheet(address: str) -> tuple[Optional[str], str]:
    """Split ``'My Sheet'!A1:B2`` into the sheet name and the range part."""
    if "!" not in address:
        return None, address.strip()
    sheet, _, range_part = address.rpartition("!")
    sheet = sheet.strip()
    if sheet.startswith("'") and sheet.endswith("'"):
        sheet = sheet[1:-1].replace("''", "'")
    return sheet, range_part.strip()


def quote_sheet(name: str) -> str:
    """Quote a sheet name for use in a range reference."""
    return "'" + name.replace("'", "''") + "'"


@dataclass(frozen=True)
class GridRange:
    """Zero-based, end-exclusive bounds of a range. None means unbounded."""

    start_row: Optional[int]
    end_row: Optional[int]
    start_col: Optional[int]
    end_col: Optional[int]

    @property
    def is_bounded(self) -> bool:
        return None not in (self.start_row, self.end_row, self.start_col, self.end_col)

    @property
    def row_count(self) -> Optional[int]:
        if self.start_row is None or self.end_row is None:
            return None
        return self.end_row - self.start_row

    @property
    def col_count(self) -> Optional[int]:
        if self.start_col is None or self.end_col is None:
            return None
        return self.end_col - self.start_col

    def to_api(self, sheet_id: int) -> dict:
        """Render as a Sheets API GridRange."""
        grid = {"sheetId": sheet_id}
        if self.start_row is not None:
            grid["startRowIndex"] = self.start_row
        if self.end_row is not None:
            grid["endRowIndex"] = self.end_row
        if self.start_col is not None:
            grid["startColumnIndex"] = self.start_col
        if self.end_col is not None:
            grid["endColumnIndex"] = self.end_col
        return grid


def _parse_endpoint(part: str) -> tuple[Optional[int], Optional[int]]:
    """Return (row, col) zero-based for a cell, a bare column or a bare row."""
    part = part.strip()
    match = _CELL_RE.match(part)
    if match:
        return int(match.group(2)) - 1, col_letter_to_index(match.group(1))
    match = _COL_RE.match(part)
    if match:
        return None, col_letter_to_index(match.group(1))
    match = _ROW_RE.match(part)
    if match:
        return int(match.group(1)) - 1, None
    raise ValueError(f"Invalid range endpoint: {part!r}")


def parse_range(address: str) -> GridRange:
    """Parse ``A1``, ``A1:C10``, ``A:C`` or ``3:5`` (sheet prefix ignored)."""
    _, range_part = split_sheet(address)
    if not range_part:
        raise ValueError("Empty range address")

    start, sep, end = range_part.partition(":")
    if not sep:
        end = start
    start_row, start_col = _parse_endpoint(start)
    end_row, end_col = _parse_endpoint(end)

    # Mixed forms like A1:3 are not valid A1 notation
    if (start_row is None) != (end_row is None) or (start_col is None) != (end_col is None):
        raise ValueError(f"Invalid range: {address!r}")
    if start_row is not None and start_row < 0 or start_col is not None and start_col < 0:
        raise ValueError(f"Invalid range: {address!r}")

    rows = sorted((start_row, end_row)) if start_row is not None else (None, None)
    cols = sorted((start_col, end_col)) if start_col is not None else (None, None)
    return GridRange(
        start_row=rows[0],
        end_row=rows[1] + 1 if rows[1] is not None else None,
        start_col=cols[0],
        end_col=cols[1] + 1 if cols[1] is not None else None,
    )


def row_span(address: str) -> tuple[int, int]:
    """Zero-based, end-exclusive row span of ``3:5``, ``3`` or ``A3:C5``."""
    grid = parse_range(address)
    if grid.start_row is None:
        raise ValueError(f"Row span required, got {address!r}")
    return grid.start_row, grid.end_row


def col_span(address: str) -> tuple[int, int]:
    """Zero-based, end-exclusive column span of ``B:C``, ``B`` or ``B1:C5``."""
    grid = parse_range(address)
    if grid.start_col is None:
        raise ValueError(f"Column span required, got {address!r}")
    return grid.start_col, grid.end_col


def range_address(start_row: int, start_col: int, row_count: int, col_count: int) -> str:
    """Build an A1 address from zero-based origin and size."""
    start = f"{index_to_col_letter(start_col)}{start_row + 1}"
    if row_count <= 1 and col_count <= 1:
        return start
    end = f"{index_to_col_letter(start_col + max(col_count, 1) - 1)}{start_row + max(row_count, 1)}"
    return f"{start}:{end}"
