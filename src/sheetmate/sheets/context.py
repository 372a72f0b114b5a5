"""Workbook context rendering for the model prompt."""

import logging

from .a1 import index_to_col_letter, parse_range
from .host import SpreadsheetHost
from .models import UsedRange, WorkbookSnapshot

logger = logging.getLogger(__name__)


def _format_cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class ContextSerializer:
    """Renders a bounded text summary of the workbook.

    The snapshot is read fresh on every call. Read failures never escape:
    the caller always gets a best-effort string.
    """

    def __init__(self, host: SpreadsheetHost, max_rows: int = 20, max_formulas: int = 20):
        self.host = host
        self.max_rows = max_rows
        self.max_formulas = max_formulas

    def build(self) -> str:
        try:
            snapshot = self.host.read_snapshot()
        except Exception as e:
            logger.error(f"Failed to read workbook from {self.host.name} host: {e}", exc_info=True)
            return (
                "CURRENT EXCEL WORKBOOK STATE:\n"
                f"Workbook data is unavailable ({e}).\n"
            )
        return self.render(snapshot)

    def render(self, snapshot: WorkbookSnapshot) -> str:
        lines = [
            "CURRENT EXCEL WORKBOOK STATE:",
            f'Active Sheet: "{snapshot.active_sheet_name}"',
            "Available Sheets: "
            + ", ".join(
                s.name if s.visibility == "Visible" else f"{s.name} ({s.visibility})"
                for s in snapshot.sheets
            ),
        ]

        if snapshot.tables:
            lines.append("")
            lines.append("Tables:")
            for table in snapshot.tables:
                location = f" ({table.range})" if table.range else ""
                lines.append(f"- {table.name}{location}")

        if snapshot.named_ranges:
            lines.append("")
            lines.append("Named Ranges:")
            for named in snapshot.named_ranges:
                lines.append(f"- {named.name} ({named.formula})")

        if snapshot.used_range:
            lines.append("")
            lines.extend(self._render_used_range(snapshot.used_range))

        return "\n".join(lines) + "\n"

    def _render_used_range(self, used: UsedRange) -> list[str]:
        origin_row, origin_col = self._origin(used.address)
        lines = [
            f"ACTIVE SHEET DATA ({used.address}):",
            f"Rows: {used.row_count}, Columns: {used.col_count}",
        ]

        if used.values:
            shown = min(len(used.values), self.max_rows)
            lines.append("")
            lines.append(f"Data Preview (first {shown} rows):")
            for index, row in enumerate(used.values[:shown]):
                cells = " | ".join(_format_cell(v) for v in row)
                lines.append(f"Row {origin_row + index + 1}: {cells}")
            if len(used.values) > shown:
                lines.append(f"... and {len(used.values) - shown} more rows")

        formula_cells = []
        for row_index, row in enumerate(used.formulas):
            for col_index, formula in enumerate(row):
                if isinstance(formula, str) and formula.startswith("="):
                    cell = f"{index_to_col_letter(origin_col + col_index)}{origin_row + row_index + 1}"
                    formula_cells.append(f"{cell}: {formula}")

        if formula_cells:
            lines.append("")
            lines.append("FORMULAS IN SHEET:")
            for entry in formula_cells[: self.max_formulas]:
                lines.append(f"  {entry}")
            if len(formula_cells) > self.max_formulas:
                lines.append(f"  ... and {len(formula_cells) - self.max_formulas} more formulas")

        return lines

    @staticmethod
    def _origin(address: str) -> tuple[int, int]:
        try:
            grid = parse_range(address)
        except ValueError:
            return 0, 0
        return grid.start_row or 0, grid.start_col or 0

