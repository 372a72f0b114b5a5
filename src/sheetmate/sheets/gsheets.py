"""Google Sheets host."""

import logging
import random
from typing import Any, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..config import settings
from ..errors import OperationApplyError
from ..operations.models import CellFormat, PivotValue
from .a1 import (
    GridRange,
    col_span,
    index_to_col_letter,
    parse_range,
    quote_sheet,
    range_address,
    row_span,
)
from .host import HostBatch, SpreadsheetHost
from .models import NamedRangeInfo, SheetInfo, TableInfo, UsedRange, WorkbookSnapshot

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

SNAPSHOT_FIELDS = (
    "namedRanges(name,range),"
    "sheets(properties(sheetId,title,hidden,index),"
    "tables(name,range),"
    "data(startRow,startColumn,rowData(values(userEnteredValue,formattedValue))))"
)

CHART_TYPES = {
    "columnclustered": "COLUMN",
    "column": "COLUMN",
    "barclustered": "BAR",
    "bar": "BAR",
    "line": "LINE",
    "area": "AREA",
    "xyscatter": "SCATTER",
    "scatter": "SCATTER",
}

SUMMARIZE_FUNCTIONS = {
    "Sum": "SUM",
    "Count": "COUNTA",
    "Average": "AVERAGE",
    "Max": "MAX",
    "Min": "MIN",
}

ALIGNMENTS = {"Left": "LEFT", "Center": "CENTER", "Right": "RIGHT"}


def hex_to_color(value: str) -> dict:
    """Convert '#RRGGBB' to a Sheets API Color."""
    hex_value = value.lstrip("#")
    if len(hex_value) == 3:
        hex_value = "".join(c * 2 for c in hex_value)
    if len(hex_value) != 6:
        raise ValueError(f"Invalid color: {value}")
    red, green, blue = (int(hex_value[i : i + 2], 16) / 255 for i in (0, 2, 4))
    return {"red": red, "green": green, "blue": blue}


def to_extended_value(value: Any) -> dict:
    """Convert a Python value to a Sheets API ExtendedValue."""
    if isinstance(value, bool):
        return {"boolValue": value}
    if isinstance(value, (int, float)):
        return {"numberValue": value}
    return {"stringValue": "" if value is None else str(value)}


def _cell_value(cell: dict) -> tuple[Any, Any]:
    """Return (display value, formula-or-value) for a CellData."""
    entered = cell.get("userEnteredValue", {})
    formula = entered.get("formulaValue")
    if "formattedValue" in cell:
        value = cell["formattedValue"]
    elif "numberValue" in entered:
        value = entered["numberValue"]
    elif "boolValue" in entered:
        value = entered["boolValue"]
    else:
        value = entered.get("stringValue", "")
    return value, formula if formula is not None else value


def _grid_to_a1(grid: dict, titles: dict[int, str]) -> str:
    sheet = titles.get(grid.get("sheetId", 0), "")
    start_row = grid.get("startRowIndex", 0)
    start_col = grid.get("startColumnIndex", 0)
    rows = grid.get("endRowIndex", start_row + 1) - start_row
    cols = grid.get("endColumnIndex", start_col + 1) - start_col
    return f"{quote_sheet(sheet)}!{range_address(start_row, start_col, rows, cols)}"


class _PendingPivot:
    """A pivot table whose field names are resolved against headers at sync."""

    def __init__(
        self,
        source_sheet_id: int,
        source: GridRange,
        source_a1: str,
        destination_sheet_id: int,
        anchor: GridRange,
        rows: list[str],
        columns: list[str],
        values: list[PivotValue],
        operation_index: int = 0,
    ):
        self.source_sheet_id = source_sheet_id
        self.source = source
        self.source_a1 = source_a1
        self.destination_sheet_id = destination_sheet_id
        self.anchor = anchor
        self.rows = rows
        self.columns = columns
        self.values = values
        self.operation_index = operation_index
        self.request_index = 0

    @property
    def header_range(self) -> str:
        sheet, _, _ = self.source_a1.rpartition("!")
        first = f"{index_to_col_letter(self.source.start_col)}{self.source.start_row + 1}"
        last = f"{index_to_col_letter(self.source.end_col - 1)}{self.source.start_row + 1}"
        return f"{sheet}!{first}:{last}"

    def build_request(self, headers: list[str]) -> dict:
        def offset(field: str) -> int:
            if field not in headers:
                raise ValueError(f"Pivot field not found in source headers: {field}")
            return headers.index(field)

        pivot = {
            "source": self.source.to_api(self.source_sheet_id),
            "rows": [
                {"sourceColumnOffset": offset(f), "showTotals": True, "sortOrder": "ASCENDING"}
                for f in self.rows
            ],
            "columns": [
                {"sourceColumnOffset": offset(f), "showTotals": True, "sortOrder": "ASCENDING"}
                for f in self.columns
            ],
            "values": [
                {
                    "sourceColumnOffset": offset(v.field),
                    "summarizeFunction": SUMMARIZE_FUNCTIONS[v.function],
                }
                for v in self.values
            ],
        }
        return {
            "updateCells": {
                "rows": [{"values": [{"pivotTable": pivot}]}],
                "start": {
                    "sheetId": self.destination_sheet_id,
                    "rowIndex": self.anchor.start_row,
                    "columnIndex": self.anchor.start_col,
                },
                "fields": "pivotTable",
            }
        }


class GoogleSheetsBatch(HostBatch):
    """Collects Sheets API batchUpdate requests."""

    def __init__(
        self,
        active_sheet: str,
        sheet_ids: dict[str, int],
        table_names: Optional[set[str]] = None,
    ):
        super().__init__(active_sheet)
        self.sheet_ids = dict(sheet_ids)
        self.table_names = set(table_names or ())
        self.requests: list[Optional[dict]] = []
        self.pivots: list[_PendingPivot] = []
        self.activated: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.requests)

    def _sheet_id(self, name: str) -> int:
        if name not in self.sheet_ids:
            raise ValueError(f"Sheet not found: {name}")
        return self.sheet_ids[name]

    def _grid(self, sheet: str, address: str) -> tuple[int, GridRange]:
        return self._sheet_id(sheet), parse_range(address)

    def _bounded(self, sheet: str, address: str) -> tuple[int, GridRange]:
        sheet_id, grid = self._grid(sheet, address)
        if not grid.is_bounded:
            raise ValueError(f"Bounded range required, got {address!r}")
        return sheet_id, grid

    def _new_sheet_id(self) -> int:
        while True:
            candidate = random.randint(1, 2**31 - 1)
            if candidate not in self.sheet_ids.values():
                return candidate

    def set_values(self, sheet: str, address: str, value: Any):
        sheet_id, grid = self._grid(sheet, address)
        self.requests.append(
            {
                "repeatCell": {
                    "range": grid.to_api(sheet_id),
                    "cell": {"userEnteredValue": to_extended_value(value)},
                    "fields": "userEnteredValue",
                }
            }
        )

    def set_formula(self, sheet: str, address: str, formula: str):
        sheet_id, grid = self._grid(sheet, address)
        self.requests.append(
            {
                "repeatCell": {
                    "range": grid.to_api(sheet_id),
                    "cell": {"userEnteredValue": {"formulaValue": formula}},
                    "fields": "userEnteredValue",
                }
            }
        )

    def format_range(self, sheet: str, address: str, fmt: CellFormat):
        sheet_id, grid = self._grid(sheet, address)
        cell_format: dict = {}
        fields = []
        text_format: dict = {}
        if fmt.bold is not None:
            text_format["bold"] = fmt.bold
            fields.append("userEnteredFormat.textFormat.bold")
        if fmt.italic is not None:
            text_format["italic"] = fmt.italic
            fields.append("userEnteredFormat.textFormat.italic")
        if fmt.font_size is not None:
            text_format["fontSize"] = fmt.font_size
            fields.append("userEnteredFormat.textFormat.fontSize")
        if fmt.color:
            text_format["foregroundColor"] = hex_to_color(fmt.color)
            fields.append("userEnteredFormat.textFormat.foregroundColor")
        if text_format:
            cell_format["textFormat"] = text_format
        if fmt.fill:
            cell_format["backgroundColor"] = hex_to_color(fmt.fill)
            fields.append("userEnteredFormat.backgroundColor")
        if fmt.horizontal_alignment:
            cell_format["horizontalAlignment"] = ALIGNMENTS[fmt.horizontal_alignment]
            fields.append("userEnteredFormat.horizontalAlignment")
        if fmt.number_format:
            cell_format["numberFormat"] = {"type": "NUMBER", "pattern": fmt.number_format}
            fields.append("userEnteredFormat.numberFormat")
        if not fields:
            raise ValueError("Format has no properties to apply")

        self.requests.append(
            {
                "repeatCell": {
                    "range": grid.to_api(sheet_id),
                    "cell": {"userEnteredFormat": cell_format},
                    "fields": ",".join(fields),
                }
            }
        )

    def _free_table_name(self) -> str:
        number = len(self.table_names) + 1
        while f"Table{number}" in self.table_names:
            number += 1
        return f"Table{number}"

    def add_table(self, sheet: str, address: str, name: Optional[str], has_headers: bool):
        sheet_id, grid = self._bounded(sheet, address)
        if not has_headers:
            logger.info("Google Sheets tables always use the first row as headers")
        if name is None:
            name = self._free_table_name()
        elif name in self.table_names:
            raise ValueError(f"Table already exists: {name}")
        self.table_names.add(name)
        self.requests.append(
            {
                "addTable": {
                    "table": {
                        "name": name,
                        "range": grid.to_api(sheet_id),
                    }
                }
            }
        )

    def add_chart(self, sheet: str, address: str, chart_type: str, title: Optional[str]):
        sheet_id, grid = self._bounded(sheet, address)
        kind = chart_type.replace(" ", "").lower()
        domain = GridRange(grid.start_row, grid.end_row, grid.start_col, grid.start_col + 1)

        if kind == "pie":
            spec: dict = {
                "pieChart": {
                    "legendPosition": "RIGHT_LEGEND",
                    "domain": {"sourceRange": {"sources": [domain.to_api(sheet_id)]}},
                    "series": {
                        "sourceRange": {
                            "sources": [
                                GridRange(
                                    grid.start_row, grid.end_row,
                                    grid.start_col + 1, grid.start_col + 2,
                                ).to_api(sheet_id)
                            ]
                        }
                    },
                }
            }
        else:
            if kind not in CHART_TYPES:
                raise ValueError(f"Unsupported chart type: {chart_type}")
            series = [
                {
                    "series": {
                        "sourceRange": {
                            "sources": [
                                GridRange(grid.start_row, grid.end_row, col, col + 1).to_api(sheet_id)
                            ]
                        }
                    },
                    "targetAxis": "LEFT_AXIS",
                }
                for col in range(grid.start_col + 1, grid.end_col)
            ]
            spec = {
                "basicChart": {
                    "chartType": CHART_TYPES[kind],
                    "legendPosition": "BOTTOM_LEGEND",
                    "headerCount": 1,
                    "domains": [{"domain": {"sourceRange": {"sources": [domain.to_api(sheet_id)]}}}],
                    "series": series,
                }
            }
        if title:
            spec["title"] = title

        self.requests.append(
            {
                "addChart": {
                    "chart": {
                        "spec": spec,
                        "position": {
                            "overlayPosition": {
                                "anchorCell": {
                                    "sheetId": sheet_id,
                                    "rowIndex": grid.start_row,
                                    "columnIndex": grid.end_col + 1,
                                }
                            }
                        },
                    }
                }
            }
        )

    def add_pivot_table(
        self,
        source_sheet: str,
        source_address: str,
        destination_sheet: str,
        destination_address: str,
        rows: list[str],
        columns: list[str],
        values: list[PivotValue],
        name: Optional[str] = None,
    ):
        source_id, source = self._bounded(source_sheet, source_address)
        anchor = parse_range(destination_address)
        if anchor.start_row is None or anchor.start_col is None:
            raise ValueError(f"Pivot destination must be a cell, got {destination_address!r}")
        if destination_sheet not in self.sheet_ids:
            self.add_sheet(destination_sheet)

        pivot = _PendingPivot(
            source_sheet_id=source_id,
            source=source,
            source_a1=f"{quote_sheet(source_sheet)}!{source_address}",
            destination_sheet_id=self.sheet_ids[destination_sheet],
            anchor=anchor,
            rows=rows,
            columns=columns,
            values=values,
            operation_index=self.operation_index,
        )
        # Placeholder filled once the source headers are known
        pivot.request_index = len(self.requests)
        self.requests.append(None)
        self.pivots.append(pivot)

    def add_sheet(self, name: str, activate: bool = False):
        if name in self.sheet_ids:
            raise ValueError(f"Sheet already exists: {name}")
        sheet_id = self._new_sheet_id()
        self.sheet_ids[name] = sheet_id
        self.requests.append({"addSheet": {"properties": {"sheetId": sheet_id, "title": name}}})
        if activate:
            self.activated = name

    def delete_sheet(self, name: str):
        sheet_id = self._sheet_id(name)
        del self.sheet_ids[name]
        self.requests.append({"deleteSheet": {"sheetId": sheet_id}})

    def rename_sheet(self, name: str, new_name: str):
        sheet_id = self._sheet_id(name)
        if new_name in self.sheet_ids:
            raise ValueError(f"Sheet already exists: {new_name}")
        self.sheet_ids[new_name] = self.sheet_ids.pop(name)
        self.requests.append(
            {
                "updateSheetProperties": {
                    "properties": {"sheetId": sheet_id, "title": new_name},
                    "fields": "title",
                }
            }
        )

    def activate_sheet(self, name: str):
        self._sheet_id(name)
        self.activated = name

    def hide_sheet(self, name: str):
        sheet_id = self._sheet_id(name)
        self.requests.append(
            {
                "updateSheetProperties": {
                    "properties": {"sheetId": sheet_id, "hidden": True},
                    "fields": "hidden",
                }
            }
        )

    def sort_range(self, sheet: str, address: str, key: int, ascending: bool, has_headers: bool):
        sheet_id, grid = self._bounded(sheet, address)
        if key >= grid.col_count:
            raise ValueError(f"Sort key {key} outside {address}")
        if has_headers:
            grid = GridRange(grid.start_row + 1, grid.end_row, grid.start_col, grid.end_col)
        self.requests.append(
            {
                "sortRange": {
                    "range": grid.to_api(sheet_id),
                    "sortSpecs": [
                        {
                            "dimensionIndex": grid.start_col + key,
                            "sortOrder": "ASCENDING" if ascending else "DESCENDING",
                        }
                    ],
                }
            }
        )

    def apply_filter(
        self,
        sheet: str,
        address: str,
        column: Optional[int] = None,
        criteria: Optional[list[str]] = None,
    ):
        sheet_id, grid = self._grid(sheet, address)
        basic_filter: dict = {"range": grid.to_api(sheet_id)}
        if column is not None and criteria:
            column_index = (grid.start_col or 0) + column
            if len(criteria) == 1:
                condition = {"type": "TEXT_EQ", "values": [{"userEnteredValue": criteria[0]}]}
            else:
                cell = f"{index_to_col_letter(column_index)}{(grid.start_row or 0) + 2}"
                checks = ",".join(f'{cell}="{c}"' for c in criteria)
                condition = {
                    "type": "CUSTOM_FORMULA",
                    "values": [{"userEnteredValue": f"=OR({checks})"}],
                }
            basic_filter["filterSpecs"] = [
                {"columnIndex": column_index, "filterCriteria": {"condition": condition}}
            ]
        self.requests.append({"setBasicFilter": {"filter": basic_filter}})

    def _dimension(self, sheet: str, dimension: str, span: tuple[int, int]) -> dict:
        return {
            "sheetId": self._sheet_id(sheet),
            "dimension": dimension,
            "startIndex": span[0],
            "endIndex": span[1],
        }

    def insert_rows(self, sheet: str, address: str):
        span = row_span(address)
        self.requests.append(
            {
                "insertDimension": {
                    "range": self._dimension(sheet, "ROWS", span),
                    "inheritFromBefore": span[0] > 0,
                }
            }
        )

    def delete_rows(self, sheet: str, address: str):
        span = row_span(address)
        self.requests.append({"deleteDimension": {"range": self._dimension(sheet, "ROWS", span)}})

    def insert_columns(self, sheet: str, address: str):
        span = col_span(address)
        self.requests.append(
            {
                "insertDimension": {
                    "range": self._dimension(sheet, "COLUMNS", span),
                    "inheritFromBefore": span[0] > 0,
                }
            }
        )

    def delete_columns(self, sheet: str, address: str):
        span = col_span(address)
        self.requests.append(
            {"deleteDimension": {"range": self._dimension(sheet, "COLUMNS", span)}}
        )

    def autofit_columns(self, sheet: str, address: str):
        span = col_span(address)
        self.requests.append(
            {"autoResizeDimensions": {"dimensions": self._dimension(sheet, "COLUMNS", span)}}
        )


class GoogleSheetsHost(SpreadsheetHost):
    """Host backed by the Google Sheets API."""

    name = "gsheets"
    is_live = True

    def __init__(self, spreadsheet_id: str, service=None):
        self.spreadsheet_id = spreadsheet_id
        self._service = service
        self._credentials = None
        self.active_sheet: Optional[str] = None
        self._sheet_ids: dict[str, int] = {}
        self._table_names: set[str] = set()

    def _get_credentials(self) -> Credentials:
        """Get or refresh OAuth2 credentials."""
        creds = None

        if settings.google_token_path.exists():
            creds = Credentials.from_authorized_user_file(str(settings.google_token_path), SCOPES)

        if not creds or not creds.valid:
            if creds and creds.expired and creds.refresh_token:
                creds.refresh(Request())
            else:
                if not settings.google_credentials_path.exists():
                    raise FileNotFoundError(
                        f"Google credentials file not found at {settings.google_credentials_path}. "
                        "Please download it from Google Cloud Console."
                    )
                flow = InstalledAppFlow.from_client_secrets_file(
                    str(settings.google_credentials_path), SCOPES
                )
                creds = flow.run_local_server(port=0)

            # Save credentials for next run
            settings.google_token_path.parent.mkdir(parents=True, exist_ok=True)
            with open(settings.google_token_path, "w") as token:
                token.write(creds.to_json())

        return creds

    @property
    def service(self):
        """Get or create the Sheets API service."""
        if self._service is None:
            self._credentials = self._get_credentials()
            self._service = build("sheets", "v4", credentials=self._credentials)
        return self._service

    def read_snapshot(self) -> WorkbookSnapshot:
        """Read the whole workbook with a single spreadsheets.get call."""
        try:
            result = (
                self.service.spreadsheets()
                .get(
                    spreadsheetId=self.spreadsheet_id,
                    includeGridData=True,
                    fields=SNAPSHOT_FIELDS,
                )
                .execute()
            )
        except HttpError as e:
            raise RuntimeError(f"Failed to read spreadsheet: {e}")

        sheets = sorted(result.get("sheets", []), key=lambda s: s["properties"].get("index", 0))
        if not sheets:
            raise RuntimeError(f"Spreadsheet {self.spreadsheet_id} has no sheets")

        titles = {s["properties"]["sheetId"]: s["properties"]["title"] for s in sheets}
        self._sheet_ids = {title: sheet_id for sheet_id, title in titles.items()}

        if self.active_sheet not in self._sheet_ids:
            visible = [s for s in sheets if not s["properties"].get("hidden")]
            self.active_sheet = (visible or sheets)[0]["properties"]["title"]

        tables = []
        for sheet in sheets:
            for table in sheet.get("tables", []):
                tables.append(
                    TableInfo(
                        name=table["name"],
                        sheet=sheet["properties"]["title"],
                        range=_grid_to_a1(table.get("range", {}), titles),
                    )
                )

        self._table_names = {t.name for t in tables}
        named_ranges = [
            NamedRangeInfo(name=n["name"], formula="=" + _grid_to_a1(n.get("range", {}), titles))
            for n in result.get("namedRanges", [])
        ]

        active = next(s for s in sheets if s["properties"]["title"] == self.active_sheet)
        return WorkbookSnapshot(
            active_sheet_name=self.active_sheet,
            sheets=[
                SheetInfo(
                    name=s["properties"]["title"],
                    visibility="Hidden" if s["properties"].get("hidden") else "Visible",
                )
                for s in sheets
            ],
            tables=tables,
            named_ranges=named_ranges,
            used_range=self._used_range(active),
        )

    def _used_range(self, sheet: dict) -> Optional[UsedRange]:
        data = (sheet.get("data") or [{}])[0]
        row_data = data.get("rowData", [])
        if not row_data:
            return None

        values, formulas = [], []
        for row in row_data:
            cells = [_cell_value(cell) for cell in row.get("values", [])]
            values.append([c[0] for c in cells])
            formulas.append([c[1] for c in cells])

        col_count = max((len(r) for r in values), default=0)
        for grid in (values, formulas):
            for row in grid:
                row.extend([""] * (col_count - len(row)))

        start_row = data.get("startRow", 0)
        start_col = data.get("startColumn", 0)
        return UsedRange(
            address=f"{quote_sheet(sheet['properties']['title'])}!"
            + range_address(start_row, start_col, len(values), col_count),
            values=values,
            formulas=formulas,
            row_count=len(values),
            col_count=col_count,
        )

    def _load_sheet_ids(self):
        try:
            result = (
                self.service.spreadsheets()
                .get(
                    spreadsheetId=self.spreadsheet_id,
                    fields="sheets(properties(sheetId,title,hidden,index),tables(name))",
                )
                .execute()
            )
        except HttpError as e:
            raise RuntimeError(f"Failed to read spreadsheet: {e}")
        sheets = sorted(result.get("sheets", []), key=lambda s: s["properties"].get("index", 0))
        self._sheet_ids = {s["properties"]["title"]: s["properties"]["sheetId"] for s in sheets}
        self._table_names = {t["name"] for s in sheets for t in s.get("tables", [])}
        if self.active_sheet not in self._sheet_ids and sheets:
            self.active_sheet = sheets[0]["properties"]["title"]

    def begin_batch(self) -> GoogleSheetsBatch:
        if not self._sheet_ids:
            self._load_sheet_ids()
        return GoogleSheetsBatch(self.active_sheet or "", self._sheet_ids, self._table_names)

    def _resolve_pivots(self, batch: GoogleSheetsBatch):
        """Fill pivot placeholders using one batched read of their header rows."""
        if not batch.pivots:
            return
        try:
            result = (
                self.service.spreadsheets()
                .values()
                .batchGet(
                    spreadsheetId=self.spreadsheet_id,
                    ranges=[p.header_range for p in batch.pivots],
                )
                .execute()
            )
            header_rows = [
                (vr.get("values") or [[]])[0] for vr in result.get("valueRanges", [])
            ]
        except HttpError as e:
            header_rows = []
            logger.error(f"Failed to read pivot source headers: {e}")

        for index, pivot in enumerate(batch.pivots):
            headers = [str(h) for h in header_rows[index]] if index < len(header_rows) else []
            try:
                batch.requests[pivot.request_index] = pivot.build_request(headers)
            except ValueError as e:
                logger.error(f"Dropping pivot table from {pivot.source_a1}: {e}")
                batch.failures.append(
                    OperationApplyError(pivot.operation_index, "createPivotTable", str(e))
                )

    def sync(self, batch: GoogleSheetsBatch) -> int:
        """Send every queued request in one spreadsheets.batchUpdate call."""
        self._resolve_pivots(batch)
        requests = [r for r in batch.requests if r is not None]

        if requests:
            try:
                (
                    self.service.spreadsheets()
                    .batchUpdate(spreadsheetId=self.spreadsheet_id, body={"requests": requests})
                    .execute()
                )
            except HttpError as e:
                raise RuntimeError(f"Failed to apply updates: {e}")
            logger.info(f"Applied {len(requests)} requests to {self.spreadsheet_id}")

        self._sheet_ids = dict(batch.sheet_ids)
        self._table_names = set(batch.table_names)
        if batch.activated:
            self.active_sheet = batch.activated
        elif self.active_sheet not in self._sheet_ids and self._sheet_ids:
            self.active_sheet = next(iter(self._sheet_ids))
        return len(requests)
