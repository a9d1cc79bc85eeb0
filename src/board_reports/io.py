"""I/O helpers — open the overview workbook, write JSON artifacts."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from board_reports.cells import BLANK, CellContent, classify
from board_reports.errors import TableMissing

logger = logging.getLogger(__name__)

_WORKBOOK_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")


# ── Source tables ────────────────────────────────────────────────


class SheetTable:
    """Read-only, zero-based view over one worksheet.

    *formulas* is the sheet as stored (formula text kept); *values* is the
    same sheet loaded with ``data_only=True`` and supplies cached results.
    Reads outside the used range return a blank cell and never grow the sheet.
    """

    def __init__(self, formulas: Worksheet, values: Worksheet | None = None) -> None:
        self._formulas = formulas
        self._values = values

    @property
    def name(self) -> str:
        return self._formulas.title

    @property
    def n_rows(self) -> int:
        return self._formulas.max_row

    @property
    def n_cols(self) -> int:
        return self._formulas.max_column

    def has_row(self, row: int) -> bool:
        return 0 <= row < self.n_rows

    def cell(self, row: int, col: int) -> CellContent:
        if not self.has_row(row) or not 0 <= col < self.n_cols:
            return BLANK
        raw = self._formulas.cell(row=row + 1, column=col + 1)
        cached = None
        if self._values is not None and raw.data_type == "f":
            cached = self._values.cell(row=row + 1, column=col + 1).value
        return classify(raw.value, cached, is_formula=raw.data_type == "f")

    def row_width(self, row: int) -> int:
        """Return one past the last populated column of *row* (0 if none)."""
        if not self.has_row(row):
            return 0
        width = 0
        for values in self._formulas.iter_rows(
            min_row=row + 1, max_row=row + 1, max_col=self.n_cols, values_only=True
        ):
            for idx, value in enumerate(values, 1):
                if value is not None and str(value).strip():
                    width = idx
        return width


class SourceWorkbook:
    """The overview workbook, opened once and shared read-only by the run."""

    def __init__(self, path: Path, formulas: Workbook, values: Workbook | None = None) -> None:
        self.path = Path(path)
        self._formulas = formulas
        self._values = values

    @property
    def sheet_names(self) -> list[str]:
        return list(self._formulas.sheetnames)

    def table(self, sheet: str) -> SheetTable:
        """Return the named sheet.

        Raises
        ------
        TableMissing
            If the workbook has no sheet called *sheet*.
        """
        if sheet not in self._formulas.sheetnames:
            raise TableMissing(sheet)
        values_ws = None
        if self._values is not None and sheet in self._values.sheetnames:
            values_ws = self._values[sheet]
        return SheetTable(self._formulas[sheet], values_ws)


def open_workbook(path: Path) -> SourceWorkbook:
    """Load the overview workbook at *path*.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        If the extension is not a supported Excel workbook type.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in _WORKBOOK_SUFFIXES:
        raise ValueError(f"Unsupported file type: {suffix!r}. Use .xlsx or .xlsm")

    formulas = load_workbook(path, data_only=False)
    values = load_workbook(path, data_only=True)
    logger.debug("Loaded %s with sheets %s", path, formulas.sheetnames)
    return SourceWorkbook(path, formulas, values)


# ── Writing ──────────────────────────────────────────────────────


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=_json_default,
    ) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path
