"""Cell content variants and the numeric coercion policy."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Union

import pandas as pd


@dataclass(frozen=True)
class Blank:
    pass


@dataclass(frozen=True)
class Numeric:
    value: float


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Formula:
    """A formula cell; ``cached`` is the last value Excel stored, if any."""

    expression: str
    cached: Any = None

    @property
    def display(self) -> str:
        if self.cached is None:
            return self.expression
        return str(self.cached)


@dataclass(frozen=True)
class Other:
    """Booleans, dates, errors and anything else that is not a figure."""

    value: Any


CellContent = Union[Blank, Numeric, Text, Formula, Other]

BLANK = Blank()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def classify(value: Any, cached: Any = None, *, is_formula: bool = False) -> CellContent:
    """Map a raw openpyxl value (plus its cached result) onto a cell variant."""
    if value is None:
        return BLANK
    # ArrayFormula / DataTableFormula expose the expression as ``text``.
    expression = getattr(value, "text", None)
    if isinstance(expression, str):
        return Formula(expression=expression, cached=cached)
    if is_formula:
        return Formula(expression=str(value), cached=cached)
    if _is_number(value):
        return Numeric(float(value))
    if isinstance(value, str):
        if value.startswith("="):
            return Formula(expression=value, cached=cached)
        return Text(value)
    return Other(value)


def parse_number(text: str) -> float | None:
    """Parse *text* as a plain number; ``None`` when it is not one.

    Thousands separators are not accepted, so ``"1,234"`` is not a number.
    """
    token = text.strip()
    if not token:
        return None
    parsed = pd.to_numeric(pd.Series([token], dtype="string"), errors="coerce").iloc[0]
    if pd.isna(parsed):
        return None
    result = float(parsed)
    if not math.isfinite(result):
        return None
    return result


def coerce_number(cell: CellContent) -> float:
    """Return the numeric value of *cell*, falling back to 0.

    Numbers are used directly.  Formulas use their cached result, then their
    displayed text.  Text is parsed.  Everything else is 0.
    """
    if isinstance(cell, Numeric):
        return cell.value
    if isinstance(cell, Formula):
        if _is_number(cell.cached):
            return float(cell.cached)
        parsed = parse_number(cell.display)
        return 0.0 if parsed is None else parsed
    if isinstance(cell, Text):
        parsed = parse_number(cell.text)
        return 0.0 if parsed is None else parsed
    return 0.0


def cell_text(cell: CellContent) -> str:
    """Trimmed display text of *cell* ("" for blanks)."""
    if isinstance(cell, Blank):
        return ""
    if isinstance(cell, Text):
        return cell.text.strip()
    if isinstance(cell, Numeric):
        value = cell.value
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(cell, Formula):
        return cell.display.strip()
    return str(cell.value).strip()
