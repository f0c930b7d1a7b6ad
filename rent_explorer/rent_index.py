"""Exact-match rent estimator over a table of comparable listings."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Dict, List, Mapping, Union

import numpy as np
import pandas as pd
from loguru import logger

FLAG_COLUMNS = ("newlyConst", "balcony", "lift", "garden")
NUMERIC_COLUMNS = ("serviceCharge", "livingSpace", "noRooms")
POSTAL_COLUMN = "postal_code"
TARGET_COLUMN = "baseRent"
KEY_COLUMNS = FLAG_COLUMNS + NUMERIC_COLUMNS + (POSTAL_COLUMN,)

_TRUE_VALUES = frozenset({"1", "1.0", "true", "yes", "y"})
_INTEGRAL_FLOAT = re.compile(r"^(\d+)\.0*$")


def to_flag(value: object) -> float:
    """Normalize a yes/no-like value to 1.0 or 0.0 (NaN when missing)."""
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return np.nan
    if isinstance(value, (bool, np.bool_)):
        return 1.0 if value else 0.0
    return 1.0 if str(value).strip().lower() in _TRUE_VALUES else 0.0


def to_number(value: object) -> float:
    """Parse a numeric-looking value; anything else becomes NaN."""
    try:
        return float(str(value).strip().replace(",", "."))
    except (TypeError, ValueError):
        return np.nan


def to_postal_code(value: object) -> str:
    """Trimmed text form of a postal code (``'80331.0'`` -> ``'80331'``)."""
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return ""
    text = str(value).strip()
    match = _INTEGRAL_FLOAT.match(text)
    return match.group(1) if match else text


@dataclass(frozen=True)
class RentQuery:
    """One value per key column of the listings table."""

    newlyConst: object
    balcony: object
    lift: object
    garden: object
    serviceCharge: object
    livingSpace: object
    noRooms: object
    postal_code: object

    @classmethod
    def from_form(cls, values: Mapping[str, object]) -> "RentQuery":
        """Build a query from form values where flags are ``"Yes"``/``"No"``."""
        kwargs = {}
        for f in fields(cls):
            raw = values.get(f.name)
            if f.name in FLAG_COLUMNS:
                raw = 1 if str(raw).strip().lower() == "yes" else 0
            kwargs[f.name] = raw
        return cls(**kwargs)

    def normalized(self) -> Dict[str, object]:
        out: Dict[str, object] = {}
        for column in FLAG_COLUMNS:
            out[column] = to_flag(getattr(self, column))
        for column in NUMERIC_COLUMNS:
            out[column] = to_number(getattr(self, column))
        out[POSTAL_COLUMN] = to_postal_code(self.postal_code)
        return out


@dataclass(frozen=True)
class RentEstimate:
    mean: float
    matches: int

    def __str__(self) -> str:
        return f"€ {self.mean:.2f}"


class NoMatch:
    """Result of a query that matched no listing."""

    message = "No matches found."

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return "NO_MATCH"


NO_MATCH = NoMatch()

LookupResult = Union[RentEstimate, NoMatch]


def normalize_table(rows: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of *rows* with key and target columns in canonical form."""
    missing = [c for c in KEY_COLUMNS + (TARGET_COLUMN,) if c not in rows.columns]
    if missing:
        raise KeyError(f"Rent table is missing columns: {', '.join(missing)}")
    table = rows[list(KEY_COLUMNS + (TARGET_COLUMN,))].copy()
    for column in FLAG_COLUMNS:
        table[column] = table[column].map(to_flag)
    for column in NUMERIC_COLUMNS + (TARGET_COLUMN,):
        table[column] = table[column].map(to_number)
    table[POSTAL_COLUMN] = table[POSTAL_COLUMN].map(to_postal_code)
    return table


class RentIndex:
    """Holds the listings table and answers exact-match mean-rent queries.

    Every key value is normalized once at construction: flags to 0/1,
    numeric columns to float, postal codes to trimmed text.  Queries are
    normalized the same way, so ``"65"`` and ``65.0`` compare equal.
    """

    def __init__(self, rows: pd.DataFrame) -> None:
        self.raw = rows
        self.table = normalize_table(rows)

    def __len__(self) -> int:
        return len(self.table)

    def matching_rows(self, query: RentQuery) -> pd.DataFrame:
        mask = pd.Series(True, index=self.table.index)
        for column, value in query.normalized().items():
            mask &= self.table[column] == value
        return self.table[mask]

    def lookup(self, query: RentQuery) -> LookupResult:
        matches = self.matching_rows(query)
        rents = matches[TARGET_COLUMN].dropna()
        if rents.empty:
            logger.debug(f"No listing matches {query}")
            return NO_MATCH
        return RentEstimate(mean=float(rents.mean()), matches=len(rents))

    def options(self) -> Dict[str, List[object]]:
        """Sorted distinct values per form field; flags offer ``Yes``/``No``."""
        opts: Dict[str, List[object]] = {}
        for column in FLAG_COLUMNS:
            values = self.table[column].dropna().unique()
            opts[column] = sorted({"Yes" if v == 1 else "No" for v in values})
        for column in NUMERIC_COLUMNS:
            values = self.table[column].dropna().unique()
            opts[column] = [_display_number(v) for v in sorted(values)]
        opts[POSTAL_COLUMN] = sorted(v for v in self.table[POSTAL_COLUMN].unique() if v)
        return opts


def _display_number(value: float) -> object:
    return int(value) if float(value).is_integer() else float(value)
