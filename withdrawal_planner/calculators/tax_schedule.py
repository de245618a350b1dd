"""Inflation-indexed federal tax schedule.

The base tables (ordinary brackets, long-term capital gains brackets and the
standard deduction for each filing status) are configuration data shipped in
``data/tax_tables.json``.  A simulation that runs many years ahead indexes the
bracket bounds and the deduction by ``(1 + inflation) ** years`` so the real
tax burden stays roughly constant.  The unbounded top bracket stays unbounded
and marginal rates never change.

All the pieces needed to price withdrawals in a given simulated year are
bundled into a :class:`TaxContext`.  Build it once per year and hand it to the
allocator/optimizer for every trial instead of recomputing the scaling.

Example
-------

>>> ctx = build_tax_context("single", base_inflation=0.03, years_from_start=0)
>>> ctx.top_of_12_bracket
50400.0
>>> ctx.standard_deduction
16100.0

Alternative tables can be supplied by passing a parsed mapping (``tax_tables``)
or a path to :func:`load_tax_tables` that follows the same schema.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

_DEFAULT_TAX_TABLE_PATH = Path(__file__).resolve().parent.parent / "data" / "tax_tables.json"

DEFAULT_TAX_YEAR = 2026
TWELVE_PERCENT_RATE = 0.12


class FilingStatus(str, Enum):
    SINGLE = "single"
    MARRIED_JOINT = "married_joint"
    HEAD_OF_HOUSEHOLD = "head_of_household"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        aliases = {"mfj": cls.MARRIED_JOINT, "hoh": cls.HEAD_OF_HOUSEHOLD}
        return aliases.get(key) or cls._value2member_map_.get(key)


StatusLike = Union[FilingStatus, str]


@dataclass(frozen=True)
class TaxBracket:
    """One marginal-rate band.  ``upper`` is ``math.inf`` for the top band."""

    lower: float
    upper: float
    rate: float

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def scaled(self, factor: float) -> "TaxBracket":
        upper = self.upper if math.isinf(self.upper) else self.upper * factor
        return TaxBracket(self.lower * factor, upper, self.rate)


@dataclass(frozen=True)
class TaxContext:
    """Inflated tax parameters for one filing status in one simulated year."""

    filing_status: FilingStatus
    brackets: Tuple[TaxBracket, ...]
    cap_gains_brackets: Tuple[TaxBracket, ...]
    standard_deduction: float
    top_of_12_bracket: float
    ss_base_threshold: float
    ss_upper_threshold: float
    niit_threshold: float


def _freeze(obj: Any) -> Any:
    if isinstance(obj, dict):
        return MappingProxyType({k: _freeze(v) for k, v in obj.items()})
    if isinstance(obj, list):
        return tuple(_freeze(v) for v in obj)
    return obj


def _read_tax_tables(path: Path) -> Mapping[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        tables = json.load(f)
    return _freeze(tables)


@lru_cache(maxsize=1)
def _default_tax_tables() -> Mapping[str, Any]:
    return _read_tax_tables(_DEFAULT_TAX_TABLE_PATH)


def load_tax_tables(path: Optional[Union[str, Path]] = None) -> Mapping[str, Any]:
    """Load tax tables from JSON.

    Parameters
    ----------
    path : str or Path, optional
        JSON file following the schema of the bundled ``tax_tables.json``.
        When omitted the bundled file is used; it is parsed only once.

    Returns
    -------
    Mapping
        Read-only view of the tables keyed by tax year (as a string).
    """
    if path is None:
        return _default_tax_tables()
    return _read_tax_tables(Path(path))


def _year_tables(year: int, tax_tables: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    tables = tax_tables if tax_tables is not None else load_tax_tables()
    try:
        return tables[str(year)]
    except KeyError:
        raise KeyError(f"no tax tables for year {year}") from None


def _parse_brackets(rows) -> Tuple[TaxBracket, ...]:
    return tuple(
        TaxBracket(
            lower=float(row["start"]),
            upper=math.inf if row["end"] is None else float(row["end"]),
            rate=float(row["rate"]),
        )
        for row in rows
    )


def inflation_factor(base_inflation: float, years_from_start: int) -> float:
    return (1.0 + base_inflation) ** years_from_start


def base_brackets(
    filing_status: StatusLike,
    year: int = DEFAULT_TAX_YEAR,
    tax_tables: Optional[Mapping[str, Any]] = None,
) -> Tuple[TaxBracket, ...]:
    """Ordinary-income brackets for ``filing_status`` exactly as tabulated."""
    status = FilingStatus(filing_status)
    federal = _year_tables(year, tax_tables)["federal"][status.value]
    return _parse_brackets(federal["brackets"])


def base_cap_gains_brackets(
    filing_status: StatusLike,
    year: int = DEFAULT_TAX_YEAR,
    tax_tables: Optional[Mapping[str, Any]] = None,
) -> Tuple[TaxBracket, ...]:
    status = FilingStatus(filing_status)
    federal = _year_tables(year, tax_tables)["federal"][status.value]
    return _parse_brackets(federal["cap_gains"])


def inflated_brackets(
    filing_status: StatusLike,
    base_inflation: float,
    years_from_start: int,
    year: int = DEFAULT_TAX_YEAR,
    tax_tables: Optional[Mapping[str, Any]] = None,
) -> Tuple[TaxBracket, ...]:
    """Ordinary-income brackets with every finite bound scaled for inflation."""
    factor = inflation_factor(base_inflation, years_from_start)
    return tuple(b.scaled(factor) for b in base_brackets(filing_status, year, tax_tables))


def inflated_cap_gains_brackets(
    filing_status: StatusLike,
    base_inflation: float,
    years_from_start: int,
    year: int = DEFAULT_TAX_YEAR,
    tax_tables: Optional[Mapping[str, Any]] = None,
) -> Tuple[TaxBracket, ...]:
    factor = inflation_factor(base_inflation, years_from_start)
    return tuple(
        b.scaled(factor) for b in base_cap_gains_brackets(filing_status, year, tax_tables)
    )


def inflated_standard_deduction(
    filing_status: StatusLike,
    base_inflation: float,
    years_from_start: int,
    year: int = DEFAULT_TAX_YEAR,
    tax_tables: Optional[Mapping[str, Any]] = None,
) -> float:
    status = FilingStatus(filing_status)
    federal = _year_tables(year, tax_tables)["federal"][status.value]
    deduction = float(federal.get("standard_deduction", 0.0))
    return deduction * inflation_factor(base_inflation, years_from_start)


def _top_of_rate(brackets: Tuple[TaxBracket, ...], rate: float) -> float:
    for bracket in brackets:
        if bracket.rate == rate:
            return bracket.upper
    return 0.0


def top_of_12_percent_bracket(
    filing_status: StatusLike,
    base_inflation: float,
    years_from_start: int,
    year: int = DEFAULT_TAX_YEAR,
    tax_tables: Optional[Mapping[str, Any]] = None,
) -> float:
    """Inflated upper bound of the 12% bracket.

    Returns ``0.0`` when the schedule has no 12% bracket; callers treat that
    as "no bracket filling available".
    """
    brackets = inflated_brackets(filing_status, base_inflation, years_from_start, year, tax_tables)
    return _top_of_rate(brackets, TWELVE_PERCENT_RATE)


def build_tax_context(
    filing_status: StatusLike,
    base_inflation: float,
    years_from_start: int,
    year: int = DEFAULT_TAX_YEAR,
    tax_tables: Optional[Mapping[str, Any]] = None,
) -> TaxContext:
    """Compute every inflated parameter for one simulated year.

    Parameters
    ----------
    filing_status : FilingStatus or str
        ``single``, ``married_joint`` (``mfj``) or ``head_of_household`` (``hoh``).
    base_inflation : float
        Annual inflation rate used to index the tables, e.g. ``0.03``.
    years_from_start : int
        Whole years elapsed since the plan's base tax year.
    year : int, optional
        Base tax year to read from the tables.
    tax_tables : Mapping, optional
        Pre-loaded tables; defaults to the bundled file.

    Returns
    -------
    TaxContext
        Immutable bundle safe to share across trials.
    """
    status = FilingStatus(filing_status)
    year_tables = _year_tables(year, tax_tables)
    federal = year_tables["federal"][status.value]
    factor = inflation_factor(base_inflation, years_from_start)

    brackets = tuple(b.scaled(factor) for b in _parse_brackets(federal["brackets"]))
    cap_gains = tuple(b.scaled(factor) for b in _parse_brackets(federal["cap_gains"]))
    ss = year_tables["social_security"][status.value]

    return TaxContext(
        filing_status=status,
        brackets=brackets,
        cap_gains_brackets=cap_gains,
        standard_deduction=float(federal.get("standard_deduction", 0.0)) * factor,
        top_of_12_bracket=_top_of_rate(brackets, TWELVE_PERCENT_RATE),
        ss_base_threshold=float(ss["base"]),
        ss_upper_threshold=float(ss["upper"]),
        niit_threshold=float(year_tables["niit"][status.value]),
    )


__all__ = [
    "FilingStatus",
    "TaxBracket",
    "TaxContext",
    "DEFAULT_TAX_YEAR",
    "load_tax_tables",
    "inflation_factor",
    "base_brackets",
    "base_cap_gains_brackets",
    "inflated_brackets",
    "inflated_cap_gains_brackets",
    "inflated_standard_deduction",
    "top_of_12_percent_bracket",
    "build_tax_context",
]
