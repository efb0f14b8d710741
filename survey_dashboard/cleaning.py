"""Row cleaning and label normalisation for survey responses.

Every chart works on its own *cleaned row set*: the raw responses
filtered down to rows where the fields that chart needs are present,
non-blank and, for numeric fields, parse to a finite number.  Rows
failing the predicate are dropped silently; only the number of dropped
rows is logged.

Cleaned frames keep their string cells.  Consumers convert numeric
columns themselves with :func:`numeric_column`.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .config import GENDER_LABELS

# Module‑level logger
logger = logging.getLogger(__name__)

Rows = Union[pd.DataFrame, Iterable[Mapping[str, object]]]

_CAMEL_SPLIT = re.compile(r"[\s_-]+")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def as_frame(rows: Rows) -> pd.DataFrame:
    """Return ``rows`` as a DataFrame of strings.

    Accepts either a DataFrame or any iterable of string-keyed mappings
    (e.g. the output of :class:`csv.DictReader`).  Missing cells become
    empty strings so blank and absent values are treated alike.
    """
    if isinstance(rows, pd.DataFrame):
        frame = rows
    else:
        frame = pd.DataFrame.from_records(list(rows))
    return frame.fillna("").astype(str)


def ensure_columns(df: pd.DataFrame, required: Sequence[str]) -> None:
    """Raise an error if the DataFrame lacks any of the required columns."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise KeyError(f"Missing expected columns: {missing}")


def numeric_column(df: pd.DataFrame, col: str) -> pd.Series:
    """Parse a string column to floats; unparsable cells become NaN."""
    return pd.to_numeric(df[col].astype(str).str.strip(), errors="coerce").astype(
        float
    )


# ---------------------------------------------------------------------------
# Row cleaner
# ---------------------------------------------------------------------------


def clean_rows(
    rows: Rows,
    required_fields: Sequence[str],
    numeric_fields: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """Filter rows down to those usable by a single chart.

    Parameters
    ----------
    rows : DataFrame or iterable of mappings
        Raw survey responses with string cells.
    required_fields : Sequence[str]
        Fields that must be present and non-blank after trimming.
    numeric_fields : Sequence[str], optional
        Subset of fields that must also parse as a finite number.  Any
        numeric field not listed in ``required_fields`` is treated as
        required too.

    Returns
    -------
    pd.DataFrame
        The surviving rows, still holding strings, with a fresh
        ``RangeIndex``.  Rows failing the predicate are dropped, never
        raised on.  A required column missing from ``rows`` altogether
        counts as blank, so every row is dropped and the column is added
        to the (empty) result.
    """
    frame = as_frame(rows)
    numeric = list(numeric_fields or [])
    required = list(dict.fromkeys([*required_fields, *numeric]))
    absent = [col for col in required if col not in frame.columns]
    if absent:
        # A column nobody answered is blank in every row
        logger.debug("Columns %s absent; treating them as blank", absent)
        frame = frame.assign(**{col: "" for col in absent})
    if len(frame) == 0:
        return frame

    mask = pd.Series(True, index=frame.index, dtype=bool)
    for col in required:
        mask &= frame[col].str.strip() != ""
    for col in numeric:
        mask &= np.isfinite(numeric_column(frame, col))

    cleaned = frame.loc[mask].reset_index(drop=True)
    dropped = len(frame) - len(cleaned)
    if dropped:
        logger.debug(
            "Dropped %d of %d rows missing %s", dropped, len(frame), required
        )
    return cleaned


# ---------------------------------------------------------------------------
# Label normalisation
# ---------------------------------------------------------------------------


def normalize_gender(value: str) -> str:
    """Capitalise the two known gender spellings; pass others through."""
    value = str(value).strip()
    return GENDER_LABELS.get(value, value)


def to_camel_case(text: str) -> str:
    """Collapse free text to a single camelCase token.

    ``"Software Engineer"``, ``"software-engineer"`` and
    ``"SOFTWARE_ENGINEER"`` all become ``"softwareEngineer"``.  Only
    case and separators are folded; spelling differences survive.
    """
    words: List[str] = _CAMEL_SPLIT.split(str(text).strip().lower())
    head, tail = words[0], words[1:]
    return head + "".join(word[:1].upper() + word[1:] for word in tail)


def strip_label(value: str) -> str:
    """Default labeler: the raw value with surrounding whitespace removed."""
    return str(value).strip()
