"""Shared aggregation library for the survey charts.

All functions here are pure: they take an already-cleaned frame (see
:func:`survey_dashboard.cleaning.clean_rows`) and return plain dicts and
lists that the rendering layer consumes.  Nothing is cached and no call
depends on a previous one.

Percentages are strings with one decimal place (``"66.7"``), computed
against the size of the cleaned frame that was passed in.  A zero
denominator yields ``"0.0"`` instead of NaN or infinity.
"""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, List, Optional, Sequence

import pandas as pd

from .cleaning import ensure_columns, numeric_column, strip_label
from .config import BIN_COUNT, BIN_LABEL_UNIT, IQR_FENCE

# Module‑level logger
logger = logging.getLogger(__name__)

Labeler = Callable[[str], str]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def format_percentage(part: float, whole: float) -> str:
    """Return ``part / whole`` as a percentage string with one decimal.

    Exact ties round up (``1/16`` gives ``"6.3"``), matching how the chart
    labels have always been formatted.
    """
    if not whole:
        return "0.0"
    share = Decimal(part / whole * 100)
    return str(share.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def round_half_up(value: float) -> int:
    """Round halves towards positive infinity, as chart labels expect."""
    return int(math.floor(value + 0.5))


def _labels(frame: pd.DataFrame, key: str, labeler: Optional[Labeler]) -> pd.Series:
    return frame[key].map(labeler or strip_label)


# ---------------------------------------------------------------------------
# Categorical counter
# ---------------------------------------------------------------------------


def count_categories(
    frame: pd.DataFrame,
    key: str,
    *,
    label_key: Optional[str] = None,
    labeler: Optional[Labeler] = None,
    sort: bool = True,
) -> Dict[str, object]:
    """Count rows per category label.

    Parameters
    ----------
    frame : pd.DataFrame
        Cleaned rows.
    key : str
        Column holding the category.
    label_key : str, optional
        Name of the label field in each output item; defaults to ``key``.
    labeler : callable, optional
        Normalisation applied to each raw value before counting.  Defaults
        to whitespace trimming.
    sort : bool, default True
        Sort items by descending count.  Ties keep the order in which the
        category first appears in ``frame``.

    Returns
    -------
    dict
        ``{"items": [{label_key, "count", "percentage"}, ...], "total": n}``.
    """
    label_key = label_key or key
    total = len(frame)
    if total == 0:
        return {"items": [], "total": 0}

    ensure_columns(frame, [key])
    labels = _labels(frame, key, labeler)
    counts = labels.groupby(labels, sort=False).size()
    if sort:
        counts = counts.sort_values(ascending=False, kind="stable")

    items = [
        {
            label_key: label,
            "count": int(count),
            "percentage": format_percentage(count, total),
        }
        for label, count in counts.items()
    ]
    return {"items": items, "total": total}


# ---------------------------------------------------------------------------
# Two-level grouper
# ---------------------------------------------------------------------------


def _tally_two_level(
    frame: pd.DataFrame,
    primary_key: str,
    secondary_key: str,
    secondary_domain: Sequence[str],
    primary_labeler: Optional[Labeler],
    secondary_labeler: Optional[Labeler],
) -> pd.DataFrame:
    """Cross-tabulate primary x secondary labels.

    Rows follow the first appearance of each primary label.  Columns are
    the fixed ``secondary_domain`` followed by any other secondary labels
    seen, so every row still sums to its group size.
    """
    ensure_columns(frame, [primary_key, secondary_key])
    primary = _labels(frame, primary_key, primary_labeler)
    secondary = _labels(frame, secondary_key, secondary_labeler)

    extras = [label for label in pd.unique(secondary) if label not in secondary_domain]
    return pd.crosstab(primary, secondary).reindex(
        index=pd.unique(primary),
        columns=[*secondary_domain, *extras],
        fill_value=0,
    )


def group_two_level(
    frame: pd.DataFrame,
    primary_key: str,
    secondary_key: str,
    secondary_domain: Sequence[str],
    *,
    label_key: Optional[str] = None,
    primary_labeler: Optional[Labeler] = None,
    secondary_labeler: Optional[Labeler] = None,
) -> Dict[str, object]:
    """Break each primary category down by a secondary category.

    Parameters
    ----------
    frame : pd.DataFrame
        Cleaned rows.
    primary_key, secondary_key : str
        Columns holding the primary (e.g. education) and secondary
        (e.g. gender) categories.
    secondary_domain : Sequence[str]
        Secondary labels that always appear in ``counts``, even at zero.
    label_key : str, optional
        Name of the label field in each output item; defaults to
        ``primary_key``.
    primary_labeler, secondary_labeler : callable, optional
        Normalisation for each key.  Both default to trimming.

    Returns
    -------
    dict
        ``{"items": [...], "total": n}``, where each item holds the
        primary label, the group ``total``, ``counts`` and within-group
        ``percentages`` per secondary label, and ``total_percentage``
        against the grand total.  Items are sorted by descending group
        total; ties keep first-appearance order.
    """
    label_key = label_key or primary_key
    grand_total = len(frame)
    if grand_total == 0:
        return {"items": [], "total": 0}

    table = _tally_two_level(
        frame,
        primary_key,
        secondary_key,
        secondary_domain,
        primary_labeler,
        secondary_labeler,
    )
    totals = table.sum(axis=1).sort_values(ascending=False, kind="stable")

    items: List[Dict[str, object]] = []
    for label, group_total in totals.items():
        counts = {str(col): int(n) for col, n in table.loc[label].items()}
        items.append(
            {
                label_key: label,
                "total": int(group_total),
                "counts": counts,
                "percentages": {
                    col: format_percentage(n, group_total) for col, n in counts.items()
                },
                "total_percentage": format_percentage(group_total, grand_total),
            }
        )
    return {"items": items, "total": grand_total}


def partition_hierarchy(
    frame: pd.DataFrame,
    primary_key: str,
    secondary_key: str,
    secondary_domain: Sequence[str],
    *,
    root_name: str,
    primary_labeler: Optional[Labeler] = None,
    secondary_labeler: Optional[Labeler] = None,
) -> Dict[str, object]:
    """Nest primary categories under each secondary label.

    The root has one child per ``secondary_domain`` label with at least
    one row, in domain order.  Each child lists the primary categories
    it contains, sorted by descending count.  Every ``percentage`` is
    taken against the size of ``frame``.
    """
    root: Dict[str, object] = {"name": root_name, "value": 0, "children": []}
    grand_total = len(frame)
    if grand_total == 0:
        return root

    table = _tally_two_level(
        frame,
        primary_key,
        secondary_key,
        secondary_domain,
        primary_labeler,
        secondary_labeler,
    )

    children: List[Dict[str, object]] = []
    for secondary in secondary_domain:
        column = table[secondary]
        column = column[column > 0].sort_values(ascending=False, kind="stable")
        if column.empty:
            continue
        value = int(column.sum())
        children.append(
            {
                "name": secondary,
                "value": value,
                "percentage": format_percentage(value, grand_total),
                "children": [
                    {
                        "name": name,
                        "value": int(n),
                        "percentage": format_percentage(n, grand_total),
                    }
                    for name, n in column.items()
                ],
            }
        )

    root["children"] = children
    root["value"] = sum(child["value"] for child in children)
    return root


# ---------------------------------------------------------------------------
# Binned numeric summarizer
# ---------------------------------------------------------------------------


def bin_edges(low: float, high: float, bin_count: int) -> List[float]:
    """Equal-width edges over ``[low, high]``; the last edge is exactly ``high``."""
    width = (high - low) / bin_count
    edges = [low + i * width for i in range(bin_count)]
    edges.append(high)
    return edges


def five_number_summary(values: pd.Series) -> Dict[str, object]:
    """Box-plot statistics for one set of values.

    Quartiles use linear interpolation at ``p * (n - 1)``.  Values beyond
    ``IQR_FENCE`` interquartile ranges from the box are outliers; the
    whiskers (``min``/``max``) span the remaining values and never sit
    inside the box.
    """
    values = values.sort_values(ignore_index=True)
    q1, median, q3 = (float(q) for q in values.quantile([0.25, 0.5, 0.75]))
    iqr = q3 - q1
    lower_fence = q1 - IQR_FENCE * iqr
    upper_fence = q3 + IQR_FENCE * iqr

    is_outlier = (values < lower_fence) | (values > upper_fence)
    inliers = values[~is_outlier]
    if inliers.empty:
        inliers = values

    return {
        "quartiles": {
            "min": min(float(inliers.min()), q1),
            "q1": q1,
            "median": median,
            "q3": q3,
            "max": max(float(inliers.max()), q3),
        },
        "outliers": [float(v) for v in values[is_outlier]],
    }


def summarize_bins(
    frame: pd.DataFrame,
    bin_field: str,
    value_field: str,
    bin_count: int = BIN_COUNT,
    *,
    unit: str = BIN_LABEL_UNIT,
) -> Dict[str, object]:
    """Split ``bin_field`` into equal-width bins and summarise ``value_field``.

    Parameters
    ----------
    frame : pd.DataFrame
        Cleaned rows; both fields must hold finite numbers.
    bin_field : str
        Numeric column whose ``[min, max]`` span is binned.
    value_field : str
        Numeric column summarised within each bin.
    bin_count : int, default 5
        Number of bins.
    unit : str, default "min"
        Suffix for the bin labels, e.g. ``"12-45 min"``.

    Returns
    -------
    dict
        ``{"groups": [...], "total": n}``.  Each group holds its 1-based
        ``group`` number, ``label``, ``range``, member ``count``,
        ``quartiles``, ``outliers`` and sorted ``values``.  Empty bins
        are omitted.

    Notes
    -----
    Membership is inclusive on both ends, so a value sitting exactly on
    an interior edge is counted in both neighbouring bins.
    """
    if bin_count < 1:
        raise ValueError(f"bin_count must be at least 1, got {bin_count}")
    total = len(frame)
    if total == 0:
        return {"groups": [], "total": 0}

    ensure_columns(frame, [bin_field, value_field])
    binned = numeric_column(frame, bin_field)
    measured = numeric_column(frame, value_field)
    edges = bin_edges(float(binned.min()), float(binned.max()), bin_count)
    logger.debug("Bin edges for %s: %s", bin_field, edges)

    groups: List[Dict[str, object]] = []
    for i in range(bin_count):
        low, high = edges[i], edges[i + 1]
        members = measured[(binned >= low) & (binned <= high)]
        if members.empty:
            continue
        summary = five_number_summary(members)
        groups.append(
            {
                "group": i + 1,
                "label": f"{round_half_up(low)}-{round_half_up(high)} {unit}",
                "range": (low, high),
                "count": int(len(members)),
                **summary,
                "values": sorted(float(v) for v in members),
            }
        )
    return {"groups": groups, "total": total}


# ---------------------------------------------------------------------------
# Category metric averager
# ---------------------------------------------------------------------------


def average_metrics(
    frame: pd.DataFrame,
    group_key: str,
    metric_fields: Sequence[str],
    *,
    axis_labels: Optional[Sequence[str]] = None,
    label_key: Optional[str] = None,
    labeler: Optional[Labeler] = None,
) -> Dict[str, object]:
    """Average several numeric metrics within each category.

    Parameters
    ----------
    frame : pd.DataFrame
        Cleaned rows; every metric field must hold finite numbers.
    group_key : str
        Column holding the grouping category.
    metric_fields : Sequence[str]
        Numeric columns to average.  Output metrics follow this order.
    axis_labels : Sequence[str], optional
        Display name per metric field; defaults to the field names.
    label_key : str, optional
        Name of the label field in each output item; defaults to
        ``group_key``.
    labeler : callable, optional
        Normalisation for the grouping key.  Defaults to trimming.

    Returns
    -------
    dict
        ``{"items": [{label_key, "count", "metrics": [{"axis", "value"}]}],
        "total": n}``, sorted by descending ``count``.
    """
    label_key = label_key or group_key
    axes = list(axis_labels or metric_fields)
    if len(axes) != len(metric_fields):
        raise ValueError("axis_labels must match metric_fields one to one")

    total = len(frame)
    if total == 0:
        return {"items": [], "total": 0}

    ensure_columns(frame, [group_key, *metric_fields])
    labels = _labels(frame, group_key, labeler)
    metrics = pd.DataFrame({field: numeric_column(frame, field) for field in metric_fields})
    grouped = metrics.groupby(labels, sort=False)
    means = grouped.mean()
    sizes = grouped.size().sort_values(ascending=False, kind="stable")

    items = [
        {
            label_key: label,
            "count": int(size),
            "metrics": [
                {"axis": axis, "value": float(means.at[label, field])}
                for field, axis in zip(metric_fields, axes)
            ],
        }
        for label, size in sizes.items()
    ]
    return {"items": items, "total": total}
