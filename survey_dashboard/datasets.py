"""Chart datasets: one builder per dashboard chart.

Each builder cleans the raw responses with the fields its chart needs
and hands the cleaned frame to the shared aggregation functions.  The
raw frame is never modified, so every builder can run against the same
loaded dataset in any order.

The primary entry point is :func:`build_all`, which returns every chart
dataset keyed by chart id.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from .aggregation import (
    average_metrics,
    count_categories,
    group_two_level,
    partition_hierarchy,
    round_half_up,
    summarize_bins,
)
from .cleaning import Rows, as_frame, clean_rows, normalize_gender, to_camel_case
from .config import (
    BIN_COUNT,
    EDUCATION_COL,
    GENDER_COL,
    GENDER_DOMAIN,
    HIERARCHY_ROOT,
    MINUTES_COL,
    OCCUPATION_COL,
    PICTOGRAPH_UNITS,
    PICTOGRAPH_UNITS_PER_ROW,
    POLITICAL_VIEW_COL,
    RADAR_METRICS,
    SHARES_COL,
)

# Module‑level logger
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def pictograph_units(
    items: List[Dict[str, object]],
    total: int,
    *,
    label_key: str = "gender",
    units: int = PICTOGRAPH_UNITS,
    units_per_row: int = PICTOGRAPH_UNITS_PER_ROW,
) -> List[Dict[str, object]]:
    """Allocate icon units to categories for a pictograph grid.

    Each category receives ``round(count / total * units)`` units, handed
    out in item order until ``units`` are used up.  Every unit records its
    running ``index`` and its ``row``/``col`` in the grid.
    """
    allocated: List[Dict[str, object]] = []
    if not total:
        return allocated

    for item in items:
        share = round_half_up(item["count"] / total * units)
        for _ in range(share):
            if len(allocated) >= units:
                return allocated
            index = len(allocated)
            allocated.append(
                {
                    label_key: item[label_key],
                    "index": index,
                    "row": index // units_per_row,
                    "col": index % units_per_row,
                }
            )
    return allocated


def _flatten_gender_counts(grouped: Dict[str, object]) -> Dict[str, object]:
    """Add the flat per-gender fields the stacked bar chart reads."""
    for item in grouped["items"]:
        for gender in GENDER_DOMAIN:
            key = gender.lower()
            item[f"{key}_count"] = item["counts"][gender]
            item[f"{key}_percentage"] = item["percentages"][gender]
    return grouped


# ---------------------------------------------------------------------------
# Chart builders
# ---------------------------------------------------------------------------


def gender_distribution(rows: Rows) -> Dict[str, object]:
    """Gender counts plus the pictograph unit layout."""
    cleaned = clean_rows(rows, [GENDER_COL])
    result = count_categories(cleaned, GENDER_COL, labeler=normalize_gender)
    result["units"] = pictograph_units(result["items"], result["total"])
    logger.info("Gender distribution over %d respondents", result["total"])
    return result


def education_by_gender(rows: Rows) -> Dict[str, object]:
    """Education levels broken down by gender, largest level first."""
    cleaned = clean_rows(rows, [EDUCATION_COL, GENDER_COL])
    grouped = group_two_level(
        cleaned,
        EDUCATION_COL,
        GENDER_COL,
        GENDER_DOMAIN,
        label_key="education",
        secondary_labeler=normalize_gender,
    )
    logger.info(
        "Education by gender: %d levels over %d respondents",
        len(grouped["items"]),
        grouped["total"],
    )
    return _flatten_gender_counts(grouped)


def occupation_by_gender(rows: Rows) -> Dict[str, object]:
    """Occupations (camelCase-folded) broken down by gender."""
    cleaned = clean_rows(rows, [OCCUPATION_COL, GENDER_COL])
    grouped = group_two_level(
        cleaned,
        OCCUPATION_COL,
        GENDER_COL,
        GENDER_DOMAIN,
        label_key="occupation",
        primary_labeler=to_camel_case,
        secondary_labeler=normalize_gender,
    )
    logger.info(
        "Occupation by gender: %d occupations over %d respondents",
        len(grouped["items"]),
        grouped["total"],
    )
    return _flatten_gender_counts(grouped)


def occupation_hierarchy(rows: Rows) -> Dict[str, object]:
    """Gender -> occupation tree for the sunburst chart."""
    cleaned = clean_rows(rows, [OCCUPATION_COL, GENDER_COL])
    hierarchy = partition_hierarchy(
        cleaned,
        OCCUPATION_COL,
        GENDER_COL,
        GENDER_DOMAIN,
        root_name=HIERARCHY_ROOT,
        primary_labeler=to_camel_case,
        secondary_labeler=normalize_gender,
    )
    return {"hierarchy": hierarchy, "total": len(cleaned)}


def political_view_distribution(rows: Rows) -> Dict[str, object]:
    cleaned = clean_rows(rows, [POLITICAL_VIEW_COL])
    result = count_categories(cleaned, POLITICAL_VIEW_COL, label_key="view")
    logger.info(
        "Political views: %d categories over %d respondents",
        len(result["items"]),
        result["total"],
    )
    return result


def share_by_usage(rows: Rows, bin_count: int = BIN_COUNT) -> Dict[str, object]:
    """Weekly shares summarised over bins of daily minutes online."""
    cleaned = clean_rows(
        rows, [MINUTES_COL, SHARES_COL], numeric_fields=[MINUTES_COL, SHARES_COL]
    )
    result = summarize_bins(cleaned, MINUTES_COL, SHARES_COL, bin_count)
    logger.info(
        "Share by usage: %d non-empty bins over %d respondents",
        len(result["groups"]),
        result["total"],
    )
    return result


def verification_by_political_view(rows: Rows) -> Dict[str, object]:
    """Average verification metrics per political view for the radar chart."""
    fields = [field for field, _ in RADAR_METRICS]
    cleaned = clean_rows(rows, [POLITICAL_VIEW_COL, *fields], numeric_fields=fields)
    result = average_metrics(
        cleaned,
        POLITICAL_VIEW_COL,
        fields,
        axis_labels=[axis for _, axis in RADAR_METRICS],
        label_key="political_view",
    )
    logger.info(
        "Verification radar: %d political views over %d respondents",
        len(result["items"]),
        result["total"],
    )
    return result


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


def build_all(rows: Rows, *, bin_count: int = BIN_COUNT) -> Dict[str, Dict[str, object]]:
    """Run every chart builder over one dataset.

    Parameters
    ----------
    rows : DataFrame or iterable of mappings
        Raw survey responses.
    bin_count : int, default 5
        Number of usage bins for the box plot.

    Returns
    -------
    Dict[str, dict]
        Chart datasets keyed by chart id (see ``config.CHART_OPTIONS``),
        plus ``"occupation_hierarchy"`` for the sunburst.
    """
    frame = as_frame(rows)
    logger.info("Building chart datasets from %d responses", len(frame))
    return {
        "gender": gender_distribution(frame),
        "education": education_by_gender(frame),
        "occupation": occupation_by_gender(frame),
        "occupation_hierarchy": occupation_hierarchy(frame),
        "political_view": political_view_distribution(frame),
        "usage": share_by_usage(frame, bin_count=bin_count),
        "verification": verification_by_political_view(frame),
    }
