"""
Configuration constants for the survey dashboard.
"""

import os
from pathlib import Path
from typing import Dict, List, Tuple

# ======================================================
#  DATA SOURCES / CONSTANTS
# ======================================================
REPO_ROOT: Path = Path(__file__).resolve().parent.parent

# Local path or URL; overridable through the environment
DATA_SOURCE: str = os.getenv(
    "SURVEY_DATA_SOURCE", str(REPO_ROOT / "data" / "NormDataPD2.csv")
)

DEFAULT_SEP: str = ","

# ======================================================
#  COLUMNS
# ======================================================
GENDER_COL: str = "gender"
EDUCATION_COL: str = "education_qualifications"
OCCUPATION_COL: str = "current_occupation"
POLITICAL_VIEW_COL: str = "political_view"
MINUTES_COL: str = "minute_per_day"
SHARES_COL: str = "share_per_week"
VERIFICATION_IMPORTANCE_COL: str = "verification_importance"
TRUSTWORTHINESS_COL: str = "trustworthiness"
VERIFICATION_LEVEL_COL: str = "verification_level"

SURVEY_COLUMNS: List[str] = [
    GENDER_COL,
    EDUCATION_COL,
    OCCUPATION_COL,
    POLITICAL_VIEW_COL,
    MINUTES_COL,
    SHARES_COL,
    VERIFICATION_IMPORTANCE_COL,
    TRUSTWORTHINESS_COL,
    VERIFICATION_LEVEL_COL,
]

# ======================================================
#  LABELS
# ======================================================
# Exact-match relabelling; anything else passes through untouched
GENDER_LABELS: Dict[str, str] = {"male": "Male", "female": "Female"}
GENDER_DOMAIN: Tuple[str, ...] = ("Male", "Female")

HIERARCHY_ROOT: str = "Survey Respondents"

# (field, axis label); order is the radar axis order
RADAR_METRICS: List[Tuple[str, str]] = [
    (VERIFICATION_IMPORTANCE_COL, "Verification Importance"),
    (TRUSTWORTHINESS_COL, "Trustworthiness"),
    (VERIFICATION_LEVEL_COL, "Verification Level"),
]

# ======================================================
#  AGGREGATION DEFAULTS
# ======================================================
BIN_COUNT: int = 5
IQR_FENCE: float = 1.5
BIN_LABEL_UNIT: str = "min"

PICTOGRAPH_UNITS: int = 100
PICTOGRAPH_UNITS_PER_ROW: int = 20

# ======================================================
#  UI DEFAULTS
# ======================================================
GENDER_COLORS: Dict[str, str] = {
    "Male": "#1d2932",
    "Female": "#e74c3c",
}
FALLBACK_COLOR: str = "#f39c12"

SERIES_COLORS: List[str] = [
    "#1d2932",
    "#e74c3c",
    "#f39c12",
    "#2ecc71",
    "#9b59b6",
    "#e67e22",
    "#34495e",
]

BOX_COLOR: str = "#1d2932"
MEDIAN_COLOR: str = "#e74c3c"
OUTLIER_COLOR: str = "#f39c12"

# Radar radial axis starts here; the survey has no averages below it
RADAR_AXIS_MIN: float = 4.0

CHART_OPTIONS: List[Tuple[str, str]] = [
    ("Gender Distribution", "gender"),
    ("Education Qualifications", "education"),
    ("Occupation by Gender", "occupation"),
    ("Political View", "political_view"),
    ("Sharing by Daily Usage", "usage"),
    ("Verification by Political View", "verification"),
]
