"""Data manager for loading the survey responses.

This module is the single place where the survey CSV is read.  The
result is a DataFrame of strings (blank cells stay ``""``) that is
passed by reference to every chart builder; nothing downstream mutates
it.  Reads are memoised per source so repeated page loads do not hit
the disk or network again, and ``logging`` is used instead of printing
directly to stdout.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from io import StringIO
from pathlib import Path
from typing import Optional, Union

import pandas as pd
import requests

from .config import DATA_SOURCE, DEFAULT_SEP, SURVEY_COLUMNS

logger = logging.getLogger(__name__)

Source = Union[str, Path]


def _resolve_source(source: Source) -> Union[StringIO, Path]:
    """
    Return a file-like object (for URLs) or Path (for local files) for the CSV.
    """
    source_str = str(source)
    if source_str.lower().startswith(("http://", "https://")):
        response = requests.get(source_str, timeout=30)
        response.raise_for_status()
        return StringIO(response.text)

    path = Path(source).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Survey data not found at {path}")
    return path


@lru_cache(maxsize=4)
def _read_survey(source: str, sep: str) -> pd.DataFrame:
    """Read the CSV with every cell as a string."""
    frame = pd.read_csv(
        _resolve_source(source),
        sep=sep,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )
    frame.columns = [str(col).strip() for col in frame.columns]
    return frame


def load_survey(
    source: Source = DATA_SOURCE,
    *,
    sep: str = DEFAULT_SEP,
    force_reload: bool = False,
) -> pd.DataFrame:
    """
    Load the survey responses, reusing a previous read of the same source.

    Parameters
    ----------
    source : str or Path, optional
        Local path or HTTP(S) URL of the survey CSV.  Defaults to
        ``config.DATA_SOURCE``.
    sep : str, optional
        Column delimiter; defaults to ``","``.
    force_reload : bool, optional
        If ``True``, drop memoised reads and read the source again.

    Returns
    -------
    pd.DataFrame
        One row per respondent, every cell a string.  Treat it as
        read-only: the same object is returned to every caller.
    """
    if force_reload:
        _read_survey.cache_clear()

    frame = _read_survey(str(source), sep)
    logger.info("Loaded %d survey responses from %s", len(frame), source)
    missing = [col for col in SURVEY_COLUMNS if col not in frame.columns]
    if missing:
        # Charts needing these columns will show no data
        logger.warning("Survey data at %s lacks columns: %s", source, missing)
    return frame


def try_load_survey(
    source: Source = DATA_SOURCE,
    *,
    sep: str = DEFAULT_SEP,
    force_reload: bool = False,
) -> Optional[pd.DataFrame]:
    """
    Like :func:`load_survey`, but return ``None`` when the source is unreachable.

    A missing local file or a failed HTTP request means "no data yet"
    for the dashboard rather than a crash.  Parse errors still propagate.
    """
    try:
        return load_survey(source, sep=sep, force_reload=force_reload)
    except (FileNotFoundError, requests.RequestException) as exc:
        logger.error("Could not load survey data from %s: %s", source, exc)
        return None
