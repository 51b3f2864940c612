
import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


# ---------------------------
# Decade
# ---------------------------
DECADE_EDGES = [1950, 1960, 1970, 1980, 1990, 2000, 2010, 2020]
DECADE_LABELS = (
    ["1950-"]
    + [f"{lo} - {hi}" for lo, hi in zip(DECADE_EDGES[:-1], DECADE_EDGES[1:])]
    + ["2020+"]
)


def decade_buckets(years: pd.Series) -> pd.Series:
    """
    Map release years to DECADE_LABELS. Lower bounds are inclusive:
    2010 -> "2010 - 2020", 1949 -> "1950-", 2020 and later -> "2020+".
    Missing years give a missing bucket.
    """
    numeric = pd.to_numeric(years, errors="coerce").astype(float)
    cut = pd.cut(
        numeric,
        bins=[-np.inf] + DECADE_EDGES + [np.inf],
        labels=DECADE_LABELS,
        right=False,
    )
    return cut.astype(object)


def decade_bucket(year) -> str | None:
    value = decade_buckets(pd.Series([year])).iloc[0]
    return None if pd.isna(value) else value


def add_decade_bucket(df: pd.DataFrame, source_col: str = "year", target_col: str = "decade") -> pd.DataFrame:
    if source_col not in df.columns:
        raise KeyError(f"Expected '{source_col}' to derive {target_col}")
    out = df.copy()
    out[target_col] = decade_buckets(out[source_col])
    return out


# ---------------------------
# Popularity
# ---------------------------
POPULARITY_EDGES = list(range(0, 101, 10))
POPULARITY_LABELS = ["0-10"] + [f"{lo + 1}-{lo + 10}" for lo in range(10, 100, 10)]


def popularity_buckets(scores: pd.Series) -> pd.Series:
    """
    [0, 10] -> "0-10", then (10, 20] -> "11-20" ... (90, 100] -> "91-100".
    Fractional scores land in the half-open interval containing them
    (10.5 -> "11-20"). Scores outside [0, 100] get a missing bucket.
    """
    numeric = pd.to_numeric(scores, errors="coerce").astype(float)
    # include_lowest widens the first bin slightly below 0
    numeric = numeric.where(numeric >= 0)
    cut = pd.cut(
        numeric,
        bins=POPULARITY_EDGES,
        labels=POPULARITY_LABELS,
        right=True,
        include_lowest=True,
    )
    return cut.astype(object)


def popularity_bucket(score) -> str | None:
    value = popularity_buckets(pd.Series([score])).iloc[0]
    return None if pd.isna(value) else value


def add_popularity_bucket(
    df: pd.DataFrame,
    source_col: str = "popularity",
    target_col: str = "popularity_range",
) -> pd.DataFrame:
    if source_col not in df.columns:
        raise KeyError(f"Expected '{source_col}' to derive {target_col}")
    out = df.copy()
    out[target_col] = popularity_buckets(out[source_col])

    scores = pd.to_numeric(out[source_col], errors="coerce")
    out_of_range = int((scores.notna() & out[target_col].isna()).sum())
    if out_of_range:
        logger.warning(f"Popularity outside [0, 100] left unbucketed: {out_of_range} rows")
    return out


# ---------------------------
# Artist count
# ---------------------------
def artist_count(artists) -> int | None:
    """Commas + 1. An empty string still counts as one artist."""
    if not isinstance(artists, str):
        if pd.isna(artists):
            return None
        artists = str(artists)
    return artists.count(",") + 1


def add_artist_count(df: pd.DataFrame, source_col: str = "artists", target_col: str = "artist_count") -> pd.DataFrame:
    if source_col not in df.columns:
        raise KeyError(f"Expected '{source_col}' to derive {target_col}")
    out = df.copy()
    out[target_col] = out[source_col].map(artist_count, na_action="ignore").astype("Int64")
    return out


# ---------------------------
# Assembly
# ---------------------------
def derive_features(joined: pd.DataFrame) -> pd.DataFrame:
    """
    Adds decade, popularity_range and artist_count to the joined table.
    Each derivation is a pure per-row function; row order is preserved.
    """
    out = add_decade_bucket(joined)
    out = add_popularity_bucket(out)
    out = add_artist_count(out)
    logger.info(
        "Derived features: "
        f"decades={out['decade'].value_counts(dropna=False).to_dict()}"
    )
    return out
