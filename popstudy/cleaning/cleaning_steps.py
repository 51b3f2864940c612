
import logging
import re
from typing import Iterable

import pandas as pd

logger = logging.getLogger(__name__)

# Limited export headers -> reference dataset / snake_case names.
# artists, id and name must match the reference columns exactly for the join.
LIMITED_RENAME = {
    "Popularity": "popularity",
    "Artist Name(s)": "artists",
    "Track Name": "name",
    "Duration (ms)": "duration_ms",
    "Key": "key",
    "Loudness": "loudness",
    "Mode": "mode",
    "Speechiness": "speechiness",
    "Acousticness": "acousticness",
    "Instrumentalness": "instrumentalness",
    "Liveness": "liveness",
    "Valence": "valence",
    "Tempo": "tempo",
    "Time Signature": "time_signature",
    "Release Date": "release_date",
    "Track ID": "id",
}

LIMITED_NUMERIC = [
    "popularity",
    "duration_ms",
    "key",
    "loudness",
    "mode",
    "speechiness",
    "acousticness",
    "instrumentalness",
    "liveness",
    "valence",
    "tempo",
    "time_signature",
]

LIMITED_DATES = ["release_date"]


def concat_tables(tables: Iterable[pd.DataFrame]) -> pd.DataFrame:
    frames = list(tables)
    if not frames:
        raise ValueError("No tables to concatenate")
    return pd.concat(frames, axis=0, ignore_index=True, sort=False)


def rename_columns(df, mapping):
    present = {k: v for k, v in mapping.items() if k in df.columns}
    return df.rename(columns=present) if present else df

# -------------------------
# Numbers & dates
# -------------------------

def _strip_text(s: pd.Series) -> pd.Series:
    if pd.api.types.is_object_dtype(s) or pd.api.types.is_string_dtype(s):
        return s.str.strip()
    return s


def to_numeric(df, columns):
    """Text -> number; anything unparseable becomes NaN."""
    cols = [c for c in columns if c in df.columns]
    if not cols:
        return df
    out = df.copy()
    for c in cols:
        out[c] = pd.to_numeric(_strip_text(out[c]), errors="coerce")
    return out


_DATE_PATTERN = re.compile(r"^(\d{4})(?:-(\d{2})(?:-(\d{2}))?)?(?:\s\d{2}:\d{2}:\d{2})?$")


def _standardize_date_value(s):
    """'YYYY', 'YYYY-MM', 'YYYY-MM-DD' (optionally with a time) -> 'YYYY-MM-DD'; else None."""
    if not isinstance(s, str) or not s.strip():
        return None
    m = _DATE_PATTERN.match(s.strip())
    if not m:
        return None
    year, month, day = m.group(1), m.group(2) or "01", m.group(3) or "01"
    return f"{year}-{month}-{day}"


def to_datetime(df, columns):
    """Text -> datetime; 'YYYY', 'YYYY-MM' and full dates accepted, the rest NaT."""
    cols = [c for c in columns if c in df.columns]
    if not cols:
        return df
    out = df.copy()
    for c in cols:
        std = out[c].map(_standardize_date_value).astype(object)
        # impossible dates such as 2015-13-40 match the pattern and coerce to NaT here
        out[c] = pd.to_datetime(std, format="%Y-%m-%d", errors="coerce")
    return out


def count_parse_failures(raw: pd.DataFrame, parsed: pd.DataFrame, columns) -> dict[str, int]:
    """
    Cells that held non-blank text before parsing and are missing afterwards.
    Cells that were already empty are legitimately missing and not counted.
    """
    failures = {}
    for c in columns:
        if c not in raw.columns or c not in parsed.columns:
            continue
        text = raw[c].astype("string").str.strip()
        had_value = text.notna() & (text != "")
        failures[c] = int((had_value & parsed[c].isna()).sum())
    return failures


def to_nullable_int(df, columns):
    """
    Round and store as nullable Int64 (missing stays <NA>).
    """
    cols = [c for c in columns if c in df.columns]
    if not cols:
        return df
    out = df.copy()
    for c in cols:
        out[c] = pd.to_numeric(_strip_text(out[c]), errors="coerce")
        out[c] = out[c].round().astype("Int64")
    return out


def add_duration_seconds(df, source="duration_ms", target="duration_sec"):
    if source not in df.columns:
        return df
    out = df.copy()
    out[target] = out[source] / 1000
    return out.drop(columns=[source])

# -------------------------
# Artists
# -------------------------

_STRUCTURAL_CHARS = re.compile(r"[\[\]'\"]")
_COMMA_SPACING = re.compile(r",\s*")


def canonicalize_artists(value):
    """
    "['A', 'B']" and "A,B" both become "A, B".

    Brackets and quote characters are removed and every comma is followed by
    exactly one space. A comma inside an artist name ("Artist, Jr.") is
    indistinguishable from a separator and is treated as one.
    """
    if not isinstance(value, str):
        return value
    s = _STRUCTURAL_CHARS.sub("", value)
    s = _COMMA_SPACING.sub(", ", s)
    return s.strip()


def canonicalize_artist_column(df, column="artists"):
    if column not in df.columns:
        return df
    out = df.copy()
    out[column] = out[column].map(canonicalize_artists, na_action="ignore")
    return out

# -------------------------
# Dataset-level steps
# -------------------------

def normalize_limited(tables: Iterable[pd.DataFrame]) -> tuple[pd.DataFrame, dict[str, int]]:
    """
    Stack the limited exports and make them joinable with the reference set.

    Returns the normalized frame and per-column counts of cells that failed
    to parse (those cells are missing in the output).
    """
    raw = rename_columns(concat_tables(tables), LIMITED_RENAME)

    df = to_numeric(raw, LIMITED_NUMERIC)
    df = to_datetime(df, LIMITED_DATES)
    failures = count_parse_failures(raw, df, LIMITED_NUMERIC + LIMITED_DATES)

    bad = {c: n for c, n in failures.items() if n}
    if bad:
        logger.warning(f"Unparseable cells set to missing: {bad}")

    df = add_duration_seconds(df)
    df = canonicalize_artist_column(df, "artists")
    logger.info(f"Normalized limited dataset: {len(df)} rows")
    return df, failures


def normalize_reference(df: pd.DataFrame) -> pd.DataFrame:
    out = to_nullable_int(df, ["year"])
    out = canonicalize_artist_column(out, "artists")
    missing_years = int(out["year"].isna().sum()) if "year" in out.columns else len(out)
    if missing_years:
        logger.warning(f"Reference rows without a usable year: {missing_years}")
    return out
