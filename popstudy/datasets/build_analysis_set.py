
from dataclasses import asdict, dataclass
import logging

import pandas as pd

logger = logging.getLogger(__name__)

JOIN_KEYS = ["id", "artists"]
REFERENCE_SUFFIX = "_ref"


@dataclass(frozen=True)
class JoinStats:
    reference_rows: int
    limited_rows: int
    matched_rows: int
    duplicates_removed: int
    joined_rows: int
    unmatched_reference_keys: int
    unmatched_limited_keys: int

    def as_dict(self) -> dict:
        return asdict(self)


def _key_set(df: pd.DataFrame) -> set:
    return set(df[JOIN_KEYS].dropna().itertuples(index=False, name=None))


def join_datasets(reference: pd.DataFrame, limited: pd.DataFrame) -> tuple[pd.DataFrame, JoinStats]:
    """
    Inner join on (id, canonical artist string).

    - Limited-side columns keep their names; overlapping reference columns get
      the '_ref' suffix.
    - The reference duration_ms is dropped (limited duration_sec is authoritative).
    - Exact duplicate rows are removed and the result is sorted by artists.
    """
    for name, frame in (("reference", reference), ("limited", limited)):
        missing = [k for k in JOIN_KEYS if k not in frame.columns]
        if missing:
            raise KeyError(f"{name} dataset is missing join columns: {missing}")

    # pandas matches NaN keys to each other; a missing key never joins
    merged = limited.dropna(subset=JOIN_KEYS).merge(
        reference.dropna(subset=JOIN_KEYS),
        how="inner",
        on=JOIN_KEYS,
        suffixes=("", REFERENCE_SUFFIX),
        sort=False,
    )
    matched = len(merged)

    merged = merged.drop(
        columns=[c for c in ("duration_ms", f"duration_ms{REFERENCE_SUFFIX}") if c in merged.columns]
    )
    deduped = merged.drop_duplicates()
    joined = deduped.sort_values("artists", kind="mergesort").reset_index(drop=True)

    ref_keys = _key_set(reference)
    lim_keys = _key_set(limited)
    stats = JoinStats(
        reference_rows=len(reference),
        limited_rows=len(limited),
        matched_rows=matched,
        duplicates_removed=matched - len(deduped),
        joined_rows=len(joined),
        unmatched_reference_keys=len(ref_keys - lim_keys),
        unmatched_limited_keys=len(lim_keys - ref_keys),
    )
    logger.info(
        "Joined reference/limited on (id, artists): "
        f"{stats.reference_rows}/{stats.limited_rows} rows in, "
        f"{stats.matched_rows} matched, {stats.duplicates_removed} duplicates removed, "
        f"{stats.joined_rows} rows out"
    )
    logger.info(
        "Keys without a partner: "
        f"reference={stats.unmatched_reference_keys}, limited={stats.unmatched_limited_keys}"
    )
    return joined, stats


def check_joined_size(joined: pd.DataFrame, min_rows: int) -> bool:
    """Warn (and return False) when the joined table is too small to model on."""
    if len(joined) < min_rows:
        logger.warning(
            f"Joined dataset has {len(joined)} rows (< {min_rows}); "
            "check artist formatting and track ids in the inputs"
        )
        return False
    return True
