
import logging
import math
from typing import Sequence, Tuple

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

PARTITIONS = ("train", "validation", "test")
MISSING_STRATUM = "<missing>"
DEFAULT_PROPORTIONS = (0.6, 0.2, 0.2)


# ---------------------------
# Proportions & rounding
# ---------------------------

def resolve_proportions(proportions: Sequence[float]) -> Tuple[float, float, float]:
    """
    Accept (train, val, test) or (train, val) with test as the remainder.
    """
    props = [float(p) for p in proportions]
    if len(props) == 2:
        props.append(max(0.0, 1.0 - sum(props)))
    if len(props) != 3:
        raise ValueError(f"Expected 2 or 3 split proportions, got {len(props)}")
    if any(p < 0 or p > 1 for p in props):
        raise ValueError(f"Split proportions must lie in [0, 1]: {props}")
    if abs(sum(props) - 1.0) > 1e-9:
        raise ValueError(f"Split proportions must sum to 1: {props}")
    return props[0], props[1], props[2]


def allocate_counts(n: int, proportions: Sequence[float]) -> list[int]:
    """
    Largest-remainder rounding of n * proportions.
    Floors first, then hands the leftover rows to the largest fractional parts;
    equal fractions go to the earlier partition (train, then validation, then test).
    """
    if n < 0:
        raise ValueError(f"Row count must be non-negative: {n}")
    # rounding absorbs float noise such as 5 * 0.6 = 2.9999999999999996
    exact = [round(n * p, 9) for p in proportions]
    counts = [math.floor(x) for x in exact]
    leftover = n - sum(counts)
    order = sorted(range(len(exact)), key=lambda i: (-(exact[i] - counts[i]), i))
    for i in order[:leftover]:
        counts[i] += 1
    return counts


# ---------------------------
# Assignment
# ---------------------------

def _strata(df: pd.DataFrame, stratify_col: str) -> pd.Series:
    if stratify_col not in df.columns:
        raise KeyError(f"Stratification column '{stratify_col}' not in table")
    col = df[stratify_col].astype(object)
    return col.where(col.notna(), MISSING_STRATUM).astype(str)


def assign_partitions(
    df: pd.DataFrame,
    *,
    seed: int,
    stratify_col: str = "decade",
    proportions: Sequence[float] = DEFAULT_PROPORTIONS,
) -> pd.Series:
    """
    Label every row train/validation/test, proportioned within each stratum.

    Strata are visited in sorted order and shuffled with one
    numpy Generator seeded by `seed`, so a fixed seed reproduces the
    assignment exactly. Rows with a missing stratum value form their own stratum.
    """
    if df.empty:
        raise ValueError("Cannot split an empty table; the join produced no rows")
    props = resolve_proportions(proportions)
    strata = _strata(df, stratify_col)
    rng = np.random.default_rng(seed)

    labels = np.empty(len(df), dtype=object)
    for stratum in sorted(strata.unique()):
        positions = np.flatnonzero((strata == stratum).to_numpy())
        shuffled = rng.permutation(positions)
        bounds = np.cumsum([0] + allocate_counts(len(positions), props))
        for name, lo, hi in zip(PARTITIONS, bounds[:-1], bounds[1:]):
            labels[shuffled[lo:hi]] = name

    return pd.Series(labels, index=df.index, name="partition")


def split_summary(
    df: pd.DataFrame,
    assignment: pd.Series,
    *,
    stratify_col: str = "decade",
    proportions: Sequence[float] = DEFAULT_PROPORTIONS,
) -> dict:
    """
    Rows per stratum and partition, plus the strata where a partition with a
    non-zero target ended up empty (logged as warnings).
    """
    props = resolve_proportions(proportions)
    strata = _strata(df, stratify_col)
    table = pd.crosstab(strata.to_numpy(), assignment.to_numpy())
    table = table.reindex(columns=list(PARTITIONS), fill_value=0)

    counts = {}
    starved = []
    for stratum, row in table.iterrows():
        counts[stratum] = {name: int(row[name]) for name in PARTITIONS}
        empty = [name for name, p in zip(PARTITIONS, props) if p > 0 and row[name] == 0]
        if empty:
            starved.append(stratum)
            logger.warning(
                f"Stratum '{stratum}' has {int(row.sum())} rows; "
                f"no rows left for {', '.join(empty)}"
            )

    totals = {name: int((assignment == name).sum()) for name in PARTITIONS}
    logger.info(
        "Stratified split on "
        f"{stratify_col}: rows = {totals['train']}/{totals['validation']}/{totals['test']}"
    )
    return {
        "stratify_col": stratify_col,
        "proportions": list(props),
        "totals": totals,
        "per_stratum": counts,
        "starved_strata": starved,
    }


def partition_frames(
    df: pd.DataFrame, assignment: pd.Series
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    mask = assignment.to_numpy()
    train, val, test = (df[mask == name].copy() for name in PARTITIONS)
    return train, val, test


def stratified_split(
    df: pd.DataFrame,
    *,
    seed: int,
    stratify_col: str = "decade",
    proportions: Sequence[float] = DEFAULT_PROPORTIONS,
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    """
    Disjoint train/validation/test frames whose union is `df`, each in the
    original row order.
    """
    assignment = assign_partitions(df, seed=seed, stratify_col=stratify_col, proportions=proportions)
    split_summary(df, assignment, stratify_col=stratify_col, proportions=proportions)
    return partition_frames(df, assignment)
