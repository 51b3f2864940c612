
from pathlib import Path
import logging

import pandas as pd

from common.utils.io import list_csv_files, read_csv, read_text_csv

logger = logging.getLogger(__name__)

# Reference columns that must never be type-inferred (ids look numeric sometimes,
# artist lists and partial dates are free text).
REFERENCE_TEXT_COLUMNS = ["id", "artists", "release_date"]


def load_limited_tables(directory: Path) -> list[pd.DataFrame]:
    """
    Read every CSV in `directory` as an all-text table, one frame per file.
    """
    files = list_csv_files(directory)
    tables = []
    for path in files:
        df = read_text_csv(path)
        logger.info(f"Loaded {path.name}: {len(df)} rows, {len(df.columns)} columns")
        tables.append(df)
    logger.info(f"Loaded {len(tables)} limited files from {directory}")
    return tables


def load_reference_table(path: Path) -> pd.DataFrame:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Reference dataset not found: {path}")
    df = read_csv(path, dtype={c: str for c in REFERENCE_TEXT_COLUMNS})
    logger.info(f"Loaded reference dataset {path.name}: {len(df)} rows")
    return df
