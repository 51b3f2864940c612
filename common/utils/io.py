
import json
import pandas as pd
from pathlib import Path


def write_csv(path: Path, df: pd.DataFrame) -> None:
    """
    Always write LF line-endings and UTF-8 so outputs diff cleanly across OS.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(
        path,
        index=False,
        header=True,
        encoding="utf-8",
        lineterminator="\n",
    )


def read_csv(path: Path, dtype: dict | type | None = None) -> pd.DataFrame:
    """
    Wrapper around pandas.read_csv with consistent defaults.
    Only blank cells are read as missing: literal "NA", "None", "null" or "nan"
    are kept as text (an artist can be called "NA"). Numeric parsing later
    decides what is a number.
    """
    if not Path(path).is_file():
        raise FileNotFoundError(f"CSV file not found: {path}")
    return pd.read_csv(
        path,
        dtype=dtype,
        keep_default_na=False,
        na_values=[""],
        encoding="utf-8",
    )


def read_text_csv(path: Path) -> pd.DataFrame:
    """
    Read every cell as text so files with different value formatting end up
    with identical column types. Empty cells stay missing.
    """
    return read_csv(path, dtype=str)


def list_csv_files(directory: Path) -> list[Path]:
    """
    Sorted list of *.csv files (extension matched case-insensitively).
    Raises FileNotFoundError if the directory is missing or holds no CSVs.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Input directory not found: {directory}")
    files = sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".csv")
    if not files:
        raise FileNotFoundError(f"No CSV files found in: {directory}")
    return files


def write_json(path: Path, data: dict, indent: int = 2) -> None:
    """
    Write a JSON file with UTF-8 encoding and pretty-printing.
    Creates parent directories if needed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(
            data,
            f,
            ensure_ascii=False,
            indent=indent,
            default=str,
        )
