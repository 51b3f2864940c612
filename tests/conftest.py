from pathlib import Path

import pandas as pd
import pytest
import yaml

LIMITED_HEADER = [
    "Popularity",
    "Artist Name(s)",
    "Track Name",
    "Duration (ms)",
    "Key",
    "Loudness",
    "Mode",
    "Speechiness",
    "Acousticness",
    "Instrumentalness",
    "Liveness",
    "Valence",
    "Tempo",
    "Time Signature",
    "Release Date",
    "Track ID",
]


def limited_row(track_id, artists, popularity="50", duration="200000", **overrides):
    row = {
        "Popularity": popularity,
        "Artist Name(s)": artists,
        "Track Name": f"song {track_id}",
        "Duration (ms)": duration,
        "Key": "5",
        "Loudness": "-6.5",
        "Mode": "1",
        "Speechiness": "0.05",
        "Acousticness": "0.2",
        "Instrumentalness": "0",
        "Liveness": "0.1",
        "Valence": "0.6",
        "Tempo": "120.0",
        "Time Signature": "4",
        "Release Date": "2015-06-01",
        "Track ID": track_id,
    }
    row.update(overrides)
    return row


def limited_frame(rows) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=LIMITED_HEADER, dtype=object)


def reference_frame(rows) -> pd.DataFrame:
    return pd.DataFrame(
        rows,
        columns=["id", "artists", "name", "year", "release_date", "duration_ms", "popularity", "acousticness"],
    )


def reference_row(track_id, artists, year, duration_ms=200000):
    return {
        "id": track_id,
        "artists": artists,
        "name": f"ref {track_id}",
        "year": year,
        "release_date": str(year),
        "duration_ms": duration_ms,
        "popularity": 30,
        "acousticness": 0.5,
    }


@pytest.fixture
def scenario_limited():
    return limited_frame([
        {
            **limited_row("t1", "A,B", popularity="45", duration="200000"),
            "Track Name": "X",
        }
    ])


@pytest.fixture
def scenario_reference():
    return reference_frame([reference_row("t1", "['A', 'B']", 2015)])


@pytest.fixture
def make_repo(tmp_path):
    """
    Build a throwaway repo: configs/project.yaml plus limited/reference CSVs.
    Returns a callable taking (limited_files, reference_df, **cfg_overrides).
    """

    def _make(limited_files: dict[str, pd.DataFrame], reference: pd.DataFrame, **split_overrides) -> Path:
        root = tmp_path / "repo"
        (root / "configs").mkdir(parents=True)
        limited_dir = root / "data" / "raw" / "limited"
        limited_dir.mkdir(parents=True)
        for name, df in limited_files.items():
            df.to_csv(limited_dir / name, index=False)
        reference.to_csv(root / "data" / "raw" / "data.csv", index=False)

        cfg = {
            "paths": {
                "limited_dir": "data/raw/limited",
                "reference_csv": "data/raw/data.csv",
                "processed_dir": "data/processed",
            },
            "logging": {"level": "INFO", "fmt": "%(levelname)s %(name)s %(message)s"},
            "split": {"proportions": [0.6, 0.2, 0.2], "stratify_col": "decade", "seed": 42, **split_overrides},
            "quality": {"min_joined_rows": 1},
        }
        with (root / "configs" / "project.yaml").open("w", encoding="utf-8") as f:
            yaml.safe_dump(cfg, f)
        return root

    return _make
