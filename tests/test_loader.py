import pandas as pd
import pytest

from common.utils.io import list_csv_files, read_csv, write_csv
from popstudy.ingest.loader import load_limited_tables, load_reference_table

from conftest import LIMITED_HEADER, limited_frame, limited_row, reference_frame, reference_row


def test_limited_tables_are_read_as_text(tmp_path):
    limited_frame([limited_row("007", "A,B", popularity="45")]).to_csv(tmp_path / "b.csv", index=False)
    limited_frame([limited_row("t2", "C", Key="01")]).to_csv(tmp_path / "a.CSV", index=False)
    (tmp_path / "notes.txt").write_text("not a table", encoding="utf-8")

    tables = load_limited_tables(tmp_path)

    assert len(tables) == 2
    first, second = tables
    assert list(first.columns) == LIMITED_HEADER
    assert first.loc[0, "Key"] == "01"
    assert second.loc[0, "Track ID"] == "007"
    assert second.loc[0, "Popularity"] == "45"
    assert all(pd.api.types.is_string_dtype(dtype) for dtype in second.dtypes)


def test_missing_directory_is_fatal(tmp_path):
    with pytest.raises(FileNotFoundError, match="not found"):
        load_limited_tables(tmp_path / "nope")


def test_directory_without_csv_is_fatal(tmp_path):
    (tmp_path / "readme.md").write_text("x", encoding="utf-8")
    with pytest.raises(FileNotFoundError, match="No CSV"):
        load_limited_tables(tmp_path)


def test_reference_table_keeps_ids_as_text(tmp_path):
    path = tmp_path / "data.csv"
    reference_frame([reference_row("0001", "['A']", 2015)]).to_csv(path, index=False)
    df = load_reference_table(path)
    assert df.loc[0, "id"] == "0001"
    assert df.loc[0, "artists"] == "['A']"
    assert df.loc[0, "year"] == 2015


def test_missing_reference_is_fatal(tmp_path):
    with pytest.raises(FileNotFoundError, match="data.csv"):
        load_reference_table(tmp_path / "data.csv")


def test_list_csv_files_sorted(tmp_path):
    for name in ("c.csv", "a.csv", "b.csv"):
        (tmp_path / name).write_text("x\n1\n", encoding="utf-8")
    assert [p.name for p in list_csv_files(tmp_path)] == ["a.csv", "b.csv", "c.csv"]


def test_literal_na_words_stay_text(tmp_path):
    limited_frame([
        limited_row("t1", "NA", **{"Track Name": "None"}),
        limited_row("t2", "null", Key=""),
    ]).to_csv(tmp_path / "limited.csv", index=False)

    (table,) = load_limited_tables(tmp_path)

    assert table.loc[0, "Artist Name(s)"] == "NA"
    assert table.loc[0, "Track Name"] == "None"
    assert table.loc[1, "Artist Name(s)"] == "null"
    assert pd.isna(table.loc[1, "Key"])


def test_reference_na_artist_stays_text(tmp_path):
    path = tmp_path / "data.csv"
    reference_frame([reference_row("NaN", "['NA']", 2015)]).to_csv(path, index=False)
    df = load_reference_table(path)
    assert df.loc[0, "id"] == "NaN"
    assert df.loc[0, "artists"] == "['NA']"


def test_read_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="x.csv"):
        read_csv(tmp_path / "x.csv")


def test_write_then_read_keeps_blank_as_missing(tmp_path):
    path = tmp_path / "x.csv"
    write_csv(path, pd.DataFrame({"a": ["NA", None], "b": [1, 2]}))
    out = read_csv(path)
    assert out.loc[0, "a"] == "NA"
    assert pd.isna(out.loc[1, "a"])
    assert list(out["b"]) == [1, 2]

