
from dataclasses import dataclass, field
from pathlib import Path
import logging

import pandas as pd

from common.config_manager import ConfigManager
from common.utils.io import write_csv, write_json

from popstudy.ingest.loader import load_limited_tables, load_reference_table
from popstudy.datasets.build_analysis_set import check_joined_size, join_datasets
from popstudy.features.featurize import derive_features
from popstudy.splitting.stratified import (
    DEFAULT_PROPORTIONS,
    assign_partitions,
    partition_frames,
    split_summary,
)
from .cleaning_steps import (
    normalize_limited,
    normalize_reference,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    dataset: pd.DataFrame
    train: pd.DataFrame
    validation: pd.DataFrame
    test: pd.DataFrame
    quality: dict = field(default_factory=dict)


def build_dataset(
    limited_tables: list[pd.DataFrame],
    reference: pd.DataFrame,
    min_joined_rows: int = 1,
) -> tuple[pd.DataFrame, dict]:
    """
    Normalize both inputs, join them and derive the features.
    Returns the analysis table and the data-quality counts gathered on the way.
    """
    limited, parse_failures = normalize_limited(limited_tables)
    reference = normalize_reference(reference)

    joined, join_stats = join_datasets(reference, limited)
    size_ok = check_joined_size(joined, min_joined_rows)

    dataset = derive_features(joined)
    quality = {
        "limited_files": len(limited_tables),
        "parse_failures": parse_failures,
        "join": join_stats.as_dict(),
        "joined_size_ok": size_ok,
        "popularity_unbucketed": int(
            (dataset["popularity"].notna() & dataset["popularity_range"].isna()).sum()
        ),
        "year_missing": int(dataset["year"].isna().sum()),
    }
    return dataset, quality


def _write_outputs(processed_dir: Path, result: PipelineResult) -> None:
    write_csv(processed_dir / "analysis_dataset.csv", result.dataset)
    write_csv(processed_dir / "train.csv", result.train)
    write_csv(processed_dir / "validation.csv", result.validation)
    write_csv(processed_dir / "test.csv", result.test)
    write_json(processed_dir / "data_quality.json", result.quality)
    logger.info(f"Wrote analysis dataset, splits and data_quality.json -> {processed_dir}")


def run_pipeline(repo_root: Path, seed: int | None = None, write: bool = True) -> PipelineResult:
    cm = ConfigManager(repo_root)
    project_cfg = cm.project()
    cm.require_keys(project_cfg, ["paths", "split"])

    limited_dir = cm.path(project_cfg, "limited_dir")
    reference_csv = cm.path(project_cfg, "reference_csv")
    processed_dir = cm.path(project_cfg, "processed_dir")

    split_cfg = project_cfg["split"]
    seed = split_cfg.get("seed") if seed is None else seed
    if seed is None:
        raise KeyError("Missing required key 'seed' in split config")
    proportions = split_cfg.get("proportions", list(DEFAULT_PROPORTIONS))
    stratify_col = split_cfg.get("stratify_col", "decade")
    min_rows = int(project_cfg.get("quality", {}).get("min_joined_rows", 1))

    limited_tables = load_limited_tables(limited_dir)
    reference = load_reference_table(reference_csv)

    dataset, quality = build_dataset(
        limited_tables,
        reference,
        min_joined_rows=min_rows,
    )

    assignment = assign_partitions(
        dataset, seed=int(seed), stratify_col=stratify_col, proportions=proportions
    )
    quality["split"] = split_summary(
        dataset, assignment, stratify_col=stratify_col, proportions=proportions
    )
    quality["split"]["seed"] = int(seed)
    train, validation, test = partition_frames(dataset, assignment)

    result = PipelineResult(dataset, train, validation, test, quality)
    if write:
        _write_outputs(processed_dir, result)
    return result
