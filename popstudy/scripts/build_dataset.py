
from pathlib import Path
import argparse

from common.config_manager import ConfigManager
from common.logging import setup_logging
from popstudy.cleaning.pipeline import run_pipeline


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Join the limited exports with the reference dataset, derive features and split."
    )
    parser.add_argument("--repo-root", default=".")
    parser.add_argument("--seed", type=int, default=None, help="Overrides split.seed from project.yaml")
    parser.add_argument("--no-write", action="store_true", help="Run without writing outputs")
    args = parser.parse_args(argv)

    repo_root = Path(args.repo_root).resolve()
    cm = ConfigManager(repo_root)
    setup_logging(cm.project(), repo_root=cm.root)
    run_pipeline(repo_root, seed=args.seed, write=not args.no_write)


if __name__ == "__main__":
    main()
