import logging
from pathlib import Path


def setup_logging(project_cfg: dict, repo_root: Path | None = None) -> None:
    """
    Initialize logging using values from project config.
    Expects: project_cfg["logging"]["level"], ["fmt"], optional ["datefmt"], ["file"].
    When "file" is set, records also go to that path (parent dirs created);
    a relative path is taken from repo_root, like the paths.* entries.
    """
    log_cfg = project_cfg["logging"]
    level = getattr(logging, str(log_cfg["level"]).upper())
    fmt = log_cfg["fmt"]
    datefmt = log_cfg.get("datefmt", "%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file = log_cfg.get("file")
    if log_file:
        path = Path(log_file).expanduser()
        if not path.is_absolute() and repo_root is not None:
            path = Path(repo_root) / path
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    logging.basicConfig(level=level, format=fmt, datefmt=datefmt, handlers=handlers, force=True)
