
import os
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv

ENV_PREFIX = "POPSTUDY_"


class ConfigManager:
    """
    Minimal, strict config loader for the popularity study.
    """

    def __init__(self, repo_root: Path) -> None:
        self.root = Path(repo_root).resolve()
        self.config_dir = self.root / "configs"
        # Load .env from repo root (OS env vars keep precedence)
        load_dotenv(self.root / ".env", override=False)
        if not self.config_dir.is_dir():
            raise FileNotFoundError(f"Configs directory not found: {self.config_dir}")

    # ---------------------------
    # Public API
    # ---------------------------

    def project(self) -> Dict[str, Any]:
        """Return configs/project.yaml as a dict."""
        return self._load_yaml(self.config_dir / "project.yaml")

    def env(self, key: str, default: str | None = None) -> str | None:
        """
        Read an environment variable (.env values included, OS env wins).
        No defaults are injected unless you pass one explicitly.
        """
        return os.getenv(key, default)

    def path(self, project_cfg: Dict[str, Any], key: str) -> Path:
        """
        Resolve paths.<key> against the repo root.
        POPSTUDY_<KEY> in the environment (or .env) overrides the YAML value.
        """
        override = self.env(f"{ENV_PREFIX}{key.upper()}")
        if override:
            raw = override
        else:
            paths = project_cfg.get("paths", {})
            self.require_keys(paths, [key])
            raw = paths[key]
        p = Path(raw).expanduser()
        return p if p.is_absolute() else self.root / p

    @staticmethod
    def require_keys(config: Dict[str, Any], keys: list[str]) -> None:
        """
        Assert that a list of keys exists in a given config dict.
        Raises KeyError on the first missing key.
        """
        for k in keys:
            if k not in config:
                raise KeyError(f"Missing required key '{k}' in config")

    # ---------------------------
    # Internals
    # ---------------------------

    @staticmethod
    def _load_yaml(path: Path) -> Dict[str, Any]:
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Config must be a YAML mapping (dict): {path}")

        return data
