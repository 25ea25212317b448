"""Configuration loader for the story slideshow pipeline."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml


@dataclass
class AppConfig:
    """Wrapper around raw configuration with resolved paths."""

    raw: Dict[str, Any]
    config_path: Path
    project_root: Path
    output_dir: Path
    temp_dir: Path
    log_file: Path

    @property
    def logging_level(self) -> str:
        logging_cfg = self.section("logging")
        level = logging_cfg.get("level") or logging_cfg.get("LEVEL") or "INFO"
        return str(level).upper()

    def section(self, name: str) -> Dict[str, Any]:
        """Return a top-level config section, or an empty dict when absent."""
        value = self.raw.get(name)
        return value if isinstance(value, dict) else {}

    def to_debug_dict(self) -> Dict[str, Any]:
        return {
            "config_path": str(self.config_path),
            "output_dir": str(self.output_dir),
            "temp_dir": str(self.temp_dir),
            "log_file": str(self.log_file),
        }

    def dumps(self) -> str:
        """Return a JSON string for diagnostics."""
        return json.dumps(self.to_debug_dict(), ensure_ascii=False, indent=2)


def load_config(path: Path | str, project_root: Path | None = None) -> AppConfig:
    """Load YAML config and resolve key directories."""
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config root must be a mapping: {config_path}")

    root = project_root.resolve() if project_root else config_path.parent

    output_cfg = raw.get("output") or {}
    output_dir = (root / output_cfg.get("directory", "output")).resolve()
    temp_dir = (root / output_cfg.get("temp_directory", "temp")).resolve()
    log_file_name = (raw.get("logging") or {}).get("file", "logs/run.log")
    log_file = (root / log_file_name).resolve()

    return AppConfig(
        raw=raw,
        config_path=config_path,
        project_root=root,
        output_dir=output_dir,
        temp_dir=temp_dir,
        log_file=log_file,
    )
