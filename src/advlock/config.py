"""Configuration management for advlock."""

from __future__ import annotations

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, replace

from .errors import ConfigError

MIN_ATTEMPTS = 1
MIN_RETRY_DELAY = 0.0001


@dataclass
class LockConfig:
    max_attempts: int = 3
    retry_delay: float = 0.1
    temp_dir: Path | None = None  # fallback dir for external locks, default system tmp

    def normalized(self) -> "LockConfig":
        """Clamp values the same way FileLock's setters do."""
        return replace(
            self,
            max_attempts=max(MIN_ATTEMPTS, int(self.max_attempts)),
            retry_delay=max(MIN_RETRY_DELAY, float(self.retry_delay)),
        )


def _number(value, kind, key: str):
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e


def load_config(config_path: str | Path | None = None) -> LockConfig:
    """Load config from YAML file, env vars, or defaults."""
    cfg = LockConfig()

    paths_to_try = []
    if config_path:
        paths_to_try.append(Path(config_path))
    paths_to_try.extend([
        Path("advlock.yaml"),
        Path("advlock.yml"),
        Path.home() / ".advlock.yaml",
    ])

    for p in paths_to_try:
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ConfigError(f"{p}: expected a mapping at top level")

            if "max_attempts" in data:
                cfg.max_attempts = _number(data["max_attempts"], int, "max_attempts")
            if "retry_delay" in data:
                cfg.retry_delay = _number(data["retry_delay"], float, "retry_delay")
            if data.get("temp_dir"):
                cfg.temp_dir = Path(data["temp_dir"]).expanduser()
            break

    # Env overrides
    if os.environ.get("ADVLOCK_MAX_ATTEMPTS"):
        cfg.max_attempts = _number(os.environ["ADVLOCK_MAX_ATTEMPTS"], int, "ADVLOCK_MAX_ATTEMPTS")
    if os.environ.get("ADVLOCK_RETRY_DELAY"):
        cfg.retry_delay = _number(os.environ["ADVLOCK_RETRY_DELAY"], float, "ADVLOCK_RETRY_DELAY")
    if os.environ.get("ADVLOCK_TEMP_DIR"):
        cfg.temp_dir = Path(os.environ["ADVLOCK_TEMP_DIR"]).expanduser()

    return cfg.normalized()
